import logging
import threading
import time

from GestureClassifier import GestureClassifier
from GestureStabilizer import GestureStabilizer
from GestureTypes import GestureLabel
from HandData import FrameValidationError, LandmarkFrame
from IdleMonitor import IdleMonitor
from SentenceAssembler import SentenceAssembler
from Timers import TimerScheduler
from helpers import (
    ConfigurationError,
    merge_config,
    section,
    validate_config,
    validate_word_table,
)

log = logging.getLogger(__name__)

STOPPED = "stopped"
RUNNING = "running"


class SessionStartError(RuntimeError):
    """A session could not start because an external resource was unavailable."""


class DisplayState:
    """Snapshot of everything a live view shows; refreshed every frame."""

    def __init__(self, **fields):
        self.running = fields.get("running", False)
        self.idle = fields.get("idle", True)
        self.sentence_in_progress = fields.get("sentence_in_progress", "")
        self.chunk = fields.get("chunk", [])
        self.detected_gesture = fields.get("detected_gesture")
        self.transcript = fields.get("transcript", "")
        self.last_translation = fields.get("last_translation")
        self.debug = fields.get("debug", "")
        self.error = fields.get("error")

    def to_dict(self):
        return {
            "type": "display",
            "running": self.running,
            "idle": self.idle,
            "sentence_in_progress": self.sentence_in_progress,
            "chunk": list(self.chunk),
            "detected_gesture": self.detected_gesture,
            "transcript": self.transcript,
            "last_translation": (
                self.last_translation.to_dict() if self.last_translation else None
            ),
            "debug": self.debug,
            "error": self.error,
        }


class SessionController:
    """
    Runs one recognition session: classifier -> stabilizer -> assembler, with
    the idle monitor fed by the same frames.

    Every public method takes the session lock, and timers only fire from
    process_frame()/tick(), so frame handling, timer callbacks and stop() are
    serialized against the same state. Finalized sentences are queued under the
    lock and handed to the speech sink only after it is released, so a slow
    sink never holds up stop() or snapshot().
    """

    def __init__(self, cfg=None, speech=None, clock=time.monotonic):
        validate_config(cfg)
        self.cfg = merge_config(cfg or {}, {})
        self.speech = speech
        self.clock = clock
        self.state = STOPPED
        self._lock = threading.RLock()
        self._speech_lock = threading.Lock()
        self._pending_speech = []

        self.scheduler = TimerScheduler()
        self.classifier = GestureClassifier(self.cfg)
        self.stabilizer = GestureStabilizer(self.cfg)
        self.assembler = SentenceAssembler(
            self.scheduler, self.cfg, on_finalized=self._on_finalized
        )
        self.idle = IdleMonitor(self.scheduler, self.cfg, on_idle=self._on_idle)

        self.detected_gesture = None
        self.last_translation = None
        self.debug = ""
        self.error = None

    @property
    def running(self):
        return self.state == RUNNING

    def _now(self, now):
        return self.clock() if now is None else now

    # ---------- configuration ----------
    def update_config(self, cfg):
        """
        Apply new tuning live. Everything is checked before anything changes:
        a bad value raises ConfigurationError and the running config stays.
        """
        validate_config(cfg)
        validate_word_table(section(cfg, "words"), GestureLabel)
        with self._lock:
            self.cfg = merge_config(cfg or {}, {})
            self.assembler.update_config(self.cfg)
            self.classifier.update_config(self.cfg)
            self.stabilizer.update_config(self.cfg)
            self.idle.update_config(self.cfg)
            if self.speech is not None:
                self.speech.update_config(self.cfg)

    # ---------- lifecycle ----------
    def start(self, now=None, prepare=None):
        """
        Reset all session state and begin accepting frames.

        prepare: optional callable run first to acquire external resources
        (camera, detector); its result is returned. If it raises, the session
        stays stopped and SessionStartError is raised.
        """
        with self._lock:
            if self.state == RUNNING:
                log.info("start() ignored, session already running")
                return None

            # an incomplete word table must fail here, not on the first gesture
            self.assembler.update_config(self.cfg)

            resources = None
            if prepare is not None:
                try:
                    resources = prepare()
                except Exception as e:
                    self.error = f"Failed to start gesture recognition: {e}"
                    log.error(self.error)
                    raise SessionStartError(self.error) from e

            now = self._now(now)
            self.scheduler.cancel_all()
            self.stabilizer.reset()
            self.assembler.reset()
            self.idle.reset()
            if self.speech is not None:
                self.speech.reset()
            self._pending_speech = []
            self.detected_gesture = None
            self.last_translation = None
            self.error = None
            self.debug = "Starting gesture recognition"

            self.state = RUNNING
            self.idle.touch(now)
            log.info("Session started")
            return resources

    def stop(self, now=None):
        """
        Flush any in-progress sentence and stop. Returns the flushed
        FinalizedTranslation, or None. Calling stop() twice is harmless.
        """
        try:
            with self._lock:
                if self.state == STOPPED:
                    return None
                self.state = STOPPED
                self.scheduler.cancel_all()
                result = self.assembler.finalize()

                self.stabilizer.reset()
                self.idle.reset()
                self.detected_gesture = None
                self.debug = "Stopped gesture recognition"
                log.info("Session stopped")
                return result
        finally:
            self._drain_speech()

    def reset_transcript(self):
        with self._lock:
            self.assembler.clear_transcript()
            self.last_translation = None

    # ---------- frame driver ----------
    def tick(self, now=None):
        """Fire due timers when no frame arrived; called by the driver between frames."""
        try:
            with self._lock:
                if self.state != RUNNING:
                    return 0
                return self.scheduler.run_due(self._now(now))
        finally:
            self._drain_speech()

    def process_frame(self, hands, now=None):
        """
        Run one classification cycle.

        hands: the landmark sets detected in this frame (empty when no hand is
        in view). Only the first hand is classified. Returns the AcceptedGesture
        produced by this frame, if any. A malformed landmark set is logged and
        the frame skipped; a missing word for an accepted gesture raises
        ConfigurationError.
        """
        try:
            with self._lock:
                return self._process_frame(hands, now)
        finally:
            self._drain_speech()

    def _process_frame(self, hands, now):
        if self.state != RUNNING:
            return None
        now = self._now(now)
        self.scheduler.run_due(now)

        if not hands:
            self.stabilizer.observe(None, now)
            self.debug = "No hands detected"
            return None

        try:
            frame = LandmarkFrame(hands[0])
        except FrameValidationError as e:
            self.error = f"Error processing video frame: {e}"
            log.warning(self.error)
            return None

        self.idle.touch(now)
        states = self.classifier.finger_states(frame)
        candidate = self.classifier.candidate_for(states, now)
        self.debug = self.classifier.trace(states, candidate)

        accepted = self.stabilizer.observe(candidate, now)
        if accepted is None:
            return None

        try:
            word = self.assembler.on_accepted(accepted, now)
        except ConfigurationError as e:
            self.error = str(e)
            log.error("Configuration error: %s", e)
            raise
        self.detected_gesture = accepted
        self.debug = f"Accepted: {word}"
        return accepted

    # ---------- callbacks ----------
    def _on_finalized(self, translation):
        self.last_translation = translation
        if self.speech is not None:
            self._pending_speech.append(translation.translated)

    def _on_idle(self, deadline):
        self.assembler.on_idle_tick()
        self.stabilizer.reset()
        self.detected_gesture = None
        self.debug = "Idle - make a gesture to start translation"

    # ---------- speech ----------
    def _drain_speech(self):
        """Speak queued sentences in order. Must not be called with the session lock held."""
        while self._pending_speech:
            # whoever holds the speech lock empties the queue
            if not self._speech_lock.acquire(blocking=False):
                return
            try:
                while True:
                    with self._lock:
                        if not self._pending_speech:
                            break
                        text = self._pending_speech.pop(0)
                    self.speech.speak(text)
                    if self.speech.last_error:
                        with self._lock:
                            self.error = self.speech.last_error
            finally:
                self._speech_lock.release()

    # ---------- outbound display ----------
    def snapshot(self):
        with self._lock:
            chunk = self.assembler.chunk
            return DisplayState(
                running=self.running,
                idle=self.idle.is_idle,
                sentence_in_progress=self.assembler.sentence_in_progress,
                chunk=[g.name.value for g in chunk.gestures] if chunk else [],
                detected_gesture=(
                    self.detected_gesture.name.value if self.detected_gesture else None
                ),
                transcript=self.assembler.transcript,
                last_translation=self.last_translation,
                debug=self.debug,
                error=self.error,
            )

    @property
    def transcript(self):
        return self.assembler.transcript
