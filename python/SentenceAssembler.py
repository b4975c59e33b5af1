import logging

from GestureTypes import ConversationChunk, FinalizedTranslation, GestureLabel
from helpers import ConfigurationError, section, validate_word_table

log = logging.getLogger(__name__)

FINALIZE_TIMER = "finalize"


class SentenceAssembler:
    """
    Builds sentences out of accepted gestures.

    Each accepted gesture is looked up in the word table and appended to the live
    chunk; every acceptance restarts the finalize timer. When the timer fires (or
    finalize() is called on stop) a non-empty chunk becomes a FinalizedTranslation,
    is appended to the transcript and handed to `on_finalized`.
    """

    def __init__(self, scheduler, cfg=None, on_finalized=None):
        self.scheduler = scheduler
        self.on_finalized = on_finalized
        self.chunk = None
        self.translations = []
        self.update_config(cfg)

    def update_config(self, cfg):
        a = section(cfg, "assembler")
        words = validate_word_table(section(cfg, "words"), GestureLabel)
        self.sentence_timeout = float(a["sentence_timeout"])
        self.separator = a["transcript_separator"]
        self.words = words

    # ---------- live sentence ----------
    @property
    def sentence_in_progress(self):
        return self.chunk.text if self.chunk else ""

    @property
    def transcript(self):
        return self.separator.join(t.translated for t in self.translations)

    def word_for(self, label):
        key = getattr(label, "value", label)
        word = self.words.get(key)
        if not word:
            raise ConfigurationError(f"no word configured for gesture '{key}'")
        return word

    def on_accepted(self, gesture, now=None):
        word = self.word_for(gesture.name)
        if now is None:
            now = gesture.observed_at
        if self.chunk is None:
            self.chunk = ConversationChunk(started_at=now)
        self.chunk.append(gesture, word)
        log.debug("sentence so far: %r", self.chunk.text)
        self.scheduler.schedule(
            FINALIZE_TIMER, self.sentence_timeout, self._on_timeout, now
        )
        return word

    def _on_timeout(self, deadline):
        self.finalize()

    def finalize(self):
        """Emit the live chunk if it holds anything. Safe to call repeatedly."""
        self.scheduler.cancel(FINALIZE_TIMER)
        chunk, self.chunk = self.chunk, None
        if chunk is None or chunk.is_empty():
            return None

        confidence = sum(g.confidence for g in chunk.gestures) / len(chunk.gestures)
        result = FinalizedTranslation(
            original=" ".join(g.name.value for g in chunk.gestures),
            translated=chunk.text.strip(),
            confidence=confidence,
        )
        self.translations.append(result)
        log.info("Finalized sentence: %s", result.translated)
        if self.on_finalized is not None:
            self.on_finalized(result)
        return result

    def on_idle_tick(self):
        """Idle timeout: drop the live chunk without emitting it."""
        self.scheduler.cancel(FINALIZE_TIMER)
        if self.chunk is not None and not self.chunk.is_empty():
            log.info("Idle, discarding unfinished sentence: %s", self.chunk.text)
        self.chunk = None

    def clear_transcript(self):
        self.translations = []

    def reset(self):
        self.on_idle_tick()
        self.clear_transcript()
