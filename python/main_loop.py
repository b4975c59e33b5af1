import logging
import threading
import time
from queue import Queue, Empty, Full

import cv2

from HandTracker import HandTracker
from Network import make_publisher
from Replay import Recorder
from SessionController import SessionController, SessionStartError
from SpeechOutput import EventSpeechSink, SpeechDispatcher
from helpers import ConfigWatcher, ConfigurationError, merge_config, section

log = logging.getLogger(__name__)

# --------------------------------------------------------
# Queue for latest frame only (overwrite when full)
# --------------------------------------------------------
FRAME_QUEUE_MAX = 1
TICK_INTERVAL = 0.1  # seconds without a frame before timers are polled


def open_sources(cfg):
    """Camera + detector for one session; raises when either is unavailable."""
    index = section(cfg, "camera")["index"]
    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        cap.release()
        raise RuntimeError(f"cannot open camera {index}")
    try:
        tracker = HandTracker(cfg)
    except Exception:
        cap.release()
        raise
    return cap, tracker


# --------------------------------------------------------
# CAPTURE THREAD
# --------------------------------------------------------
def capture_thread(cap, tracker, frame_queue, stop_event, recorder=None):
    log.info("Capture thread started.")

    while not stop_event.is_set():
        ok, frame = cap.read()
        if not ok:
            time.sleep(0.01)
            continue

        now = time.monotonic()
        # mirror view, MediaPipe wants RGB
        frame = cv2.flip(frame, 1)
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        hands, raw = tracker.process_frame(rgb)
        if recorder is not None:
            recorder.write(now, hands)

        # keep only the newest sample; the recognizer never works on stale frames
        if frame_queue.full():
            try:
                frame_queue.get_nowait()
            except Empty:
                pass
        try:
            frame_queue.put_nowait((frame, hands, raw, now))
        except Full:
            pass

    log.info("Capture thread exiting.")


def draw_overlay(frame, display):
    lines = [
        f"sentence: {display.sentence_in_progress or '-'}",
        f"transcript: {display.transcript[-60:] or '-'}",
        display.debug,
    ]
    if display.idle:
        lines.insert(0, "idle - make a gesture to start")
    if display.error:
        lines.append(f"error: {display.error}")
    for i, line in enumerate(lines):
        cv2.putText(
            frame,
            line,
            (10, 30 + i * 26),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            (0, 0, 255) if line.startswith("error") else (0, 255, 0),
            2,
            cv2.LINE_AA,
        )


# --------------------------------------------------------
# RECOGNITION THREAD
# --------------------------------------------------------
def recognition_thread(
    controller, tracker, frame_queue, stop_event, publisher, cfg_watcher, overrides=None
):
    current_raw = cfg_watcher.get_config()
    debug_cfg = section(merge_config(current_raw, overrides), "debug")
    window = "Sign to Speech"
    if debug_cfg["show_window"]:
        cv2.namedWindow(window, cv2.WINDOW_NORMAL)

    log.info("Recognition thread started.")

    try:
        while not stop_event.is_set():
            new_raw = cfg_watcher.check_reload()
            if new_raw is not current_raw:
                # command line overrides survive reloads
                new_cfg = merge_config(new_raw, overrides)
                try:
                    controller.update_config(new_cfg)
                    debug_cfg = section(new_cfg, "debug")
                except ConfigurationError as e:
                    log.error("Rejected config update: %s", e)
                current_raw = new_raw

            try:
                frame, hands, raw, timestamp = frame_queue.get(timeout=TICK_INTERVAL)
            except Empty:
                controller.tick()
                publisher.send_event(controller.snapshot().to_dict())
                continue

            try:
                controller.process_frame(hands, now=timestamp)
            except ConfigurationError:
                break

            display = controller.snapshot()
            publisher.send_event(display.to_dict())

            if debug_cfg["show_window"]:
                if debug_cfg["draw_landmarks"]:
                    tracker.draw(frame, raw)
                draw_overlay(frame, display)
                cv2.imshow(window, frame)
                if cv2.waitKey(1) & 0xFF == 27:  # ESC
                    break
    finally:
        # whatever ends this thread ends the whole pipeline
        stop_event.set()
        if debug_cfg["show_window"]:
            cv2.destroyAllWindows()
        log.info("Recognition thread exiting.")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(config_path="config.json", transport=None, headless=False, record_path=None):
    cfg_watcher = ConfigWatcher(config_path)
    overrides = {}
    if transport:
        overrides["network"] = {"transport": transport}
    if headless:
        overrides["debug"] = {"show_window": False}
    cfg = merge_config(cfg_watcher.get_config(), overrides)

    publisher = make_publisher(cfg)
    speech = SpeechDispatcher(EventSpeechSink(publisher), cfg)
    controller = SessionController(cfg, speech=speech)

    try:
        cap, tracker = controller.start(prepare=lambda: open_sources(cfg))
    except SessionStartError as e:
        log.error("%s", e)
        publisher.send_event(controller.snapshot().to_dict())
        publisher.close()
        return 1

    recorder = Recorder(record_path) if record_path else None
    frame_queue = Queue(maxsize=FRAME_QUEUE_MAX)
    stop_event = threading.Event()

    # --------------- start threads ----------------
    cap_thread = threading.Thread(
        target=capture_thread,
        args=(cap, tracker, frame_queue, stop_event, recorder),
        daemon=True,
    )
    rec_thread = threading.Thread(
        target=recognition_thread,
        args=(controller, tracker, frame_queue, stop_event, publisher, cfg_watcher, overrides),
        daemon=True,
    )

    cap_thread.start()
    rec_thread.start()

    # Keep main thread alive
    try:
        while not stop_event.is_set():
            time.sleep(0.1)
    except KeyboardInterrupt:
        stop_event.set()

    # the capture thread may still be writing the recording until it exits
    cap_thread.join()
    rec_thread.join()

    controller.stop()
    publisher.send_event(controller.snapshot().to_dict())

    cap.release()
    tracker.close()
    if recorder is not None:
        recorder.close()
    publisher.close()
    log.info("Shutdown complete.")
    return 0
