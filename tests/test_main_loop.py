import threading
from queue import Queue

import numpy as np

from Replay import Recorder, read_recording
from SessionController import SessionController
from helpers import DEFAULT_CONFIG, merge_config
from main_loop import capture_thread, recognition_thread

HEADLESS = {"debug": {"show_window": False}}


class FakeWatcher:
    def __init__(self, first, later):
        self.first = first
        self.later = later

    def get_config(self):
        return self.first

    def check_reload(self):
        return self.later


class FakePublisher:
    def __init__(self):
        self.events = []

    def send_event(self, event):
        self.events.append(event)
        return True


class FakeCamera:
    def __init__(self, stop_event, frames):
        self.stop_event = stop_event
        self.frames = frames

    def read(self):
        self.frames -= 1
        if self.frames <= 0:
            self.stop_event.set()
        return True, np.zeros((4, 4, 3), dtype=np.uint8)


class FakeTracker:
    def process_frame(self, rgb):
        return [], []


def test_bad_reload_is_rejected_and_a_fatal_error_stops_the_pipeline(pose):
    cfg = merge_config(DEFAULT_CONFIG, {})
    bad = merge_config(cfg, {"classifier": {"confidence": 1.5}})
    controller = SessionController(cfg)
    controller.start(now=0.0)
    del controller.assembler.words["victory"]

    frames = Queue()
    for i in range(1, 31):
        frames.put((None, [pose("victory")], None, i / 30.0))
    stop_event = threading.Event()
    publisher = FakePublisher()

    recognition_thread(
        controller, FakeTracker(), frames, stop_event, publisher,
        FakeWatcher(cfg, bad), overrides=HEADLESS,
    )

    assert stop_event.is_set()
    assert controller.classifier.confidence == 0.9
    assert "victory" in controller.snapshot().error
    assert publisher.events


def test_capture_writes_every_frame_before_returning(tmp_path):
    path = tmp_path / "live.jsonl"
    stop_event = threading.Event()
    frames = Queue(maxsize=1)
    with Recorder(str(path)) as recorder:
        capture_thread(FakeCamera(stop_event, 5), FakeTracker(), frames, stop_event, recorder)

    recorded = list(read_recording(str(path)))
    assert len(recorded) == 5
    assert all(hands == [] for _, hands in recorded)
    assert frames.qsize() == 1
