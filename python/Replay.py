"""
Recording and offline replay of landmark streams.

A recording is JSON lines, one frame per line:
    {"t": 12.533, "hands": [[[x, y, z], ... 21 points], ...]}
"hands" is an empty list for frames without a hand.
"""

import json
import logging

from helpers import ConfigurationError

log = logging.getLogger(__name__)


class Recorder:
    def __init__(self, path):
        self.path = path
        self._fh = open(path, "w", encoding="utf-8")

    def write(self, t, hands):
        self._fh.write(json.dumps({"t": t, "hands": hands}) + "\n")

    def close(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def read_recording(path):
    """Yields (t, hands) per frame. Blank lines are skipped."""
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
                yield float(entry["t"]), entry.get("hands") or []
            except (ValueError, KeyError, TypeError) as e:
                raise ValueError(f"{path}:{lineno}: bad recording line: {e}") from None


def replay(controller, frames, settle=None):
    """
    Feed recorded frames through a SessionController with their own timestamps.

    The session is started at the first frame's time and stopped after the
    last one; `settle` seconds of silence are ticked through before stopping
    so pending sentence timers can fire. Returns the finalized translations.
    """
    produced = []
    original_hook = controller.assembler.on_finalized

    def collect(translation):
        produced.append(translation)
        if original_hook is not None:
            original_hook(translation)

    controller.assembler.on_finalized = collect
    try:
        started = False
        last_t = None
        for t, hands in frames:
            if not started:
                controller.start(now=t)
                started = True
            try:
                controller.process_frame(hands, now=t)
            except ConfigurationError:
                controller.stop(now=t)
                raise
            last_t = t

        if started:
            if settle:
                controller.tick(now=last_t + settle)
            controller.stop(now=last_t + (settle or 0.0))
    finally:
        controller.assembler.on_finalized = original_hook

    log.info("Replayed recording, %d sentence(s)", len(produced))
    return produced
