import logging

from helpers import section

log = logging.getLogger(__name__)


class SpeechDispatcher:
    """
    Hands finalized sentences to a speech sink exactly once.

    sink: callable(text, options) where options carries lang/rate/pitch/volume.
    A sentence identical to the one spoken last is not spoken again.
    """

    def __init__(self, sink, cfg=None):
        self.sink = sink
        self.last_spoken = None
        self.last_error = None
        self.update_config(cfg)

    def update_config(self, cfg):
        self.options = section(cfg, "speech")

    def speak(self, text):
        text = (text or "").strip()
        if not text or text == self.last_spoken:
            return False
        # remembered even when the sink fails, so a broken sink never replays
        self.last_spoken = text
        try:
            self.sink(text, dict(self.options))
        except Exception as e:
            self.last_error = f"Speech synthesis error: {e}"
            log.error(self.last_error)
            return False
        self.last_error = None
        return True

    def reset(self):
        self.last_spoken = None
        self.last_error = None


class EventSpeechSink:
    """Publishes utterances as {"type": "speech"} events on a Network publisher."""

    def __init__(self, publisher):
        self.publisher = publisher

    def __call__(self, text, options):
        event = {"type": "speech", "text": text}
        event.update(options)
        self.publisher.send_event(event)
