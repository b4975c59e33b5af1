from SpeechOutput import EventSpeechSink, SpeechDispatcher


class FakePublisher:
    def __init__(self):
        self.events = []

    def send_event(self, event):
        self.events.append(event)


def test_options_are_passed_through(sink):
    speech = SpeechDispatcher(sink, {"speech": {"lang": "es-ES", "rate": 1.2}})
    assert speech.speak("hola")
    text, options = sink.spoken[0]
    assert text == "hola"
    assert options["lang"] == "es-ES"
    assert options["rate"] == 1.2
    assert options["volume"] == 1.0


def test_consecutive_duplicates_are_dropped(sink):
    speech = SpeechDispatcher(sink)
    assert speech.speak("hello")
    assert not speech.speak("hello")
    assert speech.speak("stop")
    assert speech.speak("hello")
    assert sink.texts == ["hello", "stop", "hello"]


def test_blank_text_is_not_spoken(sink):
    speech = SpeechDispatcher(sink)
    assert not speech.speak("   ")
    assert not speech.speak(None)
    assert sink.texts == []


def test_reset_allows_repeat(sink):
    speech = SpeechDispatcher(sink)
    speech.speak("hello")
    speech.reset()
    assert speech.speak("hello")


def test_sink_error_is_recorded_once():
    calls = []

    def broken(text, options):
        calls.append(text)
        raise RuntimeError("no voices")

    speech = SpeechDispatcher(broken)
    assert not speech.speak("hello")
    assert "no voices" in speech.last_error
    # not retried for the same sentence
    assert not speech.speak("hello")
    assert calls == ["hello"]


def test_event_sink_publishes_speech_events():
    publisher = FakePublisher()
    speech = SpeechDispatcher(EventSpeechSink(publisher))
    speech.speak("peace")
    event = publisher.events[0]
    assert event["type"] == "speech"
    assert event["text"] == "peace"
    assert event["lang"] == "en-US"
