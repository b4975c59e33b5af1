from enum import Enum


class GestureLabel(str, Enum):
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"
    VICTORY = "victory"
    POINTING_UP = "pointing_up"
    OPEN_PALM = "open_palm"
    CLOSED_FIST = "closed_fist"

    def __str__(self):
        return self.value


class GestureCandidate:
    """Classifier output for a single frame."""

    __slots__ = ("name", "confidence", "observed_at")

    def __init__(self, name, confidence, observed_at):
        if not 0.0 < confidence <= 1.0:
            raise ValueError(f"confidence must be in (0, 1], got {confidence}")
        self.name = GestureLabel(name)
        self.confidence = float(confidence)
        self.observed_at = observed_at

    def __repr__(self):
        return (
            f"{type(self).__name__}(name={self.name.value!r}, "
            f"confidence={self.confidence:.2f}, observed_at={self.observed_at!r})"
        )

    def __eq__(self, other):
        if not isinstance(other, GestureCandidate):
            return NotImplemented
        return (self.name, self.confidence, self.observed_at) == (
            other.name,
            other.confidence,
            other.observed_at,
        )

    def __hash__(self):
        return hash((self.name, self.confidence, self.observed_at))

    def to_dict(self):
        return {
            "name": self.name.value,
            "confidence": self.confidence,
            "observed_at": self.observed_at,
        }


class AcceptedGesture(GestureCandidate):
    """A candidate that passed both the stability and the cooldown checks."""

    __slots__ = ()


class ConversationChunk:
    """The sentence currently being built out of accepted gestures."""

    def __init__(self, started_at):
        self.gestures = []
        self.words = []
        self.started_at = started_at

    @property
    def text(self):
        return " ".join(self.words).strip()

    def append(self, gesture, word):
        self.gestures.append(gesture)
        self.words.append(word)

    def is_empty(self):
        return not self.gestures

    def to_dict(self):
        return {
            "gestures": [g.to_dict() for g in self.gestures],
            "text": self.text,
            "started_at": self.started_at,
        }


class FinalizedTranslation:
    def __init__(self, original, translated, confidence):
        self.original = original
        self.translated = translated
        self.confidence = confidence

    def __repr__(self):
        return (
            f"FinalizedTranslation(original={self.original!r}, "
            f"translated={self.translated!r}, confidence={self.confidence:.2f})"
        )

    def to_dict(self):
        return {
            "original": self.original,
            "translated": self.translated,
            "confidence": self.confidence,
        }
