import re

from GestureTypes import FinalizedTranslation, GestureLabel
from helpers import section, validate_word_table

UNKNOWN_SIGN = "unknown_sign"
# fixed: a dictionary lookup, not a model score
LOOKUP_CONFIDENCE = 0.8

_TOKEN = re.compile(r"[\w']+")


class SignLookup:
    """Reverse direction: spoken text -> the gesture labels whose words it contains."""

    def __init__(self, cfg=None):
        table = validate_word_table(section(cfg, "words"), GestureLabel)
        self.by_word = {word.lower(): label for label, word in table.items()}
        # multi-word phrases are matched before single words
        self._phrases = sorted(
            (w for w in self.by_word if " " in w), key=len, reverse=True
        )

    def labels_for(self, text):
        text = (text or "").lower()
        for phrase in self._phrases:
            text = re.sub(r"\b%s\b" % re.escape(phrase), phrase.replace(" ", "_"), text)

        labels = []
        for token in _TOKEN.findall(text):
            label = self.by_word.get(token.replace("_", " "))
            if label is not None:
                labels.append(GestureLabel(label))
        return labels

    def translate(self, text):
        labels = self.labels_for(text)
        return FinalizedTranslation(
            original=text,
            translated=" ".join(label.value for label in labels) if labels else UNKNOWN_SIGN,
            confidence=LOOKUP_CONFIDENCE,
        )
