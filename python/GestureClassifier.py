# GestureClassifier.py
from FeatureExtractor import finger_states, describe
from HandData import LandmarkFrame
from GestureTypes import GestureCandidate, GestureLabel
from helpers import section


# Rows are checked top to bottom; a feature missing from a row matches either value.
# Together with `thumb_down` no two rows can match the same finger state.
DECISION_TABLE = (
    (GestureLabel.VICTORY,
     {"thumb": False, "index": True, "middle": True, "ring": False, "pinky": False}),
    (GestureLabel.POINTING_UP,
     {"thumb": False, "index": True, "middle": False, "ring": False, "pinky": False}),
    (GestureLabel.THUMBS_UP,
     {"thumb": True, "index": False, "middle": False, "ring": False, "pinky": False,
      "thumb_down": False}),
    (GestureLabel.THUMBS_DOWN,
     {"index": False, "middle": False, "ring": False, "pinky": False, "thumb_down": True}),
    (GestureLabel.OPEN_PALM,
     {"thumb": True, "index": True, "middle": True, "ring": True, "pinky": True}),
    (GestureLabel.CLOSED_FIST,
     {"thumb": False, "index": False, "middle": False, "ring": False, "pinky": False,
      "thumb_down": False}),
)


def match_label(states):
    for label, row in DECISION_TABLE:
        if all(getattr(states, feature) == wanted for feature, wanted in row.items()):
            return label
    return None


class GestureClassifier:
    """
    Stateless single-frame classifier over finger extension heuristics.

    The confidence attached to every match is a fixed configured value, not a
    statistic: the table is a hand-tuned heuristic.
    """

    def __init__(self, cfg=None):
        self.update_config(cfg)

    def update_config(self, cfg):
        c = section(cfg, "classifier")
        self.extension_margin = c["extension_margin"]
        self.thumb_margin = c["thumb_margin"]
        self.thumb_down_margin = c["thumb_down_margin"]
        self.confidence = c["confidence"]

    def finger_states(self, frame):
        if not isinstance(frame, LandmarkFrame):
            frame = LandmarkFrame(frame)
        return finger_states(
            frame,
            extension_margin=self.extension_margin,
            thumb_margin=self.thumb_margin,
            thumb_down_margin=self.thumb_down_margin,
        )

    def candidate_for(self, states, now):
        label = match_label(states)
        if label is None:
            return None
        return GestureCandidate(label, self.confidence, now)

    def classify(self, frame, now=None):
        """Returns a GestureCandidate, or None when no row of the table matches."""
        return self.candidate_for(self.finger_states(frame), now)

    def trace(self, states, candidate):
        text = describe(states)
        return f"{text} -> {candidate.name.value if candidate else 'no match'}"
