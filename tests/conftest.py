import pytest

from GestureTypes import GestureLabel
from helpers import merge_config, DEFAULT_CONFIG

WRIST = (0.5, 0.8, 0.0)
FINGER_X = {"index": 0.45, "middle": 0.5, "ring": 0.55, "pinky": 0.6}
FINGER_ORDER = ("index", "middle", "ring", "pinky")
MCP_Y = 0.6


def build_hand(thumb=False, index=False, middle=False, ring=False, pinky=False, thumb_down=False):
    """21 landmarks of an upright right hand in normalized image coordinates."""
    pts = [WRIST]

    # thumb: CMC, MCP, IP, TIP; MCP reach from wrist is 0.08
    if thumb_down:
        tip = (0.46, 0.9)
    elif thumb:
        tip = (0.30, 0.65)
    else:
        tip = (0.46, 0.68)
    mcp = (0.42, 0.7)
    pts.append((0.46, 0.75, 0.0))
    pts.append((mcp[0], mcp[1], 0.0))
    pts.append(((mcp[0] + tip[0]) / 2, (mcp[1] + tip[1]) / 2, 0.0))
    pts.append((tip[0], tip[1], 0.0))

    state = {"index": index, "middle": middle, "ring": ring, "pinky": pinky}
    for name in FINGER_ORDER:
        x = FINGER_X[name]
        ys = (0.5, 0.45, 0.4) if state[name] else (0.55, 0.6, 0.65)
        pts.append((x, MCP_Y, 0.0))
        for y in ys:
            pts.append((x, y, 0.0))
    assert len(pts) == 21
    return [list(p) for p in pts]


POSES = {
    GestureLabel.VICTORY: dict(index=True, middle=True),
    GestureLabel.POINTING_UP: dict(index=True),
    GestureLabel.THUMBS_UP: dict(thumb=True),
    GestureLabel.THUMBS_DOWN: dict(thumb_down=True),
    GestureLabel.OPEN_PALM: dict(thumb=True, index=True, middle=True, ring=True, pinky=True),
    GestureLabel.CLOSED_FIST: dict(),
}


@pytest.fixture
def make_hand():
    return build_hand


@pytest.fixture
def pose():
    """pose(label) -> landmark list showing that gesture."""

    def _pose(label):
        return build_hand(**POSES[GestureLabel(label)])

    return _pose


@pytest.fixture
def config():
    """config(**sections) -> defaults with the given sections merged in."""

    def _config(**sections):
        return merge_config(DEFAULT_CONFIG, sections)

    return _config


class RecordingSink:
    def __init__(self):
        self.spoken = []

    def __call__(self, text, options):
        self.spoken.append((text, options))

    @property
    def texts(self):
        return [t for t, _ in self.spoken]


@pytest.fixture
def sink():
    return RecordingSink()
