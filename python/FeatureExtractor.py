from collections import namedtuple

import numpy as np

from HandData import (
    WRIST,
    THUMB_MCP,
    THUMB_TIP,
    INDEX_MCP,
    INDEX_TIP,
    MIDDLE_MCP,
    MIDDLE_TIP,
    RING_MCP,
    RING_TIP,
    PINKY_MCP,
    PINKY_TIP,
)


# ==========================================
# 1. FINGER STATES (Pure Functions)
# ==========================================
FINGER_NAMES = ("thumb", "index", "middle", "ring", "pinky")

# tip/MCP pairs of the four long fingers, index..pinky
FINGER_TIPS = np.array([INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP])
FINGER_MCPS = np.array([INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP])

FingerStates = namedtuple("FingerStates", FINGER_NAMES + ("thumb_down",))


def fingers_extended(points, margin):
    """
    Extended when the tip sits above its MCP joint by more than `margin`
    (image y grows downward). Returns a bool array for index..pinky.
    """
    tips_y = points[FINGER_TIPS, 1]
    mcps_y = points[FINGER_MCPS, 1]
    return tips_y < mcps_y - margin


def thumb_extended(points, margin):
    """The thumb opens sideways: compare horizontal reach from the wrist, tip vs MCP."""
    wrist_x = points[WRIST, 0]
    tip_reach = abs(points[THUMB_TIP, 0] - wrist_x)
    mcp_reach = abs(points[THUMB_MCP, 0] - wrist_x)
    return bool(tip_reach > mcp_reach + margin)


def thumb_pointing_down(points, margin):
    return bool(points[THUMB_TIP, 1] > points[WRIST, 1] + margin)


def finger_states(frame, extension_margin=0.02, thumb_margin=0.03, thumb_down_margin=0.05):
    points = frame.points
    index, middle, ring, pinky = (bool(v) for v in fingers_extended(points, extension_margin))
    return FingerStates(
        thumb=thumb_extended(points, thumb_margin),
        index=index,
        middle=middle,
        ring=ring,
        pinky=pinky,
        thumb_down=thumb_pointing_down(points, thumb_down_margin),
    )


def describe(states):
    """Human readable finger summary for the debug trace."""
    parts = [
        f"{name.capitalize()}: {'Extended' if getattr(states, name) else 'Curled'}"
        for name in FINGER_NAMES
    ]
    text = "Fingers - " + ", ".join(parts)
    if states.thumb_down:
        text += " (thumb down)"
    return text
