# ==========================================
# PERSISTENT STATE (between frames)
# ==========================================
class StabilityState:
    """
    Stores the debounce bookkeeping carried from one frame to the next.
    Owned and mutated only by GestureStabilizer.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.current_label = None
        self.consecutive_frames = 0
        self.first_seen_at = None

        self.last_accepted_label = None
        self.last_accepted_at = None

    def clear_candidate(self):
        self.current_label = None
        self.consecutive_frames = 0
        self.first_seen_at = None

    def to_dict(self):
        return {
            "current_label": self.current_label.value if self.current_label else None,
            "consecutive_frames": self.consecutive_frames,
            "first_seen_at": self.first_seen_at,
            "last_accepted_label": (
                self.last_accepted_label.value if self.last_accepted_label else None
            ),
            "last_accepted_at": self.last_accepted_at,
        }
