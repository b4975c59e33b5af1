import logging

from GestureState import StabilityState
from GestureTypes import AcceptedGesture
from helpers import section

log = logging.getLogger(__name__)


class GestureStabilizer:
    """
    Turns the per-frame candidate stream into discrete accepted gestures.

    A candidate is accepted once it has been seen on `stability_threshold`
    consecutive frames spanning at least `hold_time` seconds, and, if it repeats
    the previously accepted label, once `cooldown` seconds have passed since that
    acceptance. Any frame without a candidate forfeits the accumulated run.
    """

    def __init__(self, cfg=None):
        self.state = StabilityState()
        self.update_config(cfg)

    def update_config(self, cfg):
        s = section(cfg, "stabilizer")
        self.stability_threshold = max(1, int(s["stability_threshold"]))
        self.hold_time = float(s["hold_time"])
        self.cooldown = float(s["cooldown"])
        self.min_confidence = float(s["min_confidence"])

    def reset(self):
        self.state.reset()

    def observe(self, candidate, now):
        st = self.state

        if candidate is not None and candidate.confidence < self.min_confidence:
            candidate = None

        if candidate is None:
            st.clear_candidate()
            return None

        if candidate.name == st.current_label:
            st.consecutive_frames += 1
        else:
            st.current_label = candidate.name
            st.consecutive_frames = 1
            st.first_seen_at = now

        if st.consecutive_frames < self.stability_threshold:
            return None
        if now - st.first_seen_at < self.hold_time:
            return None
        if (
            st.current_label == st.last_accepted_label
            and now - st.last_accepted_at < self.cooldown
        ):
            return None

        st.last_accepted_label = st.current_label
        st.last_accepted_at = now
        # held gestures have to rebuild the frame count before firing again
        st.consecutive_frames = 0
        log.debug("accepted %s at %.3f", st.current_label.value, now)
        return AcceptedGesture(st.current_label, candidate.confidence, now)
