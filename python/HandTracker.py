import mediapipe as mp

from helpers import section


class HandTracker:
    """
    Thin wrapper over MediaPipe Hands: RGB image in, landmark sets out.
    Detection itself is MediaPipe's business; this only maps the config and
    flattens the result into what SessionController.process_frame expects.
    """

    def __init__(self, cfg):
        self.mp_drawing = mp.solutions.drawing_utils
        tcfg = section(cfg, "tracker")

        self.mp_hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            model_complexity=tcfg["model_complexity"],
            min_detection_confidence=tcfg["min_detection_confidence"],
            min_tracking_confidence=tcfg["min_tracking_confidence"],
            max_num_hands=tcfg["max_num_hands"],
        )

    def process_frame(self, frame_rgb):
        """
        Returns (hands, raw): hands is a list of 21-point [x, y, z] lists, one per
        detected hand (empty when none); raw keeps MediaPipe's objects for drawing.
        """
        result = self.mp_hands.process(frame_rgb)
        if not result.multi_hand_landmarks:
            return [], []

        hands = [
            [[lm.x, lm.y, lm.z] for lm in hand.landmark]
            for hand in result.multi_hand_landmarks
        ]
        return hands, list(result.multi_hand_landmarks)

    def draw(self, frame_bgr, raw_landmarks):
        for lm in raw_landmarks:
            self.mp_drawing.draw_landmarks(frame_bgr, lm, mp.solutions.hands.HAND_CONNECTIONS)

    def close(self):
        self.mp_hands.close()
