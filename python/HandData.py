from collections import namedtuple

import numpy as np

# MediaPipe hand landmark indices
WRIST = 0
THUMB_MCP = 2
THUMB_TIP = 4
INDEX_MCP, INDEX_TIP = 5, 8
MIDDLE_MCP, MIDDLE_TIP = 9, 12
RING_MCP, RING_TIP = 13, 16
PINKY_MCP, PINKY_TIP = 17, 20

NUM_LANDMARKS = 21

Landmark = namedtuple("Landmark", "x y z")


class FrameValidationError(ValueError):
    """A landmark set that cannot be a single hand (wrong shape or non-finite values)."""


def _extract_point(entry):
    if hasattr(entry, "x") and hasattr(entry, "y") and hasattr(entry, "z"):
        return (entry.x, entry.y, entry.z)
    if isinstance(entry, dict):
        try:
            return (entry["x"], entry["y"], entry["z"])
        except KeyError as e:
            raise FrameValidationError(f"landmark dict missing coordinate {e}") from None
    if isinstance(entry, (list, tuple, np.ndarray)) and len(entry) >= 3:
        return (entry[0], entry[1], entry[2])
    raise FrameValidationError(
        "Unsupported landmark format; expected object with x,y,z or sequence of 3 values."
    )


class LandmarkFrame:
    """
    One hand observed in one video frame: 21 normalized (x, y, z) points indexed
    by joint (wrist=0, thumb tip=4, index tip=8, ...). Smaller y is higher in
    the image. The point array is read-only.
    """

    __slots__ = ("points",)

    def __init__(self, landmarks):
        # MediaPipe NormalizedLandmarkList
        if hasattr(landmarks, "landmark"):
            landmarks = landmarks.landmark

        if isinstance(landmarks, np.ndarray):
            raw = landmarks
        else:
            try:
                raw = [_extract_point(p) for p in landmarks]
            except TypeError:
                raise FrameValidationError(
                    f"landmarks must be a sequence, got {type(landmarks).__name__}"
                ) from None

        try:
            points = np.array(raw, dtype=float)
        except (TypeError, ValueError) as e:
            raise FrameValidationError(f"landmark coordinates are not numeric: {e}") from None

        if points.ndim != 2 or points.shape[0] != NUM_LANDMARKS or points.shape[1] < 3:
            raise FrameValidationError(
                f"expected {NUM_LANDMARKS} landmarks with x,y,z, got shape {points.shape}"
            )
        points = points[:, :3]
        if not np.isfinite(points).all():
            raise FrameValidationError("landmark coordinates must be finite")

        points.flags.writeable = False
        self.points = points

    def __len__(self):
        return NUM_LANDMARKS

    def __getitem__(self, idx):
        x, y, z = self.points[idx]
        return Landmark(float(x), float(y), float(z))

    def to_list(self):
        """Serialize to JSON-friendly nested lists."""
        return self.points.tolist()
