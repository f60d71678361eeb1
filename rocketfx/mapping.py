import numpy as np

from rocketfx.consts import DEPTH_SCALE


def to_scene(x: float, y: float, z: float, frame_width: float, frame_height: float) -> np.ndarray:
    """
    Map a normalized landmark (y-down image coords) to scene space.

    The horizontal axis is mirrored for a selfie view and both axes are
    compressed to a third of the frame size.

    Args:
        x, y, z: Normalized landmark coordinates
        frame_width: Source frame width in pixels
        frame_height: Source frame height in pixels

    Returns:
        Scene-space point as a (3,) array
    """
    return np.array([
        (1 - x - 0.5) * 2 * (frame_width / 3),
        -(y - 0.5) * 2 * (frame_height / 3),
        -z * DEPTH_SCALE,
    ])


def landmarks_to_scene(landmarks: np.ndarray, frame_width: float, frame_height: float) -> np.ndarray:
    """Vectorised `to_scene` for an (N, 3) landmark array."""
    landmarks = np.asarray(landmarks, dtype=float)
    scene = np.empty_like(landmarks)
    scene[:, 0] = (1 - landmarks[:, 0] - 0.5) * 2 * (frame_width / 3)
    scene[:, 1] = -(landmarks[:, 1] - 0.5) * 2 * (frame_height / 3)
    scene[:, 2] = -landmarks[:, 2] * DEPTH_SCALE
    return scene


def normalize(vector: np.ndarray) -> np.ndarray:
    """Unit vector along `vector`; a zero vector stays zero."""
    vector = np.asarray(vector, dtype=float)
    norm = np.linalg.norm(vector)
    if norm == 0:
        return np.zeros_like(vector)
    return vector / norm
