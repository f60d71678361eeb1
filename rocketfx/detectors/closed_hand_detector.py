from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from . import LaunchDetector, LaunchEvent
from rocketfx.consts import (CLOSED_FINGER_KNUCKLES, CLOSED_FINGER_TIPS, CLOSED_MIN_FINGERS, HAND_LAUNCH_FACTOR,
                             HAND_LEFT, HAND_RIGHT, INDEX_MCP, MIDDLE_PIP, PINKY_MCP, WRIST)
from rocketfx.mapping import normalize


@dataclass
class HandState:
    is_closed: bool = False


class ClosedHandDetector(LaunchDetector):
    """
    Launches when a closed hand opens.

    A hand counts as closed when most non-thumb fingertips sit below their
    middle joint in the image. Only the closed -> open transition fires, so
    holding either pose never repeats a launch.
    """

    def __init__(self, identities=(HAND_LEFT, HAND_RIGHT), min_closed_fingers: int = CLOSED_MIN_FINGERS,
                 launch_factor: float = HAND_LAUNCH_FACTOR):
        super().__init__("hand_open", identities)
        self.min_closed_fingers = min_closed_fingers
        self.launch_factor = launch_factor

    def new_state(self):
        return HandState()

    def closed_fingers(self, landmarks: np.ndarray) -> int:
        """Count curled fingers by comparing raw image y of tip and knuckle."""
        return sum(
            1 for tip, knuckle in zip(CLOSED_FINGER_TIPS, CLOSED_FINGER_KNUCKLES)
            if landmarks[tip][1] > landmarks[knuckle][1]
        )

    def is_closed(self, landmarks: np.ndarray) -> bool:
        return self.closed_fingers(landmarks) >= self.min_closed_fingers

    def hand_direction(self, landmarks: np.ndarray) -> np.ndarray:
        """Approximate palm normal: knuckle line crossed with wrist -> middle finger."""
        across = normalize(landmarks[INDEX_MCP] - landmarks[PINKY_MCP])
        along = normalize(landmarks[MIDDLE_PIP] - landmarks[WRIST])
        return normalize(np.cross(across, along))

    def update(self, state: HandState, identity: str, landmarks: np.ndarray, frame_size: Tuple[float, float],
               frame_time: float) -> Optional[LaunchEvent]:
        currently_closed = self.is_closed(landmarks)

        event = None
        if state.is_closed and not currently_closed:
            event = LaunchEvent(
                name=self.name,
                identity=identity,
                timestamp=frame_time,
                origin=self.scene_point(landmarks[WRIST], frame_size),
                direction=self.hand_direction(landmarks),
                magnitude=self.launch_factor,
            )

        state.is_closed = currently_closed
        return event
