from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from . import LaunchDetector, LaunchEvent
from rocketfx.consts import (FLING_LAUNCH_FACTOR, FLING_MOVING_THRESHOLD, FLING_STOPPED_THRESHOLD,
                             POSE_LEFT_WRIST, POSE_RIGHT_WRIST, WRIST_LEFT, WRIST_RIGHT)


@dataclass
class WristState:
    last_position: Optional[np.ndarray] = None
    last_time: Optional[float] = None
    last_velocity: np.ndarray = field(default_factory=lambda: np.zeros(2))
    is_moving: bool = False


class FlingDetector(LaunchDetector):
    """
    Detects a fast wrist swing followed by an abrupt stop.

    Uses a two-threshold band on wrist speed in scene units per second: the
    swing arms the detector above the moving threshold, and dropping below the
    stopped threshold fires in the direction of the last fast velocity.
    """

    WRIST_IDS = {WRIST_LEFT: POSE_LEFT_WRIST, WRIST_RIGHT: POSE_RIGHT_WRIST}

    def __init__(self, identities=(WRIST_RIGHT, WRIST_LEFT), moving_threshold: float = FLING_MOVING_THRESHOLD,
                 stopped_threshold: float = FLING_STOPPED_THRESHOLD, launch_factor: float = FLING_LAUNCH_FACTOR):
        super().__init__("fling", identities)

        # thresholds
        self.moving_threshold = moving_threshold
        self.stopped_threshold = stopped_threshold
        self.launch_factor = launch_factor

    def new_state(self):
        return WristState()

    def update(self, state: WristState, identity: str, landmarks: np.ndarray, frame_size: Tuple[float, float],
               frame_time: float) -> Optional[LaunchEvent]:
        wrist_id = self.WRIST_IDS.get(identity)
        if wrist_id is None or wrist_id >= len(landmarks):
            return None
        current_position = self.scene_point(landmarks[wrist_id], frame_size)[:2]

        event = None
        if state.last_position is not None and state.last_time is not None:
            dt = frame_time - state.last_time
            if dt > 0:
                velocity = (current_position - state.last_position) / dt
                speed = float(np.linalg.norm(velocity))

                # fast swing arms the fling
                if not state.is_moving and speed > self.moving_threshold:
                    state.is_moving = True

                # stop after the swing: launch along the last fast direction
                if state.is_moving and speed < self.stopped_threshold:
                    swing_speed = float(np.linalg.norm(state.last_velocity))
                    norm = swing_speed or 1
                    direction = np.zeros(3)
                    direction[:2] = state.last_velocity / norm
                    event = LaunchEvent(
                        name=self.name,
                        identity=identity,
                        timestamp=frame_time,
                        origin=np.array([current_position[0], current_position[1], 0.0]),
                        direction=direction,
                        magnitude=self.launch_factor,
                        metadata={"swing_speed": swing_speed, "stop_speed": speed},
                    )
                    state.is_moving = False

                if speed > self.moving_threshold:
                    state.last_velocity = velocity

        # update previous
        state.last_position = current_position
        state.last_time = frame_time
        return event
