from .base import LaunchDetector, LaunchEvent
from .closed_hand_detector import ClosedHandDetector, HandState
from .fling_detector import FlingDetector, WristState

from rocketfx.consts import (CLOSED_MIN_FINGERS, FLING_LAUNCH_FACTOR, FLING_MOVING_THRESHOLD, FLING_STOPPED_THRESHOLD,
                             HAND_LAUNCH_FACTOR, MODE_HANDS, MODE_POSE)


def make_detector(mode: str, hand_launch_factor: float = HAND_LAUNCH_FACTOR,
                  closed_min_fingers: int = CLOSED_MIN_FINGERS,
                  fling_moving_threshold: float = FLING_MOVING_THRESHOLD,
                  fling_stopped_threshold: float = FLING_STOPPED_THRESHOLD,
                  fling_launch_factor: float = FLING_LAUNCH_FACTOR) -> LaunchDetector:
    """Recognizer for a session mode; chosen once and never mixed."""
    if mode == MODE_HANDS:
        return ClosedHandDetector(min_closed_fingers=closed_min_fingers, launch_factor=hand_launch_factor)
    if mode == MODE_POSE:
        return FlingDetector(moving_threshold=fling_moving_threshold, stopped_threshold=fling_stopped_threshold,
                             launch_factor=fling_launch_factor)
    raise ValueError(f"Unknown mode: {mode!r}")


__all__ = ["LaunchDetector", "LaunchEvent", "ClosedHandDetector", "HandState", "FlingDetector", "WristState",
           "make_detector"]
