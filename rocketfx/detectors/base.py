import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from rocketfx.mapping import to_scene

logger = logging.getLogger("rocketfx.detectors")


@dataclass
class LaunchEvent:
    """Represents a detected launch gesture."""
    name: str
    identity: str
    timestamp: float
    origin: np.ndarray     # Scene-space launch point (z = 0)
    direction: np.ndarray  # Unit vector, or zero when no direction is known
    magnitude: float
    metadata: dict = field(default_factory=dict)

    @property
    def velocity(self) -> np.ndarray:
        return self.direction * self.magnitude


class LaunchDetector(ABC):
    """Base class for gesture recognizers that launch projectiles."""

    def __init__(self, name: str, identities: Iterable[str]):
        """
        Initialize launch detector.

        Args:
            name: Name of the gesture
            identities: Every hand/limb label this detector tracks; one state record each
        """
        self.name = name
        self.states: Dict[str, object] = {identity: self.new_state() for identity in identities}

    @abstractmethod
    def new_state(self):
        """Default per-identity state."""
        pass

    @abstractmethod
    def update(self, state, identity: str, landmarks: np.ndarray, frame_size: Tuple[float, float],
               frame_time: float) -> Optional[LaunchEvent]:
        """
        Advance one identity's state with a new landmark set.

        Args:
            state: The identity's state record
            identity: Hand/limb label
            landmarks: (N, 3) normalized landmarks
            frame_size: Source frame (width, height) in pixels
            frame_time: Timestamp of the detection in seconds

        Returns:
            LaunchEvent if a launch fired, None otherwise
        """
        pass

    def detect(self, identity: str, landmarks: np.ndarray, frame_size: Tuple[float, float],
               frame_time: float) -> Optional[LaunchEvent]:
        """Run the recognizer for one identity; unknown identities are ignored."""
        state = self.states.get(identity)
        if state is None:
            logger.debug("%s: ignoring unknown identity %r", self.name, identity)
            return None
        event = self.update(state, identity, np.asarray(landmarks, dtype=float), frame_size, frame_time)
        if event:
            logger.info("[%s] %s fired at %.2fs (magnitude: %.1f)",
                        self.name.upper(), identity, frame_time, event.magnitude)
        return event

    def scene_point(self, landmark: np.ndarray, frame_size: Tuple[float, float]) -> np.ndarray:
        """Scene-space x, y of a landmark, flattened onto the z = 0 plane."""
        point = to_scene(landmark[0], landmark[1], landmark[2], frame_size[0], frame_size[1])
        point[2] = 0.0
        return point
