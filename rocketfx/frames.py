from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


@dataclass
class LandmarkSet:
    """One detected hand or body: (N, 3) normalized landmarks and an optional label."""
    points: np.ndarray
    label: Optional[str] = None


@dataclass
class LandmarkFrame:
    """Everything the landmark model reported for one camera frame."""
    frame_size: Tuple[int, int]
    timestamp: float
    sets: List[LandmarkSet] = field(default_factory=list)
    image: Optional[np.ndarray] = None
