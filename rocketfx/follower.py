import numpy as np

from rocketfx.consts import DAMPING, SPRING_FACTOR


class LandmarkFollower:
    """
    Spring-damper smoothing for every tracked point.

    Each point is pulled toward its latest target with a weak spring and loses
    a fixed share of its velocity every tick. Points without a target relax
    back to the origin.
    """

    def __init__(self, num_points: int, spring_factor: float = SPRING_FACTOR, damping: float = DAMPING):
        """
        Initialize the follower.

        Args:
            num_points: Number of tracked points for the session
            spring_factor: Fraction of the distance to the target added to velocity per tick
            damping: Multiplier applied to velocity per tick
        """
        self.num_points = num_points
        self.spring_factor = spring_factor
        self.damping = damping

        self.targets = np.zeros((num_points, 3))
        self.positions = np.zeros((num_points, 3))
        self.velocities = np.zeros((num_points, 3))

    def reset_targets(self):
        """Point every target back at the origin."""
        self.targets.fill(0)

    def set_targets(self, start: int, points: np.ndarray):
        """
        Overwrite a block of targets with scene-space points.

        Rows past the end of the session's point array are dropped.
        """
        if start >= self.num_points:
            return
        points = np.asarray(points, dtype=float)
        count = min(len(points), self.num_points - start)
        self.targets[start:start + count] = points[:count]

    def step(self):
        """Advance every point by one fixed tick."""
        self.velocities += (self.targets - self.positions) * self.spring_factor
        self.velocities *= self.damping
        self.positions += self.velocities
