import logging
from typing import List, Optional

import numpy as np

from rocketfx.consts import BURST_MAX_SPEED, BURST_MIN_SPEED, BURST_SPARKS, BURST_TICKS
from rocketfx.scene import KIND_BURST, Renderable, SceneSink

logger = logging.getLogger("rocketfx.bursts")


class ExplosionBurst:
    """
    Radial spark burst that fades out and ends on its own.

    Sparks move in a straight line by their velocity every tick (velocities
    are per-tick displacements). Once `tick_count` reaches the horizon the
    burst releases its point cloud and is finished for good.
    """

    def __init__(self, sink: SceneSink, origin, rng: Optional[np.random.Generator] = None,
                 num_sparks: int = BURST_SPARKS, horizon: int = BURST_TICKS,
                 min_speed: float = BURST_MIN_SPEED, max_speed: float = BURST_MAX_SPEED):
        rng = rng or np.random.default_rng()
        self.horizon = horizon
        self.tick_count = 0

        origin = np.asarray(origin, dtype=float)
        angles = 2 * np.pi * np.arange(num_sparks) / num_sparks
        speeds = rng.uniform(min_speed, max_speed, num_sparks)

        self.positions = np.zeros((num_sparks, 3))
        self.positions[:, 0] = origin[0]
        self.positions[:, 1] = origin[1]
        self.velocities = np.zeros((num_sparks, 3))
        self.velocities[:, 0] = np.cos(angles) * speeds
        self.velocities[:, 1] = np.sin(angles) * speeds

        self.cloud = Renderable(sink, KIND_BURST, positions=self.positions.copy(), opacity=1.0)

    @property
    def opacity(self) -> float:
        return max(0.0, 1 - self.tick_count / self.horizon)

    @property
    def finished(self) -> bool:
        return self.tick_count >= self.horizon

    def tick(self):
        if self.finished:
            return
        self.tick_count += 1
        self.positions += self.velocities
        self.cloud.update(positions=self.positions.copy(), opacity=self.opacity)
        if self.finished:
            self.close()

    def close(self):
        self.cloud.release()


class BurstManager:
    """Owns every active burst and drops the ones that have finished."""

    def __init__(self, sink: SceneSink, rng: Optional[np.random.Generator] = None, **burst_options):
        self.sink = sink
        self.rng = rng or np.random.default_rng()
        self.burst_options = burst_options
        self.bursts: List[ExplosionBurst] = []

    def spawn(self, origin) -> ExplosionBurst:
        burst = ExplosionBurst(self.sink, origin, rng=self.rng, **self.burst_options)
        self.bursts.append(burst)
        logger.info("Burst at (%.1f, %.1f)", burst.positions[0, 0], burst.positions[0, 1])
        return burst

    def tick(self):
        for burst in self.bursts:
            burst.tick()
        self.bursts = [burst for burst in self.bursts if not burst.finished]

    def close(self):
        for burst in self.bursts:
            burst.close()
        self.bursts = []

    def __len__(self):
        return len(self.bursts)
