import logging
from collections import deque
from typing import List

import numpy as np

from rocketfx.bursts import BurstManager
from rocketfx.consts import PROJECTILE_BOUND_X, PROJECTILE_BOUND_Y, PROJECTILE_DT, TRAIL_LENGTH
from rocketfx.scene import KIND_PROJECTILE, KIND_TRAIL, Renderable, SceneSink

logger = logging.getLogger("rocketfx.projectiles")


class Projectile:
    """A launched rocket flying at constant velocity in the z = 0 plane."""

    def __init__(self, sink: SceneSink, origin, velocity, trail_length: int = TRAIL_LENGTH):
        self.sink = sink
        self.position = np.array([origin[0], origin[1], 0.0])
        self.velocity = np.array([velocity[0], velocity[1], 0.0])
        self.trail = deque(maxlen=trail_length)

        self.body = Renderable(sink, KIND_PROJECTILE, position=self.position.copy())
        self.trail_line = None

    def advance(self, dt: float):
        self.position = self.position + self.velocity * dt
        self.body.update(position=self.position.copy())
        self.trail.append(self.position.copy())
        self._rebuild_trail()

    def _rebuild_trail(self):
        """Replace the trail line with one built from the current trail."""
        if self.trail_line is not None:
            self.trail_line.release()
            self.trail_line = None
        if len(self.trail) > 1:
            self.trail_line = Renderable(self.sink, KIND_TRAIL, points=np.array(self.trail))

    def out_of_bounds(self, bound_x: float, bound_y: float) -> bool:
        return abs(self.position[0]) > bound_x or abs(self.position[1]) > bound_y

    def close(self):
        if self.trail_line is not None:
            self.trail_line.release()
        self.body.release()


class ProjectileSimulator:
    """Moves every live projectile and turns the ones that leave the box into bursts."""

    def __init__(self, sink: SceneSink, bursts: BurstManager,
                 bound_x: float = PROJECTILE_BOUND_X, bound_y: float = PROJECTILE_BOUND_Y,
                 trail_length: int = TRAIL_LENGTH, dt: float = PROJECTILE_DT):
        self.sink = sink
        self.bursts = bursts
        self.bound_x = bound_x
        self.bound_y = bound_y
        self.trail_length = trail_length
        self.dt = dt
        self.projectiles: List[Projectile] = []

    def launch(self, origin, velocity) -> Projectile:
        projectile = Projectile(self.sink, origin, velocity, trail_length=self.trail_length)
        self.projectiles.append(projectile)
        logger.info("Launch from (%.1f, %.1f) with velocity (%.1f, %.1f)",
                    projectile.position[0], projectile.position[1],
                    projectile.velocity[0], projectile.velocity[1])
        return projectile

    def tick(self):
        live = []
        for projectile in self.projectiles:
            projectile.advance(self.dt)
            if projectile.out_of_bounds(self.bound_x, self.bound_y):
                self.bursts.spawn(projectile.position.copy())
                projectile.close()
            else:
                live.append(projectile)
        self.projectiles = live

    def close(self):
        for projectile in self.projectiles:
            projectile.close()
        self.projectiles = []

    def __len__(self):
        return len(self.projectiles)
