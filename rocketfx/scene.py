"""
Boundary between the engine and whatever draws the scene.

The engine never builds geometry itself. It hands a sink the tracked point
buffer every tick plus spawn/update/remove commands for projectile bodies,
trail lines and explosion bursts. Every spawned object is wrapped in a
`Renderable` that belongs to exactly one projectile or burst and is removed
from the sink exactly once.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

logger = logging.getLogger("rocketfx.scene")

KIND_PROJECTILE = "projectile"
KIND_TRAIL = "trail"
KIND_BURST = "burst"


def _to_list(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    return value


class SceneSink(ABC):
    """Base class for all renderers fed by the engine."""

    @abstractmethod
    def update_points(self, positions: np.ndarray):
        """Replace the tracked point buffer (one row per point)."""
        pass

    @abstractmethod
    def spawn(self, kind: str, **data) -> int:
        """Create a scene object and return its id."""
        pass

    @abstractmethod
    def update(self, kind: str, object_id: int, **data):
        """Change the data of a live scene object."""
        pass

    @abstractmethod
    def remove(self, kind: str, object_id: int):
        """Drop a scene object."""
        pass

    def set_background(self, image: np.ndarray):
        """Latest camera image, for sinks that draw over it."""
        pass

    async def start(self):
        """Called once from the running event loop before the first tick."""
        pass

    def present(self):
        """Called once per render tick after all updates."""
        pass

    @property
    def quit_requested(self) -> bool:
        return False

    def close(self):
        """Release sink resources."""
        pass

    async def wait_closed(self):
        """Wait until the resources released by `close` are gone."""
        pass


class SceneView:
    """Something that shows the scene mirrored by a `CommandBuffer`."""

    quit_requested = False

    async def start(self):
        pass

    def set_background(self, image: np.ndarray):
        pass

    def render(self, scene: "CommandBuffer", commands: List[dict]):
        """Show one tick; `commands` are the changes made during it."""
        pass

    def close(self):
        pass

    async def wait_closed(self):
        pass


class CommandBuffer(SceneSink):
    """
    Sink that records scene commands and mirrors the live scene.

    Commands queued during a tick are handed to every attached view by
    `present` and then cleared. `objects` always holds the current data of
    every live object, keyed by (kind, id).
    """

    def __init__(self, views: Iterable[SceneView] = ()):
        self.views: List[SceneView] = list(views)
        self.points: Optional[np.ndarray] = None
        self.commands: List[dict] = []
        self.objects: Dict[Tuple[str, int], dict] = {}
        self._next_id = 0

    def update_points(self, positions: np.ndarray):
        self.points = np.array(positions, copy=True)

    def spawn(self, kind: str, **data) -> int:
        self._next_id += 1
        object_id = self._next_id
        self.objects[(kind, object_id)] = dict(data)
        self.commands.append({"type": "spawn", "kind": kind, "id": object_id,
                              **{k: _to_list(v) for k, v in data.items()}})
        return object_id

    def update(self, kind: str, object_id: int, **data):
        key = (kind, object_id)
        if key not in self.objects:
            logger.debug("Update for unknown %s %d ignored", kind, object_id)
            return
        self.objects[key].update(data)
        self.commands.append({"type": "update", "kind": kind, "id": object_id,
                              **{k: _to_list(v) for k, v in data.items()}})

    def remove(self, kind: str, object_id: int):
        if self.objects.pop((kind, object_id), None) is None:
            logger.debug("Remove for unknown %s %d ignored", kind, object_id)
            return
        self.commands.append({"type": "remove", "kind": kind, "id": object_id})

    def live(self, kind: str) -> List[dict]:
        """Data of every live object of one kind."""
        return [data for (k, _), data in self.objects.items() if k == kind]

    def snapshot(self) -> dict:
        """JSON-able copy of the live scene."""
        return {
            "points": _to_list(self.points) if self.points is not None else [],
            "objects": [{"kind": kind, "id": object_id, **{k: _to_list(v) for k, v in data.items()}}
                        for (kind, object_id), data in self.objects.items()],
        }

    def set_background(self, image: np.ndarray):
        for view in self.views:
            view.set_background(image)

    async def start(self):
        for view in self.views:
            await view.start()

    def present(self):
        commands = self.commands
        self.commands = []
        for view in self.views:
            view.render(self, commands)

    @property
    def quit_requested(self) -> bool:
        return any(view.quit_requested for view in self.views)

    def close(self):
        for view in self.views:
            view.close()

    async def wait_closed(self):
        for view in self.views:
            await view.wait_closed()


class Renderable:
    """
    Handle on one scene object owned by a projectile or burst.

    `release` is idempotent.
    """

    def __init__(self, sink: SceneSink, kind: str, **data):
        self.sink = sink
        self.kind = kind
        self.id = sink.spawn(kind, **data)
        self.released = False

    def update(self, **data):
        if not self.released:
            self.sink.update(self.kind, self.id, **data)

    def release(self):
        if self.released:
            return
        self.released = True
        self.sink.remove(self.kind, self.id)
