import asyncio
import json
import logging
from typing import List, Set

import websockets

from rocketfx.consts import SCENE_SERVER_HOST, SCENE_SERVER_PORT
from rocketfx.scene import SceneView

logger = logging.getLogger("rocketfx.scene_server")


class SceneServer(SceneView):
    """
    WebSocket server streaming the scene to browser renderers.

    A client first receives a `snapshot` message with the whole live scene,
    then one `frame` message per render tick carrying the tracked points and
    the spawn/update/remove commands issued during that tick.
    """

    def __init__(self, host: str = SCENE_SERVER_HOST, port: int = SCENE_SERVER_PORT):
        self.host = host
        self.port = port
        self.clients: Set = set()
        self.server = None
        self.scene = None
        self.frame_count = 0
        self._pending: Set[asyncio.Future] = set()
        self._closing = None

    async def start(self):
        self.server = await websockets.serve(self.handle_connection, self.host, self.port)
        print(f"Scene server started on ws://{self.host}:{self.port}")

    async def handle_connection(self, websocket):
        self.clients.add(websocket)
        logger.info("Client connected (%d total)", len(self.clients))
        try:
            if self.scene is not None:
                await websocket.send(json.dumps({"type": "snapshot", **self.scene.snapshot()}))
            async for message in websocket:
                logger.debug("Ignoring client message: %.200s", message)
        except websockets.exceptions.ConnectionClosed:
            pass
        finally:
            self.clients.discard(websocket)
            logger.info("Client disconnected (%d total)", len(self.clients))

    def frame_message(self, scene, commands: List[dict]) -> str:
        points = scene.points.tolist() if scene.points is not None else []
        return json.dumps({"type": "frame", "frame": self.frame_count, "points": points, "commands": commands})

    def render(self, scene, commands: List[dict]):
        self.scene = scene
        self.frame_count += 1
        if not self.clients:
            return
        payload = self.frame_message(scene, commands)
        for websocket in list(self.clients):
            future = asyncio.ensure_future(self._send(websocket, payload))
            self._pending.add(future)
            future.add_done_callback(self._pending.discard)

    async def _send(self, websocket, payload: str):
        try:
            await websocket.send(payload)
        except websockets.exceptions.ConnectionClosed:
            self.clients.discard(websocket)

    def close(self):
        for future in self._pending:
            future.cancel()
        if self.server is not None:
            self.server.close()
            self._closing = self.server
            self.server = None

    async def wait_closed(self):
        """Wait for open connections to finish closing after `close`."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._closing is not None:
            await self._closing.wait_closed()
            self._closing = None
