import asyncio
import json

import numpy as np
import websockets

from rocketfx.scene import KIND_PROJECTILE, CommandBuffer
from rocketfx.scene_server import SceneServer


def test_frame_message_format():
    server = SceneServer()
    scene = CommandBuffer()
    scene.update_points(np.zeros((2, 3)))
    message = json.loads(server.frame_message(scene, [{"type": "remove", "kind": "trail", "id": 3}]))

    assert message["type"] == "frame"
    assert message["points"] == [[0.0, 0.0, 0.0], [0.0, 0.0, 0.0]]
    assert message["commands"] == [{"type": "remove", "kind": "trail", "id": 3}]


def test_render_without_clients_only_counts_frames():
    server = SceneServer()
    scene = CommandBuffer([server])
    scene.present()
    scene.present()
    assert server.frame_count == 2
    assert server.scene is scene


def test_client_gets_snapshot_then_frames():
    async def scenario():
        server = SceneServer(host="127.0.0.1", port=0)
        scene = CommandBuffer([server])
        await scene.start()
        port = next(iter(server.server.sockets)).getsockname()[1]

        scene.spawn(KIND_PROJECTILE, position=np.array([1.0, 2.0, 0.0]))
        scene.present()

        async with websockets.connect(f"ws://127.0.0.1:{port}") as client:
            snapshot = json.loads(await client.recv())

            scene.update_points(np.ones((1, 3)))
            scene.remove(KIND_PROJECTILE, 1)
            scene.present()
            frame = json.loads(await client.recv())

        scene.close()
        await scene.wait_closed()
        return snapshot, frame, server

    snapshot, frame, server = asyncio.run(scenario())

    assert snapshot["type"] == "snapshot"
    assert snapshot["objects"] == [{"kind": KIND_PROJECTILE, "id": 1, "position": [1.0, 2.0, 0.0]}]
    assert frame["type"] == "frame"
    assert frame["points"] == [[1.0, 1.0, 1.0]]
    assert frame["commands"] == [{"type": "remove", "kind": KIND_PROJECTILE, "id": 1}]
    assert server.server is None
    assert not server._pending


def test_close_waits_for_connected_client():
    async def scenario():
        server = SceneServer(host="127.0.0.1", port=0)
        scene = CommandBuffer([server])
        await scene.start()
        port = next(iter(server.server.sockets)).getsockname()[1]
        scene.present()

        client = await websockets.connect(f"ws://127.0.0.1:{port}")
        await client.recv()
        assert len(server.clients) == 1

        scene.close()
        await scene.wait_closed()
        # the server side went away with the close handshake
        await client.wait_closed()
        return server

    server = asyncio.run(scenario())
    assert not server.clients
    assert server._closing is None
