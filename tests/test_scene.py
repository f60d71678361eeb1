import numpy as np

from rocketfx.scene import KIND_BURST, KIND_PROJECTILE, CommandBuffer, Renderable, SceneView


class RecordingView(SceneView):
    def __init__(self):
        self.rendered = []
        self.backgrounds = 0
        self.closed = False

    def set_background(self, image):
        self.backgrounds += 1

    def render(self, scene, commands):
        self.rendered.append(commands)

    def close(self):
        self.closed = True


def test_commands_mirror_live_objects():
    buffer = CommandBuffer()
    object_id = buffer.spawn(KIND_PROJECTILE, position=np.array([1.0, 2.0, 0.0]))
    buffer.update(KIND_PROJECTILE, object_id, position=np.array([3.0, 4.0, 0.0]))

    assert buffer.live(KIND_PROJECTILE)[0]["position"].tolist() == [3.0, 4.0, 0.0]
    assert [c["type"] for c in buffer.commands] == ["spawn", "update"]
    assert buffer.commands[1]["position"] == [3.0, 4.0, 0.0]

    buffer.remove(KIND_PROJECTILE, object_id)
    assert buffer.objects == {}
    assert buffer.commands[-1] == {"type": "remove", "kind": KIND_PROJECTILE, "id": object_id}


def test_unknown_objects_are_ignored():
    buffer = CommandBuffer()
    buffer.update(KIND_BURST, 99, opacity=0.5)
    buffer.remove(KIND_BURST, 99)
    assert buffer.commands == []


def test_present_hands_tick_commands_to_views():
    view = RecordingView()
    buffer = CommandBuffer([view])
    buffer.spawn(KIND_BURST, positions=np.zeros((2, 3)), opacity=1.0)
    buffer.present()
    buffer.present()

    assert len(view.rendered) == 2
    assert view.rendered[0][0]["type"] == "spawn"
    assert view.rendered[1] == []
    assert buffer.commands == []


def test_snapshot_is_json_ready():
    buffer = CommandBuffer()
    buffer.update_points(np.ones((2, 3)))
    buffer.spawn(KIND_PROJECTILE, position=np.zeros(3))
    snapshot = buffer.snapshot()
    assert snapshot["points"] == [[1.0, 1.0, 1.0], [1.0, 1.0, 1.0]]
    assert snapshot["objects"] == [{"kind": KIND_PROJECTILE, "id": 1, "position": [0.0, 0.0, 0.0]}]


def test_views_receive_background_and_close():
    view = RecordingView()
    buffer = CommandBuffer([view])
    buffer.set_background(np.zeros((4, 4, 3), dtype=np.uint8))
    buffer.close()
    assert view.backgrounds == 1
    assert view.closed


def test_renderable_release_is_idempotent():
    buffer = CommandBuffer()
    handle = Renderable(buffer, KIND_PROJECTILE, position=np.zeros(3))
    handle.release()
    handle.release()
    handle.update(position=np.ones(3))

    removes = [c for c in buffer.commands if c["type"] == "remove"]
    assert len(removes) == 1
    assert [c["type"] for c in buffer.commands] == ["spawn", "remove"]
