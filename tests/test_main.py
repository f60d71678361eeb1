import numpy as np

from rocketfx import main as cli
from rocketfx.detectors import LaunchEvent
from rocketfx.main import parse_args, print_summary
from rocketfx.scene import CommandBuffer, SceneView
from rocketfx.session import EngineConfig, FrameDriver, Session


def test_defaults():
    options = parse_args(["rocketfx"])
    assert options == {
        "source": 0,
        "mode": "hands",
        "show_window": False,
        "serve_port": None,
        "model_path": None,
        "debug": False,
    }


def test_camera_index_and_flags():
    options = parse_args(["rocketfx", "1", "--pose", "--show", "--debug"])
    assert options["source"] == 1
    assert options["mode"] == "pose"
    assert options["show_window"]
    assert options["debug"]


def test_video_file_and_model():
    options = parse_args(["rocketfx", "clip.mp4", "--model", "models/pose.task"])
    assert options["source"] == "clip.mp4"
    assert options["model_path"] == "models/pose.task"


def test_serve_port():
    assert parse_args(["rocketfx", "--serve"])["serve_port"] == 3000
    assert parse_args(["rocketfx", "--serve", "8765"])["serve_port"] == 8765
    assert parse_args(["rocketfx", "--serve", "--show"])["serve_port"] == 3000


class BusyPortView(SceneView):
    async def start(self):
        raise OSError(98, "Address already in use")


def test_view_start_failure_reports_and_exits(monkeypatch, capsys):
    session = Session(EngineConfig(), CommandBuffer([BusyPortView()]))
    monkeypatch.setattr(cli, "build_driver", lambda options: FrameDriver(session))

    assert cli.main(["rocketfx", "--serve"]) == 1

    out = capsys.readouterr().out
    assert "ERROR: [Errno 98] Address already in use" in out
    assert "Troubleshooting:" in out
    assert "Session Summary" in out
    assert session.closed


def test_summary_reports_peak_swing_speed(capsys):
    session = Session(EngineConfig(mode="pose"), CommandBuffer())
    for speed in (1200.0, 1530.4):
        session.event_history.append(LaunchEvent(
            name="fling", identity="right", timestamp=0.0, origin=np.zeros(3), direction=np.zeros(3),
            magnitude=20, metadata={"swing_speed": speed, "stop_speed": 50.0},
        ))

    print_summary(session, 1.0)

    out = capsys.readouterr().out
    assert "right: 2" in out
    assert "Peak swing speed: 1530" in out
