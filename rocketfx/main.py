#!/usr/bin/env python3
"""
Gesture rockets: landmark tracking with spring-smoothed points and
gesture-launched projectiles that explode at the edge of the scene.

Hands mode launches a rocket when a closed hand opens; pose mode launches one
when a wrist is swung fast and stopped abruptly.
"""

import asyncio
import logging
import sys
import time
from collections import Counter

from rocketfx.consts import MODE_HANDS, MODE_POSE, SCENE_SERVER_PORT
from rocketfx.landmarker import LandmarkSource, ModelNotFoundError, SourceError
from rocketfx.preview import ScenePreview
from rocketfx.scene import CommandBuffer
from rocketfx.scene_server import SceneServer
from rocketfx.session import EngineConfig, FrameDriver, Session

USAGE = """Usage:
  {prog}                              # Camera 0, hands mode
  {prog} 1                            # Camera 1
  {prog} video.mp4                    # Use video file
  {prog} --pose                       # Fling gesture with full-body pose
  {prog} --show                       # OpenCV preview window
  {prog} --serve [port]               # Stream the scene over WebSocket
  {prog} --model path/to/model.task   # Custom landmarker model
  {prog} --debug                      # Verbose logging"""

FLAGS = ['--pose', '--show', '--serve', '--model', '--debug']


def parse_args(argv):
    """Parse the simple command-line flags into a dict of options."""
    options = {
        "source": 0,
        "mode": MODE_HANDS,
        "show_window": False,
        "serve_port": None,
        "model_path": None,
        "debug": False,
    }

    if len(argv) > 1 and argv[1] not in FLAGS:
        # First arg is either camera index or video file path
        try:
            options["source"] = int(argv[1])
        except ValueError:
            options["source"] = argv[1]

    if '--pose' in argv:
        options["mode"] = MODE_POSE
    if '--show' in argv:
        options["show_window"] = True
    if '--debug' in argv:
        options["debug"] = True

    if '--serve' in argv:
        options["serve_port"] = SCENE_SERVER_PORT
        idx = argv.index('--serve')
        if idx + 1 < len(argv):
            try:
                options["serve_port"] = int(argv[idx + 1])
            except ValueError:
                pass

    if '--model' in argv:
        idx = argv.index('--model')
        if idx + 1 < len(argv) and argv[idx + 1] not in FLAGS:
            options["model_path"] = argv[idx + 1]

    return options


def build_driver(options) -> FrameDriver:
    views = []
    if options["show_window"]:
        views.append(ScenePreview())
    if options["serve_port"] is not None:
        views.append(SceneServer(port=options["serve_port"]))

    source = LandmarkSource(options["mode"], options["source"], model_path=options["model_path"])
    session = Session(EngineConfig(mode=options["mode"]), CommandBuffer(views))
    return FrameDriver(session, source)


def print_summary(session: Session, runtime: float):
    print("\n" + "=" * 50)
    print("Session Summary")
    print("=" * 50)
    print(f"Total runtime: {runtime:.1f}s")
    print(f"Rendered frames: {session.frame_count}")
    print(f"Detection cycles: {session.detection_count}")
    print(f"Total launches: {len(session.event_history)}")

    if session.event_history:
        print("\nLaunch breakdown:")
        for identity, count in Counter(event.identity for event in session.event_history).items():
            print(f"  {identity}: {count}")

        swing_speeds = [event.metadata["swing_speed"] for event in session.event_history
                        if "swing_speed" in event.metadata]
        if swing_speeds:
            print(f"\nPeak swing speed: {max(swing_speeds):.0f}")
    else:
        print("\nNo launches.")


def main(argv=None):
    """Main entry point."""
    argv = sys.argv if argv is None else argv
    options = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if options["debug"] else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if len(argv) == 1:
        print(USAGE.format(prog=argv[0]))
        print()
        print("Running with default camera 0...")
        print()

    print("=" * 50)
    print(f"Starting gesture rockets ({options['mode']} mode)...")
    print("=" * 50)

    try:
        driver = build_driver(options)
    except (ModelNotFoundError, SourceError) as e:
        print(f"ERROR: {e}")
        print("\nTroubleshooting:")
        print("  - Check if the camera is connected or the video file exists")
        print("  - Try a different camera index (0, 1, 2, etc.)")
        print("  - Pass the landmarker model with --model")
        return 1

    start_time = time.time()
    try:
        asyncio.run(driver.run())
    except KeyboardInterrupt:
        print("\n\nStopping...")
    except OSError as e:
        print(f"ERROR: {e}")
        print("\nTroubleshooting:")
        print("  - Check that no other program is using the --serve port")
        print("  - Pick another port with --serve <port>")
        return 1
    finally:
        print_summary(driver.session, time.time() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
