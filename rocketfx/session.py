"""
Session context and frame driver.

A `Session` owns everything that lives for one run: tracked points, the
gesture recognizer, live projectiles and bursts, and the scene sink. The
`FrameDriver` advances it from two cooperative tasks on one event loop:

* the render tick, once per display frame, steps the follower, projectiles
  and bursts and presents the scene;
* the detection cycle awaits the next landmark frame, refreshes the
  follower targets and feeds the recognizer.

Neither task blocks the other, and all engine state is only touched from the
event loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from rocketfx.bursts import BurstManager
from rocketfx.consts import (BURST_MAX_SPEED, BURST_MIN_SPEED, BURST_SPARKS, BURST_TICKS, CLOSED_MIN_FINGERS,
                             DAMPING, FLING_LAUNCH_FACTOR, FLING_MOVING_THRESHOLD, FLING_STOPPED_THRESHOLD,
                             HAND_LAUNCH_FACTOR, LANDMARKS_PER_HAND, MAX_HANDS, MODE_HANDS, MODE_POSE, POSE_LANDMARKS,
                             PROJECTILE_BOUND_X, PROJECTILE_BOUND_Y, PROJECTILE_DT, RENDER_FPS, SPRING_FACTOR,
                             TRAIL_LENGTH, WRIST_LEFT, WRIST_RIGHT)
from rocketfx.detectors import LaunchEvent, make_detector
from rocketfx.follower import LandmarkFollower
from rocketfx.frames import LandmarkFrame
from rocketfx.mapping import landmarks_to_scene
from rocketfx.projectiles import ProjectileSimulator
from rocketfx.scene import SceneSink

logger = logging.getLogger("rocketfx.session")


@dataclass
class EngineConfig:
    mode: str = MODE_HANDS
    render_fps: float = RENDER_FPS
    spring_factor: float = SPRING_FACTOR
    damping: float = DAMPING
    bound_x: float = PROJECTILE_BOUND_X
    bound_y: float = PROJECTILE_BOUND_Y
    trail_length: int = TRAIL_LENGTH
    projectile_dt: float = PROJECTILE_DT
    burst_sparks: int = BURST_SPARKS
    burst_ticks: int = BURST_TICKS
    burst_min_speed: float = BURST_MIN_SPEED
    burst_max_speed: float = BURST_MAX_SPEED
    hand_launch_factor: float = HAND_LAUNCH_FACTOR
    closed_min_fingers: int = CLOSED_MIN_FINGERS
    fling_moving_threshold: float = FLING_MOVING_THRESHOLD
    fling_stopped_threshold: float = FLING_STOPPED_THRESHOLD
    fling_launch_factor: float = FLING_LAUNCH_FACTOR
    seed: Optional[int] = None

    @property
    def num_points(self) -> int:
        if self.mode == MODE_POSE:
            return POSE_LANDMARKS
        return LANDMARKS_PER_HAND * MAX_HANDS


class Session:
    """Everything owned by one run of the engine."""

    def __init__(self, config: EngineConfig, sink: SceneSink):
        self.config = config
        self.sink = sink

        self.follower = LandmarkFollower(config.num_points, config.spring_factor, config.damping)
        self.detector = make_detector(
            config.mode,
            hand_launch_factor=config.hand_launch_factor,
            closed_min_fingers=config.closed_min_fingers,
            fling_moving_threshold=config.fling_moving_threshold,
            fling_stopped_threshold=config.fling_stopped_threshold,
            fling_launch_factor=config.fling_launch_factor,
        )
        self.bursts = BurstManager(
            sink,
            rng=np.random.default_rng(config.seed),
            num_sparks=config.burst_sparks,
            horizon=config.burst_ticks,
            min_speed=config.burst_min_speed,
            max_speed=config.burst_max_speed,
        )
        self.projectiles = ProjectileSimulator(
            sink, self.bursts,
            bound_x=config.bound_x,
            bound_y=config.bound_y,
            trail_length=config.trail_length,
            dt=config.projectile_dt,
        )

        self.event_history: List[LaunchEvent] = []
        self.frame_count = 0
        self.detection_count = 0
        self.closed = False

    def close(self):
        """Release every live renderable and the sink. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        self.projectiles.close()
        self.bursts.close()
        self.sink.close()


class FrameDriver:
    """Runs the render tick and the detection cycle for a session."""

    def __init__(self, session: Session, source=None):
        """
        Args:
            session: Session to drive
            source: Landmark source with `async read()`, `finished` and `close()`
        """
        self.session = session
        self.source = source
        self.running = False

    def tick(self):
        """One render frame."""
        session = self.session
        session.follower.step()
        session.projectiles.tick()
        session.bursts.tick()
        session.sink.update_points(session.follower.positions)
        session.sink.present()
        session.frame_count += 1

    def apply_detections(self, frame: LandmarkFrame) -> List[LaunchEvent]:
        """
        Feed one detection result to the follower and the recognizer.

        Targets are rebuilt from scratch, so an empty frame sends every point
        back to the origin without touching any gesture state.
        """
        session = self.session
        config = session.config
        width, height = frame.frame_size

        session.follower.reset_targets()
        if frame.image is not None:
            session.sink.set_background(frame.image)

        if config.mode == MODE_POSE:
            landmark_sets = frame.sets[:1]
        else:
            landmark_sets = frame.sets[:MAX_HANDS]

        events = []
        for i, landmark_set in enumerate(landmark_sets):
            scene_points = landmarks_to_scene(landmark_set.points, width, height)
            if config.mode == MODE_POSE:
                session.follower.set_targets(0, scene_points)
                identities = [WRIST_RIGHT, WRIST_LEFT]
            else:
                session.follower.set_targets(i * LANDMARKS_PER_HAND, scene_points)
                identities = [landmark_set.label]

            for identity in identities:
                if identity is None:
                    continue
                event = session.detector.detect(identity, landmark_set.points, frame.frame_size, frame.timestamp)
                if event:
                    session.projectiles.launch(event.origin, event.velocity)
                    session.event_history.append(event)
                    events.append(event)

        session.detection_count += 1
        return events

    def stop(self):
        self.running = False

    async def run(self):
        """Drive the session until stopped, the source ends or the sink asks to quit."""
        self.running = True
        tasks = []
        try:
            await self.session.sink.start()
            tasks.append(asyncio.ensure_future(self._render_loop()))
            if self.source is not None:
                tasks.append(asyncio.ensure_future(self._detection_loop()))
            await asyncio.gather(*tasks)
        finally:
            self.stop()
            for task in tasks:
                task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
            if self.source is not None:
                self.source.close()
            self.session.close()
            await self.session.sink.wait_closed()

    async def _render_loop(self):
        loop = asyncio.get_running_loop()
        interval = 1.0 / self.session.config.render_fps
        next_tick = loop.time()
        while self.running:
            self.tick()
            if self.session.sink.quit_requested:
                logger.info("Quit requested by the scene view")
                self.stop()
                break
            next_tick += interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    async def _detection_loop(self):
        while self.running:
            frame = await self.source.read()
            if frame is None:
                if self.source.finished:
                    logger.info("Landmark source finished")
                    self.stop()
                    break
                # not ready yet
                await asyncio.sleep(0)
                continue
            self.apply_detections(frame)
