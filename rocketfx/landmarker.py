import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks.python import BaseOptions
from mediapipe.tasks.python import vision

from rocketfx.consts import (DEFAULT_FRAME_HEIGHT, DEFAULT_FRAME_WIDTH, HAND_MODEL_URL, MAX_HANDS,
                             MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE, MODE_POSE, POSE_MODEL_URL)
from rocketfx.frames import LandmarkFrame, LandmarkSet

logger = logging.getLogger("rocketfx.landmarker")

MODELS_DIR = Path("models")


class ModelNotFoundError(FileNotFoundError):
    """The MediaPipe .task file for the session mode is missing."""


class SourceError(RuntimeError):
    """The camera or video file could not be opened."""


def default_model_path(mode: str) -> Path:
    if mode == MODE_POSE:
        return MODELS_DIR / "pose_landmarker_lite.task"
    return MODELS_DIR / "hand_landmarker.task"


def create_landmarker(mode: str, model_path: Optional[Path] = None):
    """Build a MediaPipe hand or pose landmarker in VIDEO mode."""
    model_path = Path(model_path) if model_path else default_model_path(mode)
    if not model_path.exists():
        url = POSE_MODEL_URL if mode == MODE_POSE else HAND_MODEL_URL
        raise ModelNotFoundError(f"Model not found: {model_path}\nDownload it from {url}")

    base_options = BaseOptions(model_asset_path=str(model_path))
    if mode == MODE_POSE:
        options = vision.PoseLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=MIN_DETECTION_CONFIDENCE,
            min_tracking_confidence=MIN_TRACKING_CONFIDENCE,
        )
        return vision.PoseLandmarker.create_from_options(options)

    options = vision.HandLandmarkerOptions(
        base_options=base_options,
        running_mode=vision.RunningMode.VIDEO,
        num_hands=MAX_HANDS,
        min_hand_detection_confidence=MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence=MIN_TRACKING_CONFIDENCE,
    )
    return vision.HandLandmarker.create_from_options(options)


def _to_array(landmark_list) -> np.ndarray:
    return np.array([[lm.x, lm.y, lm.z] for lm in landmark_list], dtype=float)


def result_to_sets(mode: str, result) -> list:
    """Convert a MediaPipe result into labelled landmark sets."""
    if mode == MODE_POSE:
        return [LandmarkSet(points=_to_array(pose)) for pose in result.pose_landmarks]

    sets = []
    for i, hand in enumerate(result.hand_landmarks):
        label = None
        if result.handedness and len(result.handedness) > i and result.handedness[i]:
            label = result.handedness[i][0].category_name
        sets.append(LandmarkSet(points=_to_array(hand), label=label))
    return sets


class LandmarkSource:
    """
    Camera or video file feeding a MediaPipe landmarker.

    Capture and inference run on a single worker thread so the event loop
    keeps rendering while the model is busy.
    """

    def __init__(self, mode: str, source: Union[int, str] = 0, model_path: Optional[Path] = None,
                 width: int = DEFAULT_FRAME_WIDTH, height: int = DEFAULT_FRAME_HEIGHT):
        self.mode = mode
        self.source = source
        self.is_video_file = isinstance(source, str)
        self.finished = False

        self.capture = cv2.VideoCapture(source)
        if not self.capture.isOpened():
            raise SourceError(f"Could not open {'video file' if self.is_video_file else 'camera'}: {source}")
        if not self.is_video_file:
            self.capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            self.capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

        try:
            self.landmarker = create_landmarker(mode, model_path)
        except Exception:
            self.capture.release()
            raise

        self._executor = ThreadPoolExecutor(max_workers=1)
        self._start_time = time.monotonic()
        self._last_timestamp_ms = -1
        self._inflight = None
        self._closed = False

    def _read_blocking(self) -> Optional[LandmarkFrame]:
        success, frame = self.capture.read()
        if not success:
            if self.is_video_file:
                logger.info("End of video reached")
                self.finished = True
            else:
                logger.warning("Failed to read frame, retrying...")
            return None

        frame_time = time.monotonic() - self._start_time
        # VIDEO mode needs strictly increasing timestamps
        timestamp_ms = max(int(frame_time * 1000), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self.landmarker.detect_for_video(image, timestamp_ms)

        height, width = frame.shape[:2]
        return LandmarkFrame(
            frame_size=(width, height),
            timestamp=frame_time,
            sets=result_to_sets(self.mode, result),
            image=frame,
        )

    async def read(self) -> Optional[LandmarkFrame]:
        """Next landmark frame, or None when the source has nothing yet."""
        if self.finished:
            return None
        self._inflight = self._executor.submit(self._read_blocking)
        return await asyncio.wrap_future(self._inflight)

    def close(self):
        """
        Stop the worker without waiting for it.

        A read still in flight keeps the capture and landmarker until it
        settles; they are released from its completion callback.
        """
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self._inflight is not None:
            self._inflight.add_done_callback(lambda _: self._release())
        else:
            self._release()

    def _release(self):
        self.capture.release()
        self.landmarker.close()
