from typing import List, Optional

import cv2
import numpy as np

from rocketfx.consts import PROJECTILE_BOUND_X, PROJECTILE_BOUND_Y
from rocketfx.scene import KIND_BURST, KIND_PROJECTILE, KIND_TRAIL, SceneView

POINT_COLOR = (196, 209, 54)        # BGR
ROCKET_COLOR = (124, 62, 255)
SPARK_COLOR = (0, 255, 255)


class ScenePreview(SceneView):
    """
    OpenCV window drawing the scene over the mirrored camera image.

    Scene origin sits at the canvas centre with one pixel per scene unit and
    y pointing up. Press 'q' in the window to quit.
    """

    def __init__(self, window_name: str = "Rockets", width: int = PROJECTILE_BOUND_X * 2,
                 height: int = PROJECTILE_BOUND_Y * 2, show_window: bool = True):
        self.window_name = window_name
        self.width = width
        self.height = height
        self.show_window = show_window
        self.background: Optional[np.ndarray] = None
        self.canvas = np.zeros((height, width, 3), dtype=np.uint8)
        self.quit_requested = False
        self._window_open = False

    def set_background(self, image: np.ndarray):
        # selfie view, dimmed so the scene stands out
        mirrored = cv2.flip(image, 1)
        self.background = (cv2.resize(mirrored, (self.width, self.height)) * 0.5).astype(np.uint8)

    def to_pixel(self, point) -> tuple:
        return int(self.width / 2 + point[0]), int(self.height / 2 - point[1])

    def draw(self, scene) -> np.ndarray:
        """Render the live scene to a BGR canvas."""
        if self.background is not None:
            canvas = self.background.copy()
        else:
            canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)

        if scene.points is not None:
            for point in scene.points:
                cv2.circle(canvas, self.to_pixel(point), 4, POINT_COLOR, -1)

        for trail in scene.live(KIND_TRAIL):
            pixels = np.array([self.to_pixel(p) for p in trail["points"]], dtype=np.int32)
            cv2.polylines(canvas, [pixels], False, ROCKET_COLOR, 4)

        for rocket in scene.live(KIND_PROJECTILE):
            cv2.circle(canvas, self.to_pixel(rocket["position"]), 9, ROCKET_COLOR, -1)

        for burst in scene.live(KIND_BURST):
            overlay = canvas.copy()
            for spark in burst["positions"]:
                cv2.circle(overlay, self.to_pixel(spark), 5, SPARK_COLOR, -1)
            opacity = float(burst["opacity"])
            cv2.addWeighted(overlay, opacity, canvas, 1 - opacity, 0, canvas)

        return canvas

    def render(self, scene, commands: List[dict]):
        self.canvas = self.draw(scene)
        if self.show_window:
            cv2.imshow(self.window_name, self.canvas)
            self._window_open = True
            if cv2.waitKey(1) & 0xFF == ord('q'):
                self.quit_requested = True

    def close(self):
        if self._window_open:
            self._window_open = False
            cv2.destroyWindow(self.window_name)
