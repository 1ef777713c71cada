from __future__ import annotations

import logging
import time

import cv2
import numpy as np

from wildwatch.common.schemas import AlertState
from wildwatch.detection.base import StopProcessing

logger = logging.getLogger(__name__)

ALERT_COLOR = (0, 0, 255)
TOGGLE_KEY = ord(" ")
QUIT_KEY = ord("q")


class PreviewWindow:
    """OpenCV window showing annotated frames; ``q`` stops, space toggles detection."""

    def __init__(
        self,
        window_name: str = "Wildwatch",
        display_resize_width: int | None = None,
    ) -> None:
        self.window_name = window_name
        self.display_resize_width = display_resize_width
        self._displayed_frames = 0
        self._last_fps_time = time.monotonic()
        logger.info("Preview enabled - press 'q' to stop, space to toggle detection.")

    def show(self, frame: np.ndarray, alert: AlertState) -> bool:
        """Display ``frame``; returns True when the user asked to toggle detection."""
        display_frame = frame
        if alert.active and alert.message:
            display_frame = frame.copy()
            cv2.putText(
                display_frame,
                alert.message,
                (10, 30),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.8,
                ALERT_COLOR,
                2,
                cv2.LINE_AA,
            )
        if self.display_resize_width is not None:
            height, width = display_frame.shape[:2]
            if width > 0 and self.display_resize_width > 0:
                scale = self.display_resize_width / float(width)
                if scale != 1.0:
                    display_frame = cv2.resize(
                        display_frame,
                        (int(round(width * scale)), int(round(height * scale))),
                        interpolation=cv2.INTER_AREA,
                    )
        cv2.imshow(self.window_name, display_frame)
        self._displayed_frames += 1
        now = time.monotonic()
        elapsed = now - self._last_fps_time
        if elapsed >= 5.0:
            logger.info("Preview FPS: %.2f", self._displayed_frames / elapsed)
            self._displayed_frames = 0
            self._last_fps_time = now
        key = cv2.waitKey(1) & 0xFF
        if key == QUIT_KEY:
            self.close()
            raise StopProcessing("User requested stop")
        return key == TOGGLE_KEY

    def close(self) -> None:
        cv2.destroyAllWindows()
