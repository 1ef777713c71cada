from __future__ import annotations

import logging

import cv2
import numpy as np

from wildwatch.common.schemas import Detection, FrameSize
from wildwatch.common.utils import label_anchor_y, overlay_label

logger = logging.getLogger(__name__)

BOX_COLOR = (0, 0, 255)
LINE_WIDTH = 2


class DrawingSurface:
    """Transparent overlay the size of the video frame.

    Only the detection cycle writes to it; every write bumps ``revision`` so
    callers can tell whether the overlay changed.
    """

    def __init__(self, font_scale: float = 0.5) -> None:
        self.font_scale = font_scale
        self.size: FrameSize | None = None
        self.revision = 0
        self._canvas: np.ndarray | None = None
        self._mask: np.ndarray | None = None

    @property
    def attached(self) -> bool:
        return self._canvas is not None

    def resize(self, size: FrameSize) -> None:
        if self.size == size and self._canvas is not None:
            return
        self.size = size
        self._canvas = np.zeros((size.height, size.width, 3), dtype=np.uint8)
        self._mask = np.zeros((size.height, size.width), dtype=np.uint8)
        self.revision += 1
        logger.info("Drawing surface sized to %sx%s", size.width, size.height)

    def clear(self) -> None:
        if self._canvas is None or self._mask is None:
            return
        self._canvas.fill(0)
        self._mask.fill(0)
        self.revision += 1

    def draw_detection(self, detection: Detection) -> None:
        if self._canvas is None or self._mask is None:
            return
        x, y, width, height = detection.bbox
        top_left = (int(round(x)), int(round(y)))
        bottom_right = (int(round(x + width)), int(round(y + height)))
        origin = (int(round(x)), int(round(label_anchor_y(y))))
        label = overlay_label(detection)
        for target, color in ((self._canvas, BOX_COLOR), (self._mask, 255)):
            cv2.rectangle(target, top_left, bottom_right, color, LINE_WIDTH)
            cv2.putText(
                target,
                label,
                origin,
                cv2.FONT_HERSHEY_SIMPLEX,
                self.font_scale,
                color,
                1,
                cv2.LINE_AA,
            )
        self.revision += 1

    def snapshot(self) -> np.ndarray | None:
        if self._canvas is None:
            return None
        return self._canvas.copy()

    def compose(self, frame: np.ndarray) -> np.ndarray:
        """Return a copy of ``frame`` with the overlay painted on top."""
        composed = frame.copy()
        if self._canvas is None or self._mask is None:
            return composed
        if composed.shape[:2] != self._mask.shape:
            logger.debug("Frame and overlay sizes differ; skipping composition")
            return composed
        painted = self._mask > 0
        composed[painted] = self._canvas[painted]
        return composed
