from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import threading

import cv2
import numpy as np

from wildwatch.common.config import CameraConfig
from wildwatch.common.errors import NoDevice, PermissionDenied, VideoReadError
from wildwatch.common.schemas import FrameSize

logger = logging.getLogger(__name__)


class VideoSource(ABC):
    frame_size: FrameSize | None = None

    @property
    @abstractmethod
    def is_open(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def open(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def release_all_tracks(self) -> None:
        raise NotImplementedError


class CameraSource(VideoSource):
    """Live capture device backed by ``cv2.VideoCapture``.

    ``open`` is called once per session. ``release_all_tracks`` may be called
    from any exit path and releases the device at most once.
    """

    def __init__(self, config: CameraConfig | None = None, capture_factory=None) -> None:
        self.config = config or CameraConfig()
        self._capture_factory = capture_factory or cv2.VideoCapture
        self._capture = None
        self._lock = threading.Lock()
        self.frame_size: FrameSize | None = None
        self.released = False
        self.release_count = 0

    @property
    def is_open(self) -> bool:
        return self._capture is not None and not self.released

    def open(self) -> None:
        with self._lock:
            if self._capture is not None:
                raise RuntimeError("Camera already opened for this session")
            if self.released:
                raise RuntimeError("Camera was released; start a new session")
            try:
                capture = self._capture_factory(self.config.source)
            except PermissionError as exc:
                raise PermissionDenied(f"Access to {self.config.source} denied") from exc
            except Exception as exc:
                raise NoDevice(f"Unable to open video source {self.config.source}: {exc}") from exc
            if not capture.isOpened():
                # OpenCV reports a denied permission the same way as a missing device.
                capture.release()
                raise NoDevice(f"Unable to open video source: {self.config.source}")
            if self.config.frame_width:
                capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.frame_width)
            if self.config.frame_height:
                capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.frame_height)
            self._capture = capture
        for _ in range(self.config.warmup_frames):
            self.read()
        logger.info("Camera opened: %s", self.config.source)

    def read(self) -> np.ndarray:
        with self._lock:
            if self._capture is None or self.released:
                raise VideoReadError("Camera is not open")
            ok, frame = self._capture.read()
        if not ok or frame is None:
            # Permission revoked mid-session surfaces as empty reads.
            raise VideoReadError("Failed to read frame from camera")
        if self.frame_size is None:
            height, width = frame.shape[:2]
            self.frame_size = FrameSize(width=int(width), height=int(height))
            logger.info("First frame received: %sx%s", width, height)
        return frame

    def release_all_tracks(self) -> None:
        with self._lock:
            if self.released:
                return
            self.released = True
            if self._capture is not None:
                self._capture.release()
                self.release_count += 1
                logger.info("Camera released")
