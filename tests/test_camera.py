import numpy as np
import pytest

from wildwatch.common.config import CameraConfig
from wildwatch.common.errors import NoDevice, PermissionDenied, VideoReadError
from wildwatch.common.schemas import FrameSize
from wildwatch.ingestion.camera import CameraSource


class FakeCapture:
    def __init__(self, opened: bool = True, frames: int = 10) -> None:
        self.opened = opened
        self.frames = frames
        self.release_calls = 0
        self.props: dict[int, float] = {}

    def isOpened(self) -> bool:
        return self.opened

    def set(self, prop: int, value: float) -> bool:
        self.props[prop] = value
        return True

    def read(self):
        if self.frames <= 0:
            return False, None
        self.frames -= 1
        return True, np.zeros((48, 64, 3), dtype=np.uint8)

    def release(self) -> None:
        self.release_calls += 1


def test_open_read_and_release_once() -> None:
    capture = FakeCapture()
    camera = CameraSource(CameraConfig(source=0), capture_factory=lambda _source: capture)
    assert camera.frame_size is None
    camera.open()
    assert camera.is_open is True
    camera.read()
    assert camera.frame_size == FrameSize(width=64, height=48)
    camera.release_all_tracks()
    camera.release_all_tracks()
    assert capture.release_calls == 1
    assert camera.is_open is False
    with pytest.raises(VideoReadError):
        camera.read()


def test_unopened_device_raises_no_device() -> None:
    capture = FakeCapture(opened=False)
    camera = CameraSource(CameraConfig(source=3), capture_factory=lambda _source: capture)
    with pytest.raises(NoDevice):
        camera.open()
    assert capture.release_calls == 1


def test_permission_error_raises_permission_denied() -> None:
    def factory(_source):
        raise PermissionError("camera access denied")

    camera = CameraSource(capture_factory=factory)
    with pytest.raises(PermissionDenied):
        camera.open()


def test_warmup_frames_are_consumed_on_open() -> None:
    capture = FakeCapture(frames=5)
    camera = CameraSource(CameraConfig(warmup_frames=2), capture_factory=lambda _source: capture)
    camera.open()
    assert capture.frames == 3


def test_empty_read_raises() -> None:
    camera = CameraSource(capture_factory=lambda _source: FakeCapture(frames=0))
    camera.open()
    with pytest.raises(VideoReadError):
        camera.read()


def test_release_before_open_blocks_reopen() -> None:
    camera = CameraSource(capture_factory=lambda _source: FakeCapture())
    camera.release_all_tracks()
    with pytest.raises(RuntimeError):
        camera.open()


def test_capture_backend_error_raises_no_device() -> None:
    def factory(_source):
        raise OSError("v4l2 ioctl failed")

    camera = CameraSource(capture_factory=factory)
    with pytest.raises(NoDevice):
        camera.open()
    assert camera.is_open is False
