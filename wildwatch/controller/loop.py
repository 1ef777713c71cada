from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import numpy as np

from wildwatch.common.config import AppConfig
from wildwatch.common.errors import VideoSourceError
from wildwatch.common.schemas import UNAVAILABLE, AlertState, Detection, FrameSize, Temperature
from wildwatch.common.utils import evaluate_alert, filter_detections, is_watched
from wildwatch.controller import state as transitions
from wildwatch.controller.scheduler import FrameScheduler
from wildwatch.controller.state import RunState, SessionState
from wildwatch.detection.base import Detector, ModelAdapter
from wildwatch.detection.surface import DrawingSurface
from wildwatch.ingestion.camera import VideoSource
from wildwatch.weather.provider import TemperatureProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Everything presentation needs, taken from a single frame."""

    run_state: RunState = RunState.IDLE
    failure_reason: str | None = None
    temperature: Temperature | None = None
    frame_index: int = 0
    detections: tuple[Detection, ...] = ()
    alert: AlertState = field(default_factory=AlertState.none)
    annotated_frame: np.ndarray | None = field(default=None, compare=False)
    frame_size: FrameSize | None = None
    last_error: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.run_state in (RunState.IDLE, RunState.LOADING_MODEL)

    @property
    def is_detecting(self) -> bool:
        return self.run_state is RunState.DETECTING


class DetectionLoopController:
    """Owns the model, the camera and the detect-render-alert cycle.

    Every state change goes through the pure transitions in
    ``wildwatch.controller.state``; presentation reads ``snapshot`` and calls
    ``toggle``. All methods run on the controller's event loop.
    """

    def __init__(
        self,
        config: AppConfig,
        model_adapter: ModelAdapter,
        video_source: VideoSource,
        temperature_provider: TemperatureProvider,
        scheduler: FrameScheduler | None = None,
        surface: DrawingSurface | None = None,
    ) -> None:
        self.config = config
        self.model_adapter = model_adapter
        self.video_source = video_source
        self.temperature_provider = temperature_provider
        self.scheduler = scheduler or FrameScheduler(config.loop.target_fps)
        self.surface = surface or DrawingSurface()
        self._state = SessionState()
        self._detector: Detector | None = None
        self._temperature: Temperature | None = None
        self._alert = AlertState.none()
        self._detections: tuple[Detection, ...] = ()
        self._annotated_frame: np.ndarray | None = None
        self._frame_index = 0
        self._generation = 0
        self._in_flight = False
        self._consecutive_errors = 0
        self._last_error: str | None = None
        self._closed = False
        self._snapshot = Snapshot()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def closed(self) -> bool:
        return self._closed

    def _transition(self, step: Callable[..., SessionState], *args) -> SessionState:
        previous = self._state
        self._state = step(previous, *args)
        if self._state != previous:
            logger.info(
                "Run state %s -> %s", previous.run_state.value, self._state.run_state.value
            )
        self._publish()
        return self._state

    def _publish(self) -> None:
        self._snapshot = Snapshot(
            run_state=self._state.run_state,
            failure_reason=self._state.failure_reason,
            temperature=self._temperature,
            frame_index=self._frame_index,
            detections=self._detections,
            alert=self._alert,
            annotated_frame=self._annotated_frame,
            frame_size=self.surface.size,
            last_error=self._last_error,
        )

    async def bootstrap(self) -> SessionState:
        """Fetch the temperature and acquire model and camera concurrently."""
        self._transition(transitions.begin_loading)
        await asyncio.gather(self._load_temperature(), self._acquire())
        return self._state

    async def _load_temperature(self) -> None:
        location = self.config.temperature.location
        try:
            self._temperature = await asyncio.to_thread(
                self.temperature_provider.fetch_current, location
            )
        except Exception:
            logger.exception("Temperature provider failed for %s", location)
            self._temperature = UNAVAILABLE
        logger.info("Temperature for %s: %s", location, self._temperature)
        self._publish()

    async def _acquire(self) -> None:
        try:
            self._detector = await asyncio.to_thread(self.model_adapter.load)
        except Exception as exc:
            logger.exception("Error loading model: %s", exc)
            self._transition(transitions.mark_failed, transitions.MODEL_LOAD_FAILED)
            return
        if self._closed:
            return
        try:
            await asyncio.to_thread(self.video_source.open)
            await asyncio.to_thread(self.video_source.read)
        except VideoSourceError as exc:
            logger.error("Error accessing webcam: %s", exc)
            self.video_source.release_all_tracks()
            self._transition(transitions.mark_failed, transitions.WEBCAM_ACCESS_REQUIRED)
            return
        except Exception:
            logger.exception("Unexpected error acquiring webcam")
            self.video_source.release_all_tracks()
            self._transition(transitions.mark_failed, transitions.WEBCAM_ACCESS_REQUIRED)
            return
        if self._closed:
            return
        if self.video_source.frame_size is not None:
            self.surface.resize(self.video_source.frame_size)
        self._transition(transitions.mark_ready)

    def toggle(self) -> RunState:
        if self._closed:
            return self._state.run_state
        run_state = self._transition(transitions.toggle).run_state
        if run_state is RunState.DETECTING:
            self._generation += 1
            self._consecutive_errors = 0
            self._last_error = None
            self._publish()
            # A cycle still awaiting inference reschedules itself once it sees the new run.
            if not self._in_flight:
                self.scheduler.schedule(self.run_cycle, immediate=True)
        elif run_state is RunState.READY:
            self.scheduler.cancel()
        return run_state

    def stop(self) -> RunState:
        self.scheduler.cancel()
        return self._transition(transitions.stop).run_state

    def _can_run(self) -> bool:
        return (
            not self._closed
            and self._state.run_state is RunState.DETECTING
            and self._detector is not None
            and self.surface.attached
            and self.video_source.is_open
        )

    def _is_stale(self, generation: int) -> bool:
        return not self._can_run() or generation != self._generation

    def _schedule_next(self) -> None:
        if self._can_run():
            self.scheduler.schedule(self.run_cycle)

    async def run_cycle(self) -> bool:
        """Run one capture-infer-render-alert cycle; True when a frame was published."""
        if not self._can_run() or self._in_flight:
            return False
        assert self._detector is not None
        generation = self._generation
        self._in_flight = True
        try:
            frame = await asyncio.to_thread(self.video_source.read)
            detections = await asyncio.to_thread(self._detector.detect, frame)
        except Exception as exc:
            self._in_flight = False
            if not self._is_stale(generation):
                self._record_cycle_error(exc)
            self._schedule_next()
            return False
        self._in_flight = False
        if self._is_stale(generation):
            # Stopped (or restarted) while inference was outstanding: drop the frame.
            self._schedule_next()
            return False
        try:
            self._render(frame, detections)
        except Exception as exc:
            self._record_cycle_error(exc)
            self._schedule_next()
            return False
        self._schedule_next()
        return True

    def _render(self, frame: np.ndarray, detections: Iterable[Detection]) -> None:
        detections = tuple(detections)
        frame_size = self.video_source.frame_size
        if frame_size is not None and frame_size != self.surface.size:
            self.surface.resize(frame_size)
        self.surface.clear()
        filtered = filter_detections(detections, self.config.filter_classes)
        for detection in filtered:
            self.surface.draw_detection(detection)
        alert = evaluate_alert(
            filtered, self.config.filter_classes, self.config.watch_list, self.config.alert_message
        )
        if alert.active and not self._alert.active:
            watched = sorted(
                {d.class_name for d in filtered if is_watched(d, self.config.watch_list)}
            )
            logger.warning("%s (%s)", alert.message, ", ".join(watched))
        elif self._alert.active and not alert.active:
            logger.info("Alert cleared")
        self._alert = alert
        self._detections = detections
        self._annotated_frame = self.surface.compose(frame)
        self._frame_index += 1
        self._consecutive_errors = 0
        self._last_error = None
        self._publish()

    def _record_cycle_error(self, exc: Exception) -> None:
        self._consecutive_errors += 1
        self._last_error = f"Detection failed: {exc}"
        logger.error(
            "Detection cycle failed (%s/%s)",
            self._consecutive_errors,
            self.config.loop.max_consecutive_inference_errors,
            exc_info=exc,
        )
        if self._consecutive_errors >= self.config.loop.max_consecutive_inference_errors:
            logger.error("Too many consecutive detection failures; stopping detection")
            self.stop()
            return
        self._publish()

    def close(self) -> None:
        """Tear the session down; releases the camera on every path, exactly once."""
        if self._closed:
            return
        self._closed = True
        self.scheduler.cancel()
        try:
            self.video_source.release_all_tracks()
        finally:
            if self._detector is not None:
                self._detector.close()
            self._publish()
        logger.info("Session closed")

    async def __aenter__(self) -> DetectionLoopController:
        await self.bootstrap()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
        await self.scheduler.drain()
