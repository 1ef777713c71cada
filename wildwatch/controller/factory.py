from __future__ import annotations

from wildwatch.common.config import AppConfig
from wildwatch.controller.loop import DetectionLoopController
from wildwatch.controller.scheduler import FrameScheduler
from wildwatch.detection.factory import create_model_adapter
from wildwatch.ingestion.camera import CameraSource
from wildwatch.weather.provider import TemperatureProvider


def create_controller(config: AppConfig) -> DetectionLoopController:
    return DetectionLoopController(
        config=config,
        model_adapter=create_model_adapter(config.detector, config.filter_classes),
        video_source=CameraSource(config.camera),
        temperature_provider=TemperatureProvider(config.temperature),
        scheduler=FrameScheduler(config.loop.target_fps),
    )
