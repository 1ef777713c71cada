from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import os

import yaml


DEFAULT_FILTER_CLASSES = ("person", "cat", "dog", "cow", "goat")
DEFAULT_WATCH_LIST = ("lion", "tiger", "elephant", "bear", "leopard")
DEFAULT_ALERT_MESSAGE = "Red Alert: Wild Animal Detected!"
DEFAULT_WEATHER_URL = (
    "https://weather.visualcrossing.com/VisualCrossingWebServices/rest/services/timeline"
)

DEFAULT_CONFIG: dict[str, Any] = {
    "filter_classes": list(DEFAULT_FILTER_CLASSES),
    "watch_list": list(DEFAULT_WATCH_LIST),
    "alert_message": DEFAULT_ALERT_MESSAGE,
    "detector": {
        "name": "yolo",
        "model_path": "yolov8n.pt",
        "device": "cpu",
        "confidence_threshold": 0.5,
        "dummy": {
            "mode": "none",
            "max_detections_per_frame": 5,
            "seed": 42,
        },
    },
    "camera": {
        "source": 0,
        "frame_width": None,
        "frame_height": None,
        "warmup_frames": 0,
    },
    "temperature": {
        "base_url": DEFAULT_WEATHER_URL,
        "location": "trichy",
        "api_key": None,
        "timeout_seconds": 10.0,
    },
    "loop": {
        "target_fps": 15.0,
        "max_consecutive_inference_errors": 5,
    },
    "data_paths": {
        "logs_dir": "data/logs",
    },
}


@dataclass(frozen=True)
class DummyConfig:
    mode: str = "none"
    max_detections_per_frame: int = 5
    seed: int = 42


@dataclass(frozen=True)
class DetectorConfig:
    name: str = "yolo"
    model_path: str | None = "yolov8n.pt"
    device: str = "cpu"
    confidence_threshold: float = 0.5
    dummy: DummyConfig = field(default_factory=DummyConfig)


@dataclass(frozen=True)
class CameraConfig:
    source: int | str = 0
    frame_width: int | None = None
    frame_height: int | None = None
    warmup_frames: int = 0


@dataclass(frozen=True)
class TemperatureConfig:
    base_url: str = DEFAULT_WEATHER_URL
    location: str = "trichy"
    api_key: str | None = None
    timeout_seconds: float = 10.0

    @property
    def resolved_api_key(self) -> str | None:
        env_key = os.getenv("WILDWATCH_WEATHER_API_KEY")
        if env_key:
            return env_key
        return self.api_key or None


@dataclass(frozen=True)
class LoopConfig:
    target_fps: float = 15.0
    max_consecutive_inference_errors: int = 5


@dataclass(frozen=True)
class DataPaths:
    logs_dir: str = "data/logs"


@dataclass(frozen=True)
class AppConfig:
    filter_classes: tuple[str, ...] = DEFAULT_FILTER_CLASSES
    watch_list: frozenset[str] = frozenset(DEFAULT_WATCH_LIST)
    alert_message: str = DEFAULT_ALERT_MESSAGE
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    temperature: TemperatureConfig = field(default_factory=TemperatureConfig)
    loop: LoopConfig = field(default_factory=LoopConfig)
    data_paths: DataPaths = field(default_factory=DataPaths)


def deep_update(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_update(result[key], value)
        else:
            result[key] = value
    return result


def _ordered_unique(values: Any) -> tuple[str, ...]:
    seen: list[str] = []
    for value in values or []:
        name = str(value).strip()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def _camera_source(value: Any) -> int | str:
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return text


def validate_config(config: AppConfig) -> None:
    if not config.filter_classes:
        raise ValueError("filter_classes must contain at least one class")
    if not config.alert_message.strip():
        raise ValueError("alert_message must not be empty")
    if config.detector.name not in {"yolo", "dummy"}:
        raise ValueError("detector.name must be 'yolo' or 'dummy'")
    if config.detector.name == "yolo" and not config.detector.model_path:
        raise ValueError("detector.model_path is required for the yolo detector")
    if not (0.0 <= config.detector.confidence_threshold <= 1.0):
        raise ValueError("detector.confidence_threshold must be between 0 and 1")
    if config.detector.dummy.mode not in {"none", "random"}:
        raise ValueError("detector.dummy.mode must be 'none' or 'random'")
    if config.detector.dummy.max_detections_per_frame < 0:
        raise ValueError("detector.dummy.max_detections_per_frame must be >= 0")
    for name in ("frame_width", "frame_height"):
        value = getattr(config.camera, name)
        if value is not None and value <= 0:
            raise ValueError(f"camera.{name} must be > 0 when set")
    if config.camera.warmup_frames < 0:
        raise ValueError("camera.warmup_frames must be >= 0")
    if not config.temperature.base_url.strip():
        raise ValueError("temperature.base_url is required")
    if not config.temperature.location.strip():
        raise ValueError("temperature.location is required")
    if config.temperature.timeout_seconds <= 0:
        raise ValueError("temperature.timeout_seconds must be > 0")
    if config.loop.target_fps <= 0:
        raise ValueError("loop.target_fps must be > 0")
    if config.loop.max_consecutive_inference_errors <= 0:
        raise ValueError("loop.max_consecutive_inference_errors must be > 0")


def config_from_dict(data: dict[str, Any]) -> AppConfig:
    merged = deep_update(DEFAULT_CONFIG, data)
    detector_dict = merged.get("detector", {})
    dummy_dict = detector_dict.get("dummy", {})
    camera_dict = merged.get("camera", {})
    temperature_dict = merged.get("temperature", {})
    loop_dict = merged.get("loop", {})
    data_paths_dict = merged.get("data_paths", {})
    config = AppConfig(
        filter_classes=_ordered_unique(merged.get("filter_classes")),
        watch_list=frozenset(name.lower() for name in _ordered_unique(merged.get("watch_list"))),
        alert_message=str(merged.get("alert_message", DEFAULT_ALERT_MESSAGE)),
        detector=DetectorConfig(
            name=str(detector_dict.get("name", "yolo")).lower(),
            model_path=detector_dict.get("model_path"),
            device=str(detector_dict.get("device", "cpu")),
            confidence_threshold=float(detector_dict.get("confidence_threshold", 0.5)),
            dummy=DummyConfig(
                mode=str(dummy_dict.get("mode", "none")).lower(),
                max_detections_per_frame=int(dummy_dict.get("max_detections_per_frame", 5)),
                seed=int(dummy_dict.get("seed", 42)),
            ),
        ),
        camera=CameraConfig(
            source=_camera_source(camera_dict.get("source", 0)),
            frame_width=(
                int(camera_dict["frame_width"])
                if camera_dict.get("frame_width") is not None
                else None
            ),
            frame_height=(
                int(camera_dict["frame_height"])
                if camera_dict.get("frame_height") is not None
                else None
            ),
            warmup_frames=int(camera_dict.get("warmup_frames", 0)),
        ),
        temperature=TemperatureConfig(
            base_url=str(temperature_dict.get("base_url", DEFAULT_WEATHER_URL)).rstrip("/"),
            location=str(temperature_dict.get("location", "trichy")),
            api_key=temperature_dict.get("api_key"),
            timeout_seconds=float(temperature_dict.get("timeout_seconds", 10.0)),
        ),
        loop=LoopConfig(
            target_fps=float(loop_dict.get("target_fps", 15.0)),
            max_consecutive_inference_errors=int(
                loop_dict.get("max_consecutive_inference_errors", 5)
            ),
        ),
        data_paths=DataPaths(
            logs_dir=str(data_paths_dict.get("logs_dir", "data/logs")),
        ),
    )
    validate_config(config)
    return config


def load_config(path: str) -> AppConfig:
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return config_from_dict(data)
