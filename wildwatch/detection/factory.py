from __future__ import annotations

import logging
from collections.abc import Sequence

from wildwatch.common.config import DetectorConfig
from wildwatch.detection.base import ModelAdapter
from wildwatch.detection.dummy import DummyDetector, DummyModelAdapter
from wildwatch.detection.yolo import YOLOModelAdapter

logger = logging.getLogger(__name__)


def create_model_adapter(config: DetectorConfig, class_names: Sequence[str]) -> ModelAdapter:
    if config.name == "yolo":
        if not config.model_path:
            logger.warning("YOLO detector requested but model_path is not set; using DummyDetector")
        else:
            return YOLOModelAdapter(
                model_path=config.model_path,
                device=config.device,
                confidence_threshold=config.confidence_threshold,
            )
    return DummyModelAdapter(
        DummyDetector(
            mode=config.dummy.mode,
            max_detections_per_frame=config.dummy.max_detections_per_frame,
            seed=config.dummy.seed,
            classes=class_names,
        )
    )
