from __future__ import annotations

import logging
from typing import Any

import numpy as np

from wildwatch.common.errors import InferenceError, ModelLoadError
from wildwatch.common.schemas import Detection
from wildwatch.common.utils import xyxy_to_xywh
from wildwatch.detection.base import Detector, ModelAdapter

logger = logging.getLogger(__name__)


def result_to_detections(result: Any, confidence_threshold: float) -> list[Detection]:
    detections: list[Detection] = []
    names = result.names or {}
    for box in result.boxes:
        class_idx = int(box.cls[0])
        label = str(names.get(class_idx, class_idx))
        score = float(box.conf[0])
        if score < confidence_threshold:
            continue
        x1, y1, x2, y2 = map(float, box.xyxy[0].tolist())
        detections.append(
            Detection(class_name=label, score=score, bbox=xyxy_to_xywh(x1, y1, x2, y2))
        )
    return detections


class YOLODetector(Detector):
    def __init__(self, model: Any, device: str = "cpu", confidence_threshold: float = 0.5) -> None:
        self.model = model
        self.device = device
        self.confidence_threshold = confidence_threshold

    def detect(self, frame: np.ndarray) -> list[Detection]:
        try:
            results = self.model.predict(
                frame, verbose=False, device=self.device, conf=self.confidence_threshold
            )
        except Exception as exc:
            raise InferenceError(f"YOLO inference failed: {exc}") from exc
        if not results:
            return []
        return result_to_detections(results[0], self.confidence_threshold)


class YOLOModelAdapter(ModelAdapter):
    def __init__(
        self,
        model_path: str,
        device: str = "cpu",
        confidence_threshold: float = 0.5,
    ) -> None:
        if not model_path:
            raise ValueError("model_path is required for YOLOModelAdapter")
        self.model_path = model_path
        self.device = device
        self.confidence_threshold = confidence_threshold

    def load(self) -> Detector:
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise ModelLoadError("ultralytics is not installed") from exc
        try:
            model = YOLO(self.model_path)
        except Exception as exc:
            raise ModelLoadError(f"Unable to load model {self.model_path}: {exc}") from exc
        logger.info("Loaded YOLO model %s on %s", self.model_path, self.device)
        return YOLODetector(
            model, device=self.device, confidence_threshold=self.confidence_threshold
        )
