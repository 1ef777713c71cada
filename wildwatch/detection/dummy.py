from __future__ import annotations

from collections.abc import Iterable, Sequence
import random

import numpy as np

from wildwatch.common.schemas import Detection
from wildwatch.detection.base import Detector, ModelAdapter


class DummyDetector(Detector):
    def __init__(
        self,
        mode: str = "none",
        max_detections_per_frame: int = 5,
        seed: int = 42,
        classes: Sequence[str] | None = None,
    ) -> None:
        self.mode = mode
        self.max_detections_per_frame = max_detections_per_frame
        self.random = random.Random(seed)
        self.classes = list(classes or ["person", "cat", "dog", "cow", "goat"])

    def detect(self, frame: np.ndarray) -> list[Detection]:
        if self.mode == "none":
            return []
        height, width = frame.shape[:2]
        count = self.random.randint(0, self.max_detections_per_frame)
        detections: list[Detection] = []
        for _ in range(count):
            class_name = self.random.choice(self.classes)
            x = self.random.uniform(0, width * 0.7)
            y = self.random.uniform(0, height * 0.7)
            w = min(width - x, self.random.uniform(10, width * 0.3))
            h = min(height - y, self.random.uniform(10, height * 0.3))
            detections.append(
                Detection(
                    class_name=class_name,
                    score=self.random.uniform(0.3, 0.95),
                    bbox=(x, y, w, h),
                )
            )
        return detections


class ScriptedDetector(Detector):
    """Replays a fixed sequence of detection lists, repeating the last one."""

    def __init__(self, frames: Iterable[list[Detection]]) -> None:
        self.frames = list(frames)
        self.calls = 0

    def detect(self, frame: np.ndarray) -> list[Detection]:
        if not self.frames:
            return []
        index = min(self.calls, len(self.frames) - 1)
        self.calls += 1
        return list(self.frames[index])


class DummyModelAdapter(ModelAdapter):
    def __init__(self, detector: Detector) -> None:
        self.detector = detector

    def load(self) -> Detector:
        return self.detector
