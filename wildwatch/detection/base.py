from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from wildwatch.common.schemas import Detection


class Detector(ABC):
    @abstractmethod
    def detect(self, frame: np.ndarray) -> list[Detection]:
        raise NotImplementedError

    def close(self) -> None:
        return None


class ModelAdapter(ABC):
    """Wraps a pretrained model; ``load`` may be slow and raises ModelLoadError."""

    @abstractmethod
    def load(self) -> Detector:
        raise NotImplementedError


class StopProcessing(RuntimeError):
    """Raised to stop processing early (e.g., preview window quit)."""
