from __future__ import annotations

from collections.abc import Collection
import math
from typing import Iterable

from wildwatch.common.schemas import AlertState, Detection


def is_filtered(detection: Detection, filter_classes: Collection[str]) -> bool:
    return detection.class_name in filter_classes


def is_watched(detection: Detection, watch_list: Collection[str]) -> bool:
    return detection.class_name.lower() in watch_list


def filter_detections(
    detections: Iterable[Detection], filter_classes: Collection[str]
) -> list[Detection]:
    return [detection for detection in detections if is_filtered(detection, filter_classes)]


def evaluate_alert(
    detections: Iterable[Detection],
    filter_classes: Collection[str],
    watch_list: Collection[str],
    message: str,
) -> AlertState:
    for detection in detections:
        if is_filtered(detection, filter_classes) and is_watched(detection, watch_list):
            return AlertState.raised(message)
    return AlertState.none()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def overlay_label(detection: Detection) -> str:
    return f"{detection.class_name} ({round_half_up(detection.score * 100)}%)"


def confidence_percent(score: float) -> str:
    return f"{score * 100:.2f}%"


def rounded_bbox(bbox: tuple[float, float, float, float]) -> list[int]:
    return [round_half_up(value) for value in bbox]


def label_anchor_y(y: float, min_y: float = 10.0, offset: float = 5.0) -> float:
    return y - offset if y > min_y else min_y


def xyxy_to_xywh(x1: float, y1: float, x2: float, y2: float) -> tuple[float, float, float, float]:
    return (x1, y1, max(0.0, x2 - x1), max(0.0, y2 - y1))
