from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from wildwatch.common.schemas import Detection, Temperature
from wildwatch.common.utils import confidence_percent, rounded_bbox
from wildwatch.controller.loop import Snapshot

TABLE_COLUMNS = ["Checking Process", "Bounding Box", "Evaluation"]
EMPTY_TABLE_MESSAGE = "No Animal detected yet."
LOADING_MESSAGE = "Loading model..."


def toggle_label(snapshot: Snapshot) -> str:
    return "Stop Detection" if snapshot.is_detecting else "Start Detection"


def toggle_disabled(snapshot: Snapshot) -> bool:
    return snapshot.is_loading or snapshot.failure_reason is not None


def temperature_label(temperature: Temperature | None) -> str:
    if temperature is None:
        return "..."
    if isinstance(temperature, (int, float)):
        return f"{temperature:g}"
    return str(temperature)


def format_bbox(bbox: tuple[float, float, float, float]) -> str:
    return "[" + ", ".join(str(value) for value in rounded_bbox(bbox)) + "]"


def detection_table(detections: Iterable[Detection]) -> pd.DataFrame:
    rows = [
        {
            TABLE_COLUMNS[0]: detection.class_name,
            TABLE_COLUMNS[1]: format_bbox(detection.bbox),
            TABLE_COLUMNS[2]: confidence_percent(detection.score),
        }
        for detection in detections
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def status_banners(snapshot: Snapshot) -> list[tuple[str, str]]:
    """Return ``(kind, text)`` pairs in display order; kind is info, error or warning."""
    banners: list[tuple[str, str]] = []
    if snapshot.is_loading:
        banners.append(("info", LOADING_MESSAGE))
    if snapshot.failure_reason:
        banners.append(("error", snapshot.failure_reason))
    if snapshot.alert.active and snapshot.alert.message:
        banners.append(("error", snapshot.alert.message))
    if snapshot.last_error:
        banners.append(("warning", snapshot.last_error))
    return banners
