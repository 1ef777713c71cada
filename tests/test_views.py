from wildwatch.common.schemas import UNAVAILABLE, AlertState, Detection
from wildwatch.controller.loop import Snapshot
from wildwatch.controller.state import RunState
from wildwatch.dashboard.views import (
    LOADING_MESSAGE,
    TABLE_COLUMNS,
    detection_table,
    status_banners,
    temperature_label,
    toggle_disabled,
    toggle_label,
)


def test_detection_table_rows() -> None:
    table = detection_table(
        [
            Detection("dog", 0.8734, (10.4, 20.6, 100.5, 50.2)),
            Detection("cat", 0.5, (0.0, 0.0, 1.0, 1.0)),
        ]
    )
    assert list(table.columns) == TABLE_COLUMNS
    assert table.iloc[0].tolist() == ["dog", "[10, 21, 101, 50]", "87.34%"]
    assert table.iloc[1].tolist() == ["cat", "[0, 0, 1, 1]", "50.00%"]


def test_empty_detection_table_keeps_columns() -> None:
    table = detection_table([])
    assert table.empty
    assert list(table.columns) == TABLE_COLUMNS


def test_toggle_label_and_disabled_state() -> None:
    assert toggle_label(Snapshot(run_state=RunState.READY)) == "Start Detection"
    assert toggle_label(Snapshot(run_state=RunState.DETECTING)) == "Stop Detection"
    assert toggle_disabled(Snapshot(run_state=RunState.LOADING_MODEL)) is True
    assert toggle_disabled(Snapshot(run_state=RunState.READY)) is False


def test_temperature_label() -> None:
    assert temperature_label(None) == "..."
    assert temperature_label(UNAVAILABLE) == "Unavailable"
    assert temperature_label(31.5) == "31.5"


def test_status_banners_order() -> None:
    snapshot = Snapshot(
        run_state=RunState.DETECTING,
        alert=AlertState.raised("Red Alert: Wild Animal Detected!"),
        last_error="Detection failed: boom",
    )
    assert status_banners(snapshot) == [
        ("error", "Red Alert: Wild Animal Detected!"),
        ("warning", "Detection failed: boom"),
    ]
    assert status_banners(Snapshot(run_state=RunState.LOADING_MODEL)) == [
        ("info", LOADING_MESSAGE)
    ]
    failed = Snapshot(run_state=RunState.FAILED, failure_reason="Failed to load object detection model.")
    assert status_banners(failed) == [("error", "Failed to load object detection model.")]
