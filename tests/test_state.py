import pytest

from wildwatch.controller.state import (
    InvalidTransition,
    RunState,
    SessionState,
    begin_loading,
    mark_failed,
    mark_ready,
    stop,
    toggle,
)


def _ready() -> SessionState:
    return mark_ready(begin_loading(SessionState()))


def test_lifecycle_reaches_ready() -> None:
    state = begin_loading(SessionState())
    assert state.run_state is RunState.LOADING_MODEL
    assert state.is_loading is True
    assert state.can_toggle is False
    assert mark_ready(state).run_state is RunState.READY


def test_toggle_flips_between_ready_and_detecting() -> None:
    detecting = toggle(_ready())
    assert detecting.run_state is RunState.DETECTING
    assert toggle(detecting).run_state is RunState.READY
    assert stop(detecting).run_state is RunState.READY


def test_toggle_ignored_outside_ready_and_detecting() -> None:
    for state in (
        SessionState(),
        begin_loading(SessionState()),
        mark_failed(begin_loading(SessionState()), "boom"),
    ):
        assert toggle(state) == state


def test_failed_is_terminal() -> None:
    failed = mark_failed(begin_loading(SessionState()), "boom")
    assert failed.failure_reason == "boom"
    assert mark_failed(failed, "other").failure_reason == "boom"
    with pytest.raises(InvalidTransition):
        mark_ready(failed)
    with pytest.raises(InvalidTransition):
        begin_loading(failed)
