from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


MODEL_LOAD_FAILED = "Failed to load object detection model."
WEBCAM_ACCESS_REQUIRED = "Please allow access to the webcam."


class RunState(str, Enum):
    IDLE = "idle"
    LOADING_MODEL = "loading_model"
    READY = "ready"
    DETECTING = "detecting"
    FAILED = "failed"


@dataclass(frozen=True)
class SessionState:
    run_state: RunState = RunState.IDLE
    failure_reason: str | None = None

    @property
    def is_loading(self) -> bool:
        return self.run_state in (RunState.IDLE, RunState.LOADING_MODEL)

    @property
    def can_toggle(self) -> bool:
        return self.run_state in (RunState.READY, RunState.DETECTING)


class InvalidTransition(RuntimeError):
    pass


# Transitions below are pure: each returns the next state record.


def begin_loading(state: SessionState) -> SessionState:
    if state.run_state is not RunState.IDLE:
        raise InvalidTransition(f"Cannot start loading from {state.run_state.value}")
    return replace(state, run_state=RunState.LOADING_MODEL)


def mark_ready(state: SessionState) -> SessionState:
    if state.run_state is not RunState.LOADING_MODEL:
        raise InvalidTransition(f"Cannot become ready from {state.run_state.value}")
    return replace(state, run_state=RunState.READY)


def mark_failed(state: SessionState, reason: str) -> SessionState:
    if state.run_state is RunState.FAILED:
        return state
    return SessionState(run_state=RunState.FAILED, failure_reason=reason)


def toggle(state: SessionState) -> SessionState:
    """Flip between READY and DETECTING; any other state is returned unchanged."""
    if state.run_state is RunState.READY:
        return replace(state, run_state=RunState.DETECTING)
    if state.run_state is RunState.DETECTING:
        return replace(state, run_state=RunState.READY)
    return state


def stop(state: SessionState) -> SessionState:
    if state.run_state is RunState.DETECTING:
        return replace(state, run_state=RunState.READY)
    return state
