from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Detection:
    class_name: str
    score: float
    bbox: tuple[float, float, float, float]


@dataclass(frozen=True)
class FrameSize:
    width: int
    height: int


@dataclass(frozen=True)
class AlertState:
    active: bool = False
    message: str | None = None

    @classmethod
    def none(cls) -> AlertState:
        return cls()

    @classmethod
    def raised(cls, message: str) -> AlertState:
        return cls(active=True, message=message)


class _Unavailable:
    _instance: _Unavailable | None = None

    def __new__(cls) -> _Unavailable:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNAVAILABLE"

    def __str__(self) -> str:
        return "Unavailable"

    def __bool__(self) -> bool:
        return False


UNAVAILABLE = _Unavailable()

Temperature = Union[float, _Unavailable]
