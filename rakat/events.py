from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class RakatState(Enum):
    """Postures of one rakat, in cycle order."""
    STANDING = "STANDING"
    RUKU = "RUKU"
    SAJDAH_1 = "SAJDAH_1"
    SITTING = "SITTING"
    SAJDAH_2 = "SAJDAH_2"
    RISING = "RISING"


@dataclass(frozen=True)
class StateChanged:
    from_state: RakatState
    to_state: RakatState


@dataclass(frozen=True)
class CycleCompleted:
    pass


@dataclass(frozen=True)
class DebugLog:
    message: str


RakatEvent = Union[StateChanged, CycleCompleted, DebugLog]
