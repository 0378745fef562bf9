from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class RawSample:
    """One accelerometer reading in g, as delivered by the sensor source."""
    x: float
    y: float
    z: float
    timestamp_ms: int = 0

    @property
    def vector(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)


@dataclass(frozen=True)
class FilteredSample:
    x: float
    y: float
    z: float
    magnitude: float
    raw: Vector3


NAN_VECTOR = Vector3(float("nan"), float("nan"), float("nan"))


def is_finite_vector(vec: Vector3) -> bool:
    return bool(np.isfinite(vec.x) and np.isfinite(vec.y) and np.isfinite(vec.z))


def vector_magnitude(vec: Vector3) -> float:
    """Euclidean norm sqrt(x² + y² + z²); NaN propagates."""
    return float(np.sqrt(vec.x * vec.x + vec.y * vec.y + vec.z * vec.z))
