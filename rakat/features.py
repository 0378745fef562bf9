from __future__ import annotations

from dataclasses import dataclass
from math import atan2, pi, sqrt

from sensor.samples import FilteredSample


RAD_TO_DEG = 180.0 / pi

# Gravity-only magnitude band (g); outside it the device is accelerating.
STABLE_MAGNITUDE_MIN = 0.85
STABLE_MAGNITUDE_MAX = 1.15


@dataclass(frozen=True)
class PostureFeatures:
    pitch: float  # degrees, 90 = upright, 0 = flat
    roll: float  # degrees, side tilt
    magnitude: float
    is_stable: bool


def pitch_deg(x: float, y: float, z: float) -> float:
    """
    Forward/backward tilt in degrees: atan2(y, sqrt(x² + z²)).

    Rough postures with the device carried upright:
    standing 80-90, ruku 30-45, sitting 40-60, sajdah 0-20.
    """
    return atan2(y, sqrt(x * x + z * z)) * RAD_TO_DEG


def roll_deg(x: float, z: float) -> float:
    return atan2(x, z) * RAD_TO_DEG


def extract_features(
    sample: FilteredSample,
    *,
    stable_min: float = STABLE_MAGNITUDE_MIN,
    stable_max: float = STABLE_MAGNITUDE_MAX,
) -> PostureFeatures:
    """
    Posture features of a filtered sample. Pure; non-finite input gives NaN angles
    and is_stable=False rather than raising.
    """
    magnitude = float(sample.magnitude)
    return PostureFeatures(
        pitch=pitch_deg(sample.x, sample.y, sample.z),
        roll=roll_deg(sample.x, sample.z),
        magnitude=magnitude,
        is_stable=stable_min <= magnitude <= stable_max,
    )
