from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence

import numpy as np

from .config import DEFAULT_THRESHOLDS, ThresholdConfig, round_half_up


# Offsets (degrees) from calibrated posture means to suggested thresholds.
STANDING_MARGIN = 15.0
SAJDAH_MARGIN = 10.0
SITTING_ABOVE_SAJDAH = 15.0
SITTING_BELOW_RUKU = 5.0

# Readings counted as bowing / prostrating during their windows.
RUKU_BELOW_STANDING = 20.0
SAJDAH_BELOW_RUKU = 10.0


def mean_of(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def std_dev_of(values: Sequence[float]) -> float:
    """Population standard deviation (divides by n); 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64)))


@dataclass(frozen=True)
class WindowStats:
    mean: float
    std_dev: float
    minimum: float
    count: int


def summarize_window(pitches: Sequence[float]) -> WindowStats:
    """Pitch statistics of one timed recording window. Non-finite readings are skipped."""
    arr = np.asarray(pitches, dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        return WindowStats(mean=0.0, std_dev=0.0, minimum=0.0, count=0)
    return WindowStats(
        mean=mean_of(arr),
        std_dev=std_dev_of(arr),
        minimum=float(arr.min()),
        count=int(arr.size),
    )


def _mean_below(pitches: Sequence[float], limit: float) -> float:
    """
    Mean of the readings below `limit`, or the window minimum when none are.
    The posture windows include the movement into the posture; this keeps only the held part.
    """
    arr = np.asarray(pitches, dtype=np.float64)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        return 0.0
    held = arr[arr < limit]
    if held.size == 0:
        return float(arr.min())
    return mean_of(held)


def suggest_thresholds(
    standing_mean: float,
    ruku_mean: float,
    sajdah_mean: float,
    base: Optional[ThresholdConfig] = None,
) -> ThresholdConfig:
    """
    Suggested thresholds from calibrated posture means, rounded to whole degrees.
    Debounce and sample-rate settings are taken from `base` unchanged.
    """
    base = base or DEFAULT_THRESHOLDS
    return replace(
        base,
        standing_min_pitch=float(round_half_up(standing_mean - STANDING_MARGIN)),
        ruku_max_pitch=float(round_half_up((standing_mean + ruku_mean) / 2.0)),
        sajdah_max_pitch=float(round_half_up(sajdah_mean + SAJDAH_MARGIN)),
        sitting_pitch_range=(
            float(round_half_up(sajdah_mean + SITTING_ABOVE_SAJDAH)),
            float(round_half_up(ruku_mean - SITTING_BELOW_RUKU)),
        ),
    )


@dataclass(frozen=True)
class CalibrationResult:
    standing: WindowStats
    ruku_mean: float
    sajdah_mean: float
    suggested: ThresholdConfig


def calibrate_from_windows(
    standing: Sequence[float],
    ruku: Sequence[float],
    sajdah: Sequence[float],
    base: Optional[ThresholdConfig] = None,
) -> CalibrationResult:
    """
    Suggest thresholds from three pitch windows recorded while the user holds
    standing, ruku and sajdah in turn.
    """
    standing_stats = summarize_window(standing)
    ruku_mean = _mean_below(ruku, standing_stats.mean - RUKU_BELOW_STANDING)
    sajdah_mean = _mean_below(sajdah, ruku_mean - SAJDAH_BELOW_RUKU)
    return CalibrationResult(
        standing=standing_stats,
        ruku_mean=ruku_mean,
        sajdah_mean=sajdah_mean,
        suggested=suggest_thresholds(standing_stats.mean, ruku_mean, sajdah_mean, base),
    )
