from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .features import STABLE_MAGNITUDE_MAX, STABLE_MAGNITUDE_MIN
from .schemas import ThresholdOverrides


logger = logging.getLogger(__name__)


# Pitch thresholds in degrees (90 = upright, 0 = flat).
STANDING_MIN_PITCH = 60.0
RUKU_MAX_PITCH = 45.0
SAJDAH_MAX_PITCH = 20.0
SITTING_PITCH_RANGE = (30.0, 60.0)

# Debounce windows; converted to sample counts at the session sample rate.
DEBOUNCE_MS = 400.0
RISING_STABILIZE_MS = 600.0
SAMPLE_RATE_HZ = 50

LOW_PASS_ALPHA = 0.2

OverridesLike = Union[ThresholdOverrides, Mapping[str, Any], None]


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Immutable threshold set for one session. Replace it wholesale, never mutate.

    Sample counts are derived from the millisecond windows at sample_rate_hz;
    rebuild the config whenever the sensor rate changes.
    """
    standing_min_pitch: float = STANDING_MIN_PITCH
    ruku_max_pitch: float = RUKU_MAX_PITCH
    sajdah_max_pitch: float = SAJDAH_MAX_PITCH
    sitting_pitch_range: Tuple[float, float] = SITTING_PITCH_RANGE
    required_stable_samples: int = 20
    rising_stabilize_samples: int = 30
    sample_rate_hz: int = SAMPLE_RATE_HZ
    debounce_ms: float = DEBOUNCE_MS
    rising_stabilize_ms: float = RISING_STABILIZE_MS
    low_pass_alpha: float = LOW_PASS_ALPHA
    stable_magnitude_min: float = STABLE_MAGNITUDE_MIN
    stable_magnitude_max: float = STABLE_MAGNITUDE_MAX

    def to_overrides(self) -> Dict[str, float]:
        """Flat camelCase blob that rebuilds this config through build_thresholds."""
        sit_min, sit_max = self.sitting_pitch_range
        blob = ThresholdOverrides(
            standing_min_pitch=self.standing_min_pitch,
            ruku_max_pitch=self.ruku_max_pitch,
            sajdah_max_pitch=self.sajdah_max_pitch,
            sitting_pitch_min=sit_min,
            sitting_pitch_max=sit_max,
            debounce_ms=self.debounce_ms,
            rising_stabilize_ms=self.rising_stabilize_ms,
            low_pass_alpha=self.low_pass_alpha,
            stable_magnitude_min=self.stable_magnitude_min,
            stable_magnitude_max=self.stable_magnitude_max,
        )
        return blob.model_dump(by_alias=True)


def round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


def ms_to_samples(duration_ms: float, sample_rate_hz: float) -> int:
    """
    Number of samples covering duration_ms at sample_rate_hz, rounded half up and
    clamped to at least 1 (also for zero, negative or non-finite inputs).
    """
    n = float(duration_ms) * float(sample_rate_hz) / 1000.0
    if not math.isfinite(n):
        return 1
    return max(1, round_half_up(n))


def _coerce_overrides(overrides: OverridesLike) -> ThresholdOverrides:
    if overrides is None:
        return ThresholdOverrides()
    if isinstance(overrides, ThresholdOverrides):
        return overrides
    return ThresholdOverrides.model_validate(dict(overrides))


def build_thresholds(overrides: OverridesLike = None, sample_rate_hz: int = SAMPLE_RATE_HZ) -> ThresholdConfig:
    """
    Apply overrides on top of the defaults and derive the debounce sample counts.

    Threshold ordering is not validated: an inverted sitting range yields an edge
    that never matches.
    """
    ov = _coerce_overrides(overrides)

    def pick(value: Optional[float], default: float) -> float:
        return float(default) if value is None else float(value)

    debounce_ms = pick(ov.debounce_ms, DEBOUNCE_MS)
    rising_ms = pick(ov.rising_stabilize_ms, RISING_STABILIZE_MS)

    return ThresholdConfig(
        standing_min_pitch=pick(ov.standing_min_pitch, STANDING_MIN_PITCH),
        ruku_max_pitch=pick(ov.ruku_max_pitch, RUKU_MAX_PITCH),
        sajdah_max_pitch=pick(ov.sajdah_max_pitch, SAJDAH_MAX_PITCH),
        sitting_pitch_range=(
            pick(ov.sitting_pitch_min, SITTING_PITCH_RANGE[0]),
            pick(ov.sitting_pitch_max, SITTING_PITCH_RANGE[1]),
        ),
        required_stable_samples=ms_to_samples(debounce_ms, sample_rate_hz),
        rising_stabilize_samples=ms_to_samples(rising_ms, sample_rate_hz),
        sample_rate_hz=int(sample_rate_hz),
        debounce_ms=debounce_ms,
        rising_stabilize_ms=rising_ms,
        low_pass_alpha=pick(ov.low_pass_alpha, LOW_PASS_ALPHA),
        stable_magnitude_min=pick(ov.stable_magnitude_min, STABLE_MAGNITUDE_MIN),
        stable_magnitude_max=pick(ov.stable_magnitude_max, STABLE_MAGNITUDE_MAX),
    )


def with_sample_rate(config: ThresholdConfig, sample_rate_hz: int) -> ThresholdConfig:
    """Same thresholds re-derived for a different sensor rate."""
    return replace(
        config,
        sample_rate_hz=int(sample_rate_hz),
        required_stable_samples=ms_to_samples(config.debounce_ms, sample_rate_hz),
        rising_stabilize_samples=ms_to_samples(config.rising_stabilize_ms, sample_rate_hz),
    )


def parse_overrides(blob: Optional[Mapping[str, Any]]) -> ThresholdOverrides:
    """
    Validate a stored settings blob. A malformed blob is logged and replaced by
    empty overrides so the session still starts on defaults.
    """
    if not blob:
        return ThresholdOverrides()
    try:
        return ThresholdOverrides.model_validate(dict(blob))
    except (ValidationError, TypeError, ValueError) as exc:
        logger.warning("ignoring invalid threshold overrides: %s", exc)
        return ThresholdOverrides()


def _get_env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(str(environ.get(name, str(default))).strip())
    except ValueError:
        return default


def _get_env_float(environ: Mapping[str, str], name: str) -> Optional[float]:
    raw = environ.get(name)
    if raw is None:
        return None
    try:
        return float(str(raw).strip())
    except ValueError:
        logger.warning("ignoring non-numeric %s=%r", name, raw)
        return None


def thresholds_from_env(
    prefix: str = "RAKAT_",
    environ: Optional[Mapping[str, str]] = None,
) -> ThresholdConfig:
    """
    Build a config from environment variables such as RAKAT_DEBOUNCE_MS or
    RAKAT_SAMPLE_RATE_HZ. Unset or unparsable variables keep their defaults.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, float] = {}
    for name in ThresholdOverrides.model_fields:
        var = prefix + name.upper()
        v = _get_env_float(env, var)
        if v is None:
            continue
        try:
            ThresholdOverrides.model_validate({name: v})
        except ValidationError as exc:
            logger.warning("ignoring out-of-range %s=%r: %s", var, v, exc)
            continue
        values[name] = v
    rate = _get_env_int(env, prefix + "SAMPLE_RATE_HZ", SAMPLE_RATE_HZ)
    return build_thresholds(parse_overrides(values), sample_rate_hz=rate)


DEFAULT_THRESHOLDS = build_thresholds()
