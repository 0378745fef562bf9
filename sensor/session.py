from __future__ import annotations

import logging
from typing import Optional

from .filtering import DEFAULT_ALPHA, LowPassFilter3D
from .samples import NAN_VECTOR, FilteredSample, RawSample, is_finite_vector, vector_magnitude


logger = logging.getLogger(__name__)


class SensorSession:
    """
    Caller-owned accelerometer handle: one low-pass filter per session.

    Each live session (or replay) owns its own instance, so concurrent sessions
    never share filter state. A missing or non-finite reading keeps the previous
    filter state and yields a NaN sample, which downstream stages treat as an
    indeterminate posture.
    """

    def __init__(self, alpha: float = DEFAULT_ALPHA) -> None:
        self._filter = LowPassFilter3D(alpha)
        self._active = True
        self.dropped = 0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def alpha(self) -> float:
        return self._filter.alpha

    def start(self) -> None:
        self._filter.reset()
        self.dropped = 0
        self._active = True

    def stop(self) -> None:
        self._filter.reset()
        self._active = False

    def process(self, raw: Optional[RawSample]) -> FilteredSample:
        if not self._active:
            raise RuntimeError("sensor session is stopped")

        if raw is None or not is_finite_vector(raw.vector):
            self.dropped += 1
            logger.debug("dropping invalid accelerometer reading: %r", raw)
            nan = float("nan")
            return FilteredSample(x=nan, y=nan, z=nan, magnitude=nan, raw=raw.vector if raw is not None else NAN_VECTOR)

        filtered = self._filter.update(raw.vector)
        return FilteredSample(
            x=filtered.x,
            y=filtered.y,
            z=filtered.z,
            magnitude=vector_magnitude(filtered),
            raw=raw.vector,
        )
