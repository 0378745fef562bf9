from __future__ import annotations

from typing import Optional

import numpy as np

from .samples import Vector3


DEFAULT_ALPHA = 0.2


class LowPassFilter3D:
    """
    One-pole low-pass (exponential smoothing) filter over a 3-component vector.

    - The first update seeds the state with the input and returns it unchanged
    - Later updates move the state towards the input: state += alpha * (input - state)
    - reset() returns the filter to the unseeded state
    """

    def __init__(self, alpha: float = DEFAULT_ALPHA) -> None:
        if not (0.0 < alpha <= 1.0):
            raise ValueError("alpha must be in (0, 1]")
        self.alpha = float(alpha)
        self._state: Optional[np.ndarray] = None

    @property
    def seeded(self) -> bool:
        return self._state is not None

    def reset(self) -> None:
        self._state = None

    def update(self, vec: Vector3) -> Vector3:
        obs = np.array([vec.x, vec.y, vec.z], dtype=np.float64)
        if self._state is None:
            self._state = obs
            return Vector3(float(obs[0]), float(obs[1]), float(obs[2]))

        self._state = self._state + self.alpha * (obs - self._state)
        s = self._state
        return Vector3(float(s[0]), float(s[1]), float(s[2]))
