from __future__ import annotations

from typing import Iterable, Iterator, List, Optional

from sensor.samples import RawSample
from sensor.session import SensorSession

from .config import DEFAULT_THRESHOLDS, ThresholdConfig
from .events import RakatEvent, RakatState
from .features import PostureFeatures, extract_features
from .fsm import RakatStateMachine


class RakatTracker:
    """
    Live pipeline for one prayer session: raw sample -> low-pass filter ->
    posture features -> state machine.

    Owns its sensor session and machine; run one tracker per session.
    """

    def __init__(self, config: ThresholdConfig = DEFAULT_THRESHOLDS, *, debug: bool = False) -> None:
        self.config = config
        self.sensor = SensorSession(alpha=config.low_pass_alpha)
        self.machine = RakatStateMachine(config, debug=debug)
        self.last_features: Optional[PostureFeatures] = None

    @property
    def current_state(self) -> RakatState:
        return self.machine.current_state

    @property
    def cycles(self) -> int:
        return self.machine.state.cycles

    def reset(self) -> None:
        self.sensor.start()
        self.machine.reset()
        self.last_features = None

    def process(self, raw: Optional[RawSample]) -> List[RakatEvent]:
        sample = self.sensor.process(raw)
        features = extract_features(
            sample,
            stable_min=self.config.stable_magnitude_min,
            stable_max=self.config.stable_magnitude_max,
        )
        self.last_features = features
        return self.machine.feed(features)

    def track(self, samples: Iterable[Optional[RawSample]]) -> Iterator[RakatEvent]:
        """Lazily yield events for samples in arrival order."""
        for raw in samples:
            yield from self.process(raw)
