from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sensor.filtering import LowPassFilter3D
from sensor.samples import FilteredSample, RawSample, vector_magnitude

from .config import DEFAULT_THRESHOLDS, ThresholdConfig
from .events import CycleCompleted, DebugLog, RakatState, StateChanged
from .features import extract_features
from .fsm import RakatStateMachine
from .schemas import RECORDING_ADAPTER


@dataclass(frozen=True)
class TimelineEntry:
    timestamp_ms: int
    state: RakatState


@dataclass(frozen=True)
class ReplayResult:
    cycle_count: int
    state_timeline: Tuple[TimelineEntry, ...]
    debug_log: Tuple[str, ...] = field(default=())

    def to_dict(self) -> Dict[str, object]:
        return {
            "cycle_count": self.cycle_count,
            "state_timeline": [
                {"timestamp": e.timestamp_ms, "state": e.state.value} for e in self.state_timeline
            ],
        }


def load_recording(records: Iterable[Any]) -> List[RawSample]:
    """
    Validate parsed recording records ({timestamp, x, y, z}) into samples.
    Raises pydantic.ValidationError on malformed input.
    """
    parsed = RECORDING_ADAPTER.validate_python(list(records))
    return [RawSample(x=r.x, y=r.y, z=r.z, timestamp_ms=r.timestamp) for r in parsed]


def run_replay(
    samples: Sequence[RawSample],
    config: Optional[ThresholdConfig] = None,
    *,
    debug: bool = False,
    apply_filter: bool = False,
) -> ReplayResult:
    """
    Feed a recorded sample sequence through a fresh state machine, in order and
    without real-time pacing. Same input and config always give the same result.

    Recordings normally hold already-filtered vectors; apply_filter=True runs them
    through a new low-pass filter at config.low_pass_alpha first.
    """
    cfg = config or DEFAULT_THRESHOLDS
    machine = RakatStateMachine(cfg, debug=debug)
    lpf = LowPassFilter3D(cfg.low_pass_alpha) if apply_filter else None

    cycle_count = 0
    timeline: List[TimelineEntry] = []
    debug_lines: List[str] = []

    for s in samples:
        vec = s.vector if lpf is None else lpf.update(s.vector)
        sample = FilteredSample(x=vec.x, y=vec.y, z=vec.z, magnitude=vector_magnitude(vec), raw=s.vector)
        features = extract_features(
            sample, stable_min=cfg.stable_magnitude_min, stable_max=cfg.stable_magnitude_max
        )
        for ev in machine.feed(features):
            if isinstance(ev, StateChanged):
                timeline.append(TimelineEntry(timestamp_ms=int(s.timestamp_ms), state=ev.to_state))
            elif isinstance(ev, CycleCompleted):
                cycle_count += 1
            elif isinstance(ev, DebugLog):
                debug_lines.append(ev.message)

    return ReplayResult(cycle_count=cycle_count, state_timeline=tuple(timeline), debug_log=tuple(debug_lines))
