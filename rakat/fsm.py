from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .config import DEFAULT_THRESHOLDS, ThresholdConfig
from .events import CycleCompleted, DebugLog, RakatEvent, RakatState, StateChanged
from .features import PostureFeatures


logger = logging.getLogger(__name__)


def next_candidate(state: RakatState, pitch: float, config: ThresholdConfig) -> Optional[RakatState]:
    """
    The only state allowed to follow `state`, if pitch satisfies that edge's threshold.

    Edges are one-directional. NaN pitch fails every comparison and yields None.
    """
    if state is RakatState.STANDING:
        return RakatState.RUKU if pitch <= config.ruku_max_pitch else None
    if state is RakatState.RUKU:
        return RakatState.SAJDAH_1 if pitch <= config.sajdah_max_pitch else None
    if state is RakatState.SAJDAH_1:
        sit_min, sit_max = config.sitting_pitch_range
        return RakatState.SITTING if sit_min <= pitch <= sit_max else None
    if state is RakatState.SITTING:
        return RakatState.SAJDAH_2 if pitch <= config.sajdah_max_pitch else None
    if state is RakatState.SAJDAH_2:
        return RakatState.RISING if pitch >= config.ruku_max_pitch else None
    if state is RakatState.RISING:
        return RakatState.STANDING if pitch >= config.standing_min_pitch else None
    return None


@dataclass
class MachineState:
    current: RakatState = RakatState.STANDING
    candidate: Optional[RakatState] = None
    stable_count: int = 0
    rising_stable_count: int = 0
    cycles: int = 0


class RakatStateMachine:
    """
    Debounced FSM over the rakat cycle:
    STANDING -> RUKU -> SAJDAH_1 -> SITTING -> SAJDAH_2 -> RISING -> STANDING.

    - A candidate state must hold for config.required_stable_samples consecutive ticks
    - A single disqualifying tick discards the pending candidate
    - RISING -> STANDING additionally needs config.rising_stabilize_samples ticks spent in RISING;
      that transition is followed by CycleCompleted in the same tick
    - With debug=True, DebugLog events describe candidate changes and transitions
    """

    def __init__(self, config: ThresholdConfig = DEFAULT_THRESHOLDS, *, debug: bool = False) -> None:
        self.config = config
        self.debug = bool(debug)
        self.state = MachineState()

    @property
    def current_state(self) -> RakatState:
        return self.state.current

    def reset(self) -> None:
        self.state = MachineState()

    def _emit_debug(self, events: List[RakatEvent], message: Callable[[], str]) -> None:
        if self.debug:
            events.append(DebugLog(message()))

    def _transition(self, to_state: RakatState, events: List[RakatEvent]) -> None:
        st = self.state
        from_state = st.current
        st.current = to_state
        st.candidate = None
        st.stable_count = 0
        if to_state is RakatState.RISING:
            st.rising_stable_count = 0
        logger.debug("rakat state %s -> %s", from_state.value, to_state.value)
        events.append(StateChanged(from_state, to_state))
        self._emit_debug(events, lambda: f"{from_state.value}→{to_state.value}")

    def feed(self, features: PostureFeatures) -> List[RakatEvent]:
        """Advance by one tick. Returns the events of this tick, in emission order."""
        st = self.state
        cfg = self.config
        events: List[RakatEvent] = []

        pitch = float(features.pitch)
        candidate = next_candidate(st.current, pitch, cfg)

        if candidate != st.candidate or st.stable_count == 0:
            self._emit_debug(
                events,
                lambda: (
                    f"pitch={pitch:.1f}° |a|={features.magnitude:.3f} "
                    f"candidate={candidate.value if candidate is not None else '-'} stable={st.stable_count}"
                ),
            )

        if st.current is RakatState.RISING:
            st.rising_stable_count += 1

        if candidate is None:
            st.candidate = None
            st.stable_count = 0
            return events

        if candidate != st.candidate:
            st.candidate = candidate
            st.stable_count = 1
        else:
            st.stable_count += 1

        if st.stable_count < cfg.required_stable_samples:
            return events

        if st.current is RakatState.RISING:
            if st.rising_stable_count < cfg.rising_stabilize_samples:
                return events
            self._transition(candidate, events)
            st.cycles += 1
            logger.info("rakat cycle completed (%d this session)", st.cycles)
            events.append(CycleCompleted())
            self._emit_debug(events, lambda: "CYCLE_COMPLETED")
            return events

        self._transition(candidate, events)
        return events
