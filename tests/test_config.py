from __future__ import annotations

import dataclasses
import logging

import pytest
from pydantic import ValidationError

from rakat.config import (
    DEFAULT_THRESHOLDS,
    build_thresholds,
    ms_to_samples,
    parse_overrides,
    thresholds_from_env,
    with_sample_rate,
)
from rakat.schemas import ThresholdOverrides


def test_defaults():
    cfg = build_thresholds()
    assert cfg.standing_min_pitch == 60.0
    assert cfg.ruku_max_pitch == 45.0
    assert cfg.sajdah_max_pitch == 20.0
    assert cfg.sitting_pitch_range == (30.0, 60.0)
    assert cfg.sample_rate_hz == 50
    assert cfg.required_stable_samples == 20  # 400 ms at 50 Hz
    assert cfg.rising_stabilize_samples == 30  # 600 ms at 50 Hz
    assert cfg == DEFAULT_THRESHOLDS


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_THRESHOLDS.ruku_max_pitch = 10.0  # type: ignore[misc]


@pytest.mark.parametrize(
    "ms, rate, expected",
    [
        (400, 50, 20),
        (600, 50, 30),
        (400, 100, 40),
        (410, 50, 21),  # 20.5 rounds up
        (10, 50, 1),
        (0, 50, 1),
        (400, 0, 1),
        (400, -50, 1),
    ],
)
def test_ms_to_samples(ms, rate, expected):
    assert ms_to_samples(ms, rate) == expected


def test_overrides_camel_and_snake_case():
    cfg = build_thresholds({"rukuMaxPitch": 40, "sitting_pitch_min": 25, "debounceMs": 200, "unknown": 1})
    assert cfg.ruku_max_pitch == 40.0
    assert cfg.sitting_pitch_range == (25.0, 60.0)
    assert cfg.required_stable_samples == 10
    assert cfg.standing_min_pitch == 60.0


def test_overrides_model_and_sample_rate():
    cfg = build_thresholds(ThresholdOverrides(rising_stabilize_ms=1000), sample_rate_hz=25)
    assert cfg.rising_stabilize_samples == 25
    assert cfg.required_stable_samples == 10


def test_inverted_range_is_not_validated():
    cfg = build_thresholds({"sittingPitchMin": 60, "sittingPitchMax": 30})
    assert cfg.sitting_pitch_range == (60.0, 30.0)


def test_with_sample_rate_rederives_counts():
    cfg = with_sample_rate(build_thresholds({"debounceMs": 300}), 100)
    assert cfg.sample_rate_hz == 100
    assert cfg.required_stable_samples == 30
    assert cfg.rising_stabilize_samples == 60


def test_to_overrides_round_trip():
    cfg = build_thresholds({"standingMinPitch": 65, "sajdahMaxPitch": 15, "lowPassAlpha": 0.3})
    blob = cfg.to_overrides()
    assert blob["standingMinPitch"] == 65.0
    assert build_thresholds(blob) == cfg


def test_build_rejects_invalid_blob():
    with pytest.raises(ValidationError):
        build_thresholds({"debounceMs": "soon"})


def test_parse_overrides_falls_back_to_defaults(caplog):
    with caplog.at_level(logging.WARNING, logger="rakat.config"):
        ov = parse_overrides({"debounceMs": "soon"})
    assert ov == ThresholdOverrides()
    assert "invalid threshold overrides" in caplog.text
    assert parse_overrides(None) == ThresholdOverrides()
    assert parse_overrides({"rukuMaxPitch": 42}).ruku_max_pitch == 42.0


def test_thresholds_from_env():
    env = {
        "RAKAT_DEBOUNCE_MS": "200",
        "RAKAT_RUKU_MAX_PITCH": " 40 ",
        "RAKAT_SAMPLE_RATE_HZ": "100",
        "RAKAT_STANDING_MIN_PITCH": "tall",
    }
    cfg = thresholds_from_env(environ=env)
    assert cfg.sample_rate_hz == 100
    assert cfg.required_stable_samples == 20
    assert cfg.ruku_max_pitch == 40.0
    assert cfg.standing_min_pitch == 60.0


def test_thresholds_from_process_env(monkeypatch):
    monkeypatch.setenv("RAKAT_SAJDAH_MAX_PITCH", "15")
    monkeypatch.setenv("RAKAT_SAMPLE_RATE_HZ", "not-a-number")
    cfg = thresholds_from_env()
    assert cfg.sajdah_max_pitch == 15.0
    assert cfg.sample_rate_hz == 50


def test_thresholds_from_env_skips_only_the_bad_variable(caplog):
    env = {"RAKAT_DEBOUNCE_MS": "200", "RAKAT_LOW_PASS_ALPHA": "2"}
    with caplog.at_level(logging.WARNING, logger="rakat.config"):
        cfg = thresholds_from_env(environ=env)
    assert cfg.required_stable_samples == 10
    assert cfg.low_pass_alpha == 0.2
    assert "RAKAT_LOW_PASS_ALPHA" in caplog.text
