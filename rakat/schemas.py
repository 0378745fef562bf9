from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ThresholdOverrides(BaseModel):
    """
    Flat key/value threshold blob as stored by the settings layer.

    Accepts the stored camelCase keys as well as snake_case field names.
    Missing fields fall back to the defaults; unknown keys are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    standing_min_pitch: Optional[float] = Field(default=None, alias="standingMinPitch")
    ruku_max_pitch: Optional[float] = Field(default=None, alias="rukuMaxPitch")
    sajdah_max_pitch: Optional[float] = Field(default=None, alias="sajdahMaxPitch")
    sitting_pitch_min: Optional[float] = Field(default=None, alias="sittingPitchMin")
    sitting_pitch_max: Optional[float] = Field(default=None, alias="sittingPitchMax")
    debounce_ms: Optional[float] = Field(default=None, alias="debounceMs")
    rising_stabilize_ms: Optional[float] = Field(default=None, alias="risingStabilizeMs")
    low_pass_alpha: Optional[float] = Field(default=None, gt=0.0, le=1.0, alias="lowPassAlpha")
    stable_magnitude_min: Optional[float] = Field(default=None, alias="stableMagnitudeMin")
    stable_magnitude_max: Optional[float] = Field(default=None, alias="stableMagnitudeMax")


class ReplayRecord(BaseModel):
    timestamp: int = Field(ge=0)
    x: float
    y: float
    z: float


RECORDING_ADAPTER = TypeAdapter(List[ReplayRecord])
