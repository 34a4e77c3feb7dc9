"""Pydantic schemas for gauge readings and chart windows."""

from __future__ import annotations

from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from paddywatch.models.enums import RangeKindEnum


class Reading(BaseModel):
	model_config = ConfigDict(frozen=True)

	raw_timestamp: str = Field(validation_alias=AliasChoices("raw_timestamp", "time"))
	level: float


class NormalizedReading(BaseModel):
	model_config = ConfigDict(frozen=True)

	epoch_ms: int
	level: float


class RangeSpec(BaseModel):
	kind: RangeKindEnum = RangeKindEnum.last_24h
	start_date: date | None = None
	end_date: date | None = None


class WindowedPoint(BaseModel):
	model_config = ConfigDict(frozen=True)

	epoch_ms: int
	level: float
	axis_label: str
	friendly_date: str


class SeriesWindowRequest(BaseModel):
	readings: list[Reading] = Field(default_factory=list)
	range: RangeSpec = Field(default_factory=RangeSpec)
	now_ms: int | None = Field(default=None, ge=0)


class SeriesWindowResponse(BaseModel):
	range: RangeSpec
	start_ms: int
	end_ms: int
	points: list[WindowedPoint] = Field(default_factory=list)
