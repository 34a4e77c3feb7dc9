"""Pydantic schemas for weather input, advisory verdicts and plot summaries."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from paddywatch.models.enums import SeverityEnum
from paddywatch.schemas.crop import CropPlan, CropStage
from paddywatch.schemas.series import Reading


class WeatherSnapshot(BaseModel):
	model_config = ConfigDict(frozen=True)

	temp: float = 0.0
	rain_chance: float = Field(default=0.0, ge=0, le=100)
	rain_forecast_24h: float = Field(default=0.0, ge=0)
	is_rainy: bool = False
	condition_text: str = ""
	location_name: str = ""


class AdvisoryVerdict(BaseModel):
	model_config = ConfigDict(frozen=True)

	severity: SeverityEnum
	headline: str
	subtext: str
	rationale: str
	tip: str | None = None


class AdvisoryRequest(BaseModel):
	level: float
	stage: CropStage | None = None
	weather: WeatherSnapshot | None = None


class PlotSummaryRequest(BaseModel):
	readings: list[Reading] = Field(default_factory=list)
	plan: CropPlan | None = None
	weather: WeatherSnapshot | None = None
	now_ms: int | None = Field(default=None, ge=0)


class PlotSummary(BaseModel):
	sensor_id: str | None = None
	current_level: float | None = None
	last_updated: str | None = None
	last_updated_ms: int | None = None
	freshness: str = "Unknown"
	gauge_fill_pct: float | None = None
	stage: CropStage | None = None
	verdict: AdvisoryVerdict | None = None
