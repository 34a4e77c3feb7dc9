"""Application settings loaded from environment variables via pydantic-settings."""

from __future__ import annotations

from datetime import tzinfo
from enum import StrEnum
from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
	json = "json"
	console = "console"


class AdvisoryThresholds(BaseModel):
	"""Absolute gauge thresholds (cm) and weather cut-offs used by the advisory engine."""

	model_config = ConfigDict(frozen=True)

	low_cm: float = 5.0
	soil_surface_cm: float = 15.0
	high_cm: float = 20.0
	heat_temp_c: float = 35.0
	rain_chance_pct: float = 50.0
	rain_forecast_mm: float = 5.0
	gauge_max_cm: float = Field(default=30.0, gt=0)

	@model_validator(mode="after")
	def _validate_bands(self) -> "AdvisoryThresholds":
		if not self.low_cm < self.soil_surface_cm < self.high_cm:
			raise ValueError(
				f"gauge bands must satisfy low < soil surface < high, got "
				f"{self.low_cm} / {self.soil_surface_cm} / {self.high_cm}"
			)
		if self.high_cm > self.gauge_max_cm:
			raise ValueError(f"high band {self.high_cm} exceeds gauge height {self.gauge_max_cm}")
		return self


class Settings(BaseSettings):
	"""Central configuration: all values sourced from env vars or .env file."""

	model_config = SettingsConfigDict(
		env_file=".env",
		env_file_encoding="utf-8",
		env_prefix="PADDYWATCH_",
		case_sensitive=False,
	)

	# ── Observability ───────────────────────────────────────────────────────
	log_level: str = "info"
	log_format: LogFormat = LogFormat.json

	# ── Time ────────────────────────────────────────────────────────────────
	# IANA zone for naive sheet timestamps and chart labels; empty = host local time.
	timezone: str = ""

	# ── Advisory thresholds ─────────────────────────────────────────────────
	advisory_low_cm: float = 5.0
	advisory_soil_surface_cm: float = 15.0
	advisory_high_cm: float = 20.0
	advisory_heat_temp_c: float = 35.0
	advisory_rain_chance_pct: float = 50.0
	advisory_rain_forecast_mm: float = 5.0
	gauge_max_cm: float = 30.0

	# ── Boundary validation ─────────────────────────────────────────────────
	strict_level_validation: bool = False

	@model_validator(mode="after")
	def _validate_thresholds(self) -> "Settings":
		try:
			self.thresholds()
		except ValidationError as exc:
			raise ValueError(f"invalid advisory thresholds: {exc.errors()[0]['msg']}") from exc
		return self

	def thresholds(self) -> AdvisoryThresholds:
		return AdvisoryThresholds(
			low_cm=self.advisory_low_cm,
			soil_surface_cm=self.advisory_soil_surface_cm,
			high_cm=self.advisory_high_cm,
			heat_temp_c=self.advisory_heat_temp_c,
			rain_chance_pct=self.advisory_rain_chance_pct,
			rain_forecast_mm=self.advisory_rain_forecast_mm,
			gauge_max_cm=self.gauge_max_cm,
		)

	def tz(self) -> tzinfo | None:
		"""Resolved zone for naive timestamps, or None for host local time."""
		if not self.timezone:
			return None
		return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
	"""Singleton settings instance (cached after first call)."""
	return Settings()
