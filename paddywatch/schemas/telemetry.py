"""Pydantic schemas for spreadsheet telemetry rows and the snapshots built from them."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from paddywatch.models.enums import NetworkEnum
from paddywatch.schemas.series import Reading


class TelemetryRow(BaseModel):
	"""One sheet row, keyed by the spreadsheet's column headers."""

	model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

	device_id: str = Field(default="", alias="Device ID")
	transmitter_data: str = Field(default="", alias="Transmitter Data")
	gateway_received_time: str = Field(default="", alias="Gateway Received Time")
	batch_upload_time: str = Field(default="", alias="Batch Upload Time")
	network: str = Field(default="", alias="Network")
	sim_operator: str = Field(default="", alias="SIM Operator")
	wifi_strength_dbm: float | None = Field(default=None, alias="WiFi Strength (dBm)")
	gsm_strength_rssi: float | None = Field(default=None, alias="GSM Strength (RSSI)")
	sd_free_mb: float | None = Field(default=None, alias="SD Free (MB)")

	@field_validator("device_id", "transmitter_data", "gateway_received_time", "batch_upload_time", "network", "sim_operator", mode="before")
	@classmethod
	def _blank_text(cls, value: Any) -> Any:
		return "" if value is None else value

	@field_validator("wifi_strength_dbm", "gsm_strength_rssi", "sd_free_mb", mode="before")
	@classmethod
	def _optional_number(cls, value: Any) -> float | None:
		if value is None or isinstance(value, bool):
			return None
		if isinstance(value, (int, float)):
			return float(value)
		try:
			return float(str(value).strip())
		except ValueError:
			return None


class TelemetryWarning(BaseModel):
	index: int
	message: str


class SensorSnapshot(BaseModel):
	sensor_id: str
	current_level: float | None = None
	last_updated: str | None = None
	last_updated_ms: int | None = None
	readings: list[Reading] = Field(default_factory=list)


class GatewayStatus(BaseModel):
	network: NetworkEnum = NetworkEnum.unknown
	sim_operator: str = ""
	wifi_signal_dbm: float | None = None
	gsm_signal_rssi: float | None = None
	sd_free_mb: float | None = None
	last_batch_upload: str | None = None
	last_received: str | None = None


class TelemetryShapeRequest(BaseModel):
	rows: list[TelemetryRow] = Field(default_factory=list)


class TelemetrySnapshot(BaseModel):
	status: str
	row_count: int = 0
	skipped_count: int = 0
	sensors: list[SensorSnapshot] = Field(default_factory=list)
	gateway: GatewayStatus | None = None
	warnings: list[TelemetryWarning] = Field(default_factory=list)
