"""Shapes raw spreadsheet rows into per-sensor reading histories and gateway health."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import tzinfo

from paddywatch.models.enums import NetworkEnum
from paddywatch.schemas.series import Reading
from paddywatch.schemas.telemetry import (
	GatewayStatus,
	SensorSnapshot,
	TelemetryRow,
	TelemetrySnapshot,
	TelemetryWarning,
)
from paddywatch.services.plot_service import latest_reading
from paddywatch.services.timestamps import parse_timestamp

_LEVEL_RE = re.compile(r"-?\d+(?:\.\d+)?")

NETWORK_ALIASES = {
	"wifi": NetworkEnum.wifi,
	"wi-fi": NetworkEnum.wifi,
	"gsm": NetworkEnum.gsm,
	"cellular": NetworkEnum.gsm,
	"2g": NetworkEnum.gsm,
	"3g": NetworkEnum.gsm,
	"4g": NetworkEnum.gsm,
	"lte": NetworkEnum.gsm,
}

_logger = logging.getLogger("paddywatch.telemetry")


class TelemetryService:
	def __init__(self, tz: tzinfo | None = None):
		self.tz = tz

	@staticmethod
	def normalize_network(token: str) -> NetworkEnum:
		return NETWORK_ALIASES.get(token.strip().lower(), NetworkEnum.unknown)

	@staticmethod
	def extract_level(transmitter_data: str) -> float | None:
		"""First decimal number in the transmitter payload, e.g. ``"L:12.5cm"`` -> 12.5."""
		match = _LEVEL_RE.search(transmitter_data)
		if match is None:
			return None
		return float(match.group(0))

	@staticmethod
	def row_timestamp(row: TelemetryRow) -> str:
		return row.gateway_received_time.strip() or row.batch_upload_time.strip()

	def shape(self, rows: Sequence[TelemetryRow]) -> TelemetrySnapshot:
		histories: dict[str, list[Reading]] = {}
		warnings: list[TelemetryWarning] = []

		for idx, row in enumerate(rows):
			device_id = row.device_id.strip()
			if not device_id:
				warnings.append(TelemetryWarning(index=idx, message="missing Device ID"))
				continue
			level = self.extract_level(row.transmitter_data)
			if level is None:
				warnings.append(TelemetryWarning(index=idx, message=f"no numeric level in Transmitter Data for {device_id}"))
				continue
			histories.setdefault(device_id, []).append(
				Reading(raw_timestamp=self.row_timestamp(row), level=level)
			)

		sensors = [self._sensor_snapshot(sensor_id, history) for sensor_id, history in sorted(histories.items())]
		gateway = self._gateway_status(rows)

		if warnings:
			_logger.warning(
				"telemetry_rows_skipped",
				extra={"skipped_count": len(warnings), "row_count": len(rows)},
			)

		return TelemetrySnapshot(
			status="ok" if not warnings else "partial",
			row_count=len(rows),
			skipped_count=len(warnings),
			sensors=sensors,
			gateway=gateway,
			warnings=warnings,
		)

	def _sensor_snapshot(self, sensor_id: str, history: list[Reading]) -> SensorSnapshot:
		latest = latest_reading(history, self.tz)
		if latest is None:
			return SensorSnapshot(sensor_id=sensor_id, readings=history)
		reading, epoch_ms = latest
		return SensorSnapshot(
			sensor_id=sensor_id,
			current_level=reading.level,
			last_updated=reading.raw_timestamp,
			last_updated_ms=epoch_ms,
			readings=history,
		)

	def _gateway_status(self, rows: Sequence[TelemetryRow]) -> GatewayStatus | None:
		if not rows:
			return None

		newest = rows[-1]
		newest_ms = 0
		for row in rows:
			epoch_ms = parse_timestamp(self.row_timestamp(row), self.tz)
			if epoch_ms and epoch_ms >= newest_ms:
				newest, newest_ms = row, epoch_ms

		return GatewayStatus(
			network=self.normalize_network(newest.network),
			sim_operator=newest.sim_operator.strip(),
			wifi_signal_dbm=newest.wifi_strength_dbm,
			gsm_signal_rssi=newest.gsm_strength_rssi,
			sd_free_mb=newest.sd_free_mb,
			last_batch_upload=newest.batch_upload_time.strip() or None,
			last_received=newest.gateway_received_time.strip() or None,
		)
