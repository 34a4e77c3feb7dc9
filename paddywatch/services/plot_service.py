"""Per-plot summary: joins latest reading, crop stage and weather into one card payload."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import tzinfo

from paddywatch.config import AdvisoryThresholds
from paddywatch.schemas.advisory import PlotSummary, WeatherSnapshot
from paddywatch.schemas.crop import CropPlan, StageTable
from paddywatch.schemas.series import Reading
from paddywatch.services import advisory
from paddywatch.services.crop_stage import DEFAULT_STAGE_TABLE, resolve_plan_stage
from paddywatch.services.timestamps import UNPARSEABLE, describe_age, parse_timestamp, to_datetime

_logger = logging.getLogger("paddywatch.plot_service")


def gauge_fill_percent(level: float, gauge_max_cm: float) -> float:
	"""Share of the gauge column under water, clamped to 0-100."""
	return min(max(level / gauge_max_cm * 100.0, 0.0), 100.0)


def latest_reading(readings: Sequence[Reading], tz: tzinfo | None = None) -> tuple[Reading, int] | None:
	"""Newest reading by parsed timestamp; readings without a usable time are ignored."""
	best: tuple[Reading, int] | None = None
	for item in readings:
		epoch_ms = parse_timestamp(item.raw_timestamp, tz)
		if epoch_ms == UNPARSEABLE:
			continue
		if best is None or epoch_ms >= best[1]:
			best = (item, epoch_ms)
	return best


class PlotService:
	"""Builds the dashboard card for one gauge."""

	def __init__(
		self,
		thresholds: AdvisoryThresholds | None = None,
		table: StageTable | None = None,
		tz: tzinfo | None = None,
	):
		self.thresholds = thresholds or AdvisoryThresholds()
		self.table = table or DEFAULT_STAGE_TABLE
		self.tz = tz

	def summarize(
		self,
		readings: Sequence[Reading],
		plan: CropPlan | None,
		weather: WeatherSnapshot | None,
		now_ms: int,
	) -> PlotSummary:
		sensor_id = plan.sensor_id if plan is not None else None
		stage = resolve_plan_stage(plan, to_datetime(now_ms, self.tz), self.table)

		latest = latest_reading(readings, self.tz)
		if latest is None:
			_logger.info(
				"plot_without_readings",
				extra={"sensor_id": sensor_id, "reading_count": len(readings)},
			)
			return PlotSummary(sensor_id=sensor_id, stage=stage)

		reading, epoch_ms = latest
		verdict = advisory.evaluate(reading.level, stage, weather, self.thresholds, self.table)
		_logger.debug(
			"plot_summarized",
			extra={
				"sensor_id": sensor_id,
				"level": reading.level,
				"stage_index": stage.stage_index if stage is not None else None,
				"severity": verdict.severity.value,
				"headline": verdict.headline,
			},
		)

		return PlotSummary(
			sensor_id=sensor_id,
			current_level=reading.level,
			last_updated=reading.raw_timestamp,
			last_updated_ms=epoch_ms,
			freshness=describe_age(reading.raw_timestamp, now_ms, self.tz),
			gauge_fill_pct=round(gauge_fill_percent(reading.level, self.thresholds.gauge_max_cm), 1),
			stage=stage,
			verdict=verdict,
		)
