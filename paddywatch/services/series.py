"""Chart window selection over raw gauge readings."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, time, tzinfo

from paddywatch.models.enums import RangeKindEnum
from paddywatch.schemas.series import NormalizedReading, RangeSpec, Reading, WindowedPoint
from paddywatch.services.timestamps import UNPARSEABLE, format_friendly_ms, parse_timestamp, to_datetime

DAY_MS = 86_400_000

_PRESET_DAYS: dict[RangeKindEnum, int] = {
	RangeKindEnum.last_24h: 1,
	RangeKindEnum.last_7d: 7,
	RangeKindEnum.last_30d: 30,
}

_END_OF_DAY = time(23, 59, 59, 999_000)

_logger = logging.getLogger("paddywatch.series")


def _calendar_ms(day: date, at: time, tz: tzinfo | None, default: int) -> int:
	moment = datetime.combine(day, at)
	if tz is not None:
		moment = moment.replace(tzinfo=tz)
	try:
		return int(round(moment.timestamp() * 1000))
	except (OverflowError, OSError, ValueError):
		_logger.debug("calendar_bound_out_of_range", extra={"day": day.isoformat(), "default_ms": default})
		return default


def window_bounds(range_spec: RangeSpec, now_ms: int, tz: tzinfo | None = None) -> tuple[int, int]:
	"""Inclusive ``(start_ms, end_ms)`` for a range preset or custom calendar span.

	Calendar dates the clock cannot represent fall back to the open-ended
	bounds: 0 for the start, ``now_ms`` for the end.
	"""
	days = _PRESET_DAYS.get(range_spec.kind)
	if days is not None:
		return now_ms - days * DAY_MS, now_ms
	if range_spec.kind == RangeKindEnum.all_time:
		return 0, now_ms

	start_ms = 0
	end_ms = now_ms
	if range_spec.start_date is not None:
		start_ms = _calendar_ms(range_spec.start_date, time.min, tz, 0)
	if range_spec.end_date is not None:
		end_ms = _calendar_ms(range_spec.end_date, _END_OF_DAY, tz, now_ms)
	return start_ms, end_ms


def axis_label(epoch_ms: int, kind: RangeKindEnum, tz: tzinfo | None = None) -> str:
	moment = to_datetime(epoch_ms, tz)
	if kind == RangeKindEnum.last_24h:
		return f"{moment:%H:%M}"
	if kind in (RangeKindEnum.last_7d, RangeKindEnum.last_30d):
		return f"{moment.day}/{moment.month} {moment.hour}h"
	return f"{moment:%b} {moment.day}"


def normalize_readings(readings: Iterable[Reading], tz: tzinfo | None = None) -> list[NormalizedReading]:
	"""Parse every reading's timestamp; unparseable ones keep the ``0`` sentinel."""
	return [
		NormalizedReading(epoch_ms=parse_timestamp(item.raw_timestamp, tz), level=item.level)
		for item in readings
	]


def select_window(
	readings: Iterable[Reading],
	range_spec: RangeSpec,
	now_ms: int,
	tz: tzinfo | None = None,
) -> list[WindowedPoint]:
	"""Readings inside the window, oldest first, each with its axis label.

	Unparseable timestamps are dropped, never raised. An inverted custom span
	(end before start) selects nothing.
	"""
	start_ms, end_ms = window_bounds(range_spec, now_ms, tz)
	if start_ms > end_ms:
		_logger.debug(
			"inverted_window",
			extra={"start_ms": start_ms, "end_ms": end_ms, "range": range_spec.kind.value},
		)
		return []

	normalized = normalize_readings(readings, tz)
	kept = [
		item
		for item in normalized
		if item.epoch_ms != UNPARSEABLE and start_ms <= item.epoch_ms <= end_ms
	]
	kept.sort(key=lambda item: item.epoch_ms)

	unparsed = sum(1 for item in normalized if item.epoch_ms == UNPARSEABLE)
	if unparsed:
		_logger.debug("unparseable_readings_dropped", extra={"count": unparsed})

	return [
		WindowedPoint(
			epoch_ms=item.epoch_ms,
			level=item.level,
			axis_label=axis_label(item.epoch_ms, range_spec.kind, tz),
			friendly_date=format_friendly_ms(item.epoch_ms, tz),
		)
		for item in kept
	]
