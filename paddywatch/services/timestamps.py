"""Tolerant parsing of sheet timestamps into epoch milliseconds.

Gateway rows arrive with whatever the spreadsheet produced: ISO-8601 strings,
US-locale ``MM/DD/YYYY HH:mm:ss`` strings, or a bare numeric date serial when a
cell lost its formatting. Anything else is handed to ``dateutil``. Everything
funnels through :func:`parse_timestamp`, which never raises and returns ``0``
for anything it cannot read.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, tzinfo

from dateutil import parser as date_parser

UNPARSEABLE = 0

_SERIAL_RE = re.compile(r"^\d+(?:\.\d+)?$")
# YYYYMMDD; as a serial it would land tens of millennia out
_COMPACT_DATE_RE = re.compile(r"^\d{8}$")
_SHEET_EPOCH = datetime(1899, 12, 30)
_LOCALE_FORMATS = (
	"%m/%d/%Y %H:%M:%S",
	"%m/%d/%Y %H:%M",
	"%m/%d/%Y",
)


def _parse_serial(text: str) -> datetime | None:
	serial = float(text)
	if serial <= 0:
		return None
	return _SHEET_EPOCH + timedelta(days=serial)


def _parse_iso(text: str) -> datetime | None:
	try:
		return datetime.fromisoformat(text)
	except ValueError:
		return None


def _parse_locale(text: str) -> datetime | None:
	for fmt in _LOCALE_FORMATS:
		try:
			return datetime.strptime(text, fmt)
		except ValueError:
			continue
	return None


def _parse_fallback(text: str) -> datetime | None:
	try:
		return date_parser.parse(text)
	except (date_parser.ParserError, OverflowError):
		return None


def _to_epoch_ms(value: datetime, tz: tzinfo | None) -> int:
	if value.tzinfo is None and tz is not None:
		value = value.replace(tzinfo=tz)
	# naive values left as-is are read in host local time by timestamp()
	return int(round(value.timestamp() * 1000))


def parse_timestamp(raw: str | None, tz: tzinfo | None = None) -> int:
	"""Return epoch milliseconds for ``raw`` or ``0`` when it cannot be parsed.

	Naive inputs are interpreted in ``tz``; ``None`` means host local time.
	"""
	if raw is None:
		return UNPARSEABLE
	text = str(raw).strip()
	if not text:
		return UNPARSEABLE

	try:
		if _SERIAL_RE.match(text) and not _COMPACT_DATE_RE.match(text):
			parsed = _parse_serial(text)
		else:
			parsed = _parse_iso(text) or _parse_locale(text) or _parse_fallback(text)
		if parsed is None:
			return UNPARSEABLE
		epoch_ms = _to_epoch_ms(parsed, tz)
	except (OverflowError, OSError, ValueError):
		return UNPARSEABLE

	return epoch_ms if epoch_ms > 0 else UNPARSEABLE


def to_datetime(epoch_ms: int, tz: tzinfo | None = None) -> datetime:
	"""Wall-clock datetime for ``epoch_ms`` in ``tz`` (host local time when None)."""
	return datetime.fromtimestamp(epoch_ms / 1000, tz)


def format_friendly_ms(epoch_ms: int, tz: tzinfo | None = None) -> str:
	moment = to_datetime(epoch_ms, tz)
	return f"{moment:%b} {moment.day}, {moment:%H:%M}"


def format_friendly_date(raw: str | None, tz: tzinfo | None = None) -> str:
	"""Short display form such as ``May 1, 08:30``; ``N/A`` when unparseable."""
	epoch_ms = parse_timestamp(raw, tz)
	if epoch_ms == UNPARSEABLE:
		return "N/A"
	return format_friendly_ms(epoch_ms, tz)


def _plural(count: int, unit: str) -> str:
	return f"{count} {unit}{'' if count == 1 else 's'} ago"


def describe_age(raw: str | None, now_ms: int, tz: tzinfo | None = None) -> str:
	"""Freshness label for the card header ("Just now", "5 mins ago", ...)."""
	epoch_ms = parse_timestamp(raw, tz)
	if epoch_ms == UNPARSEABLE:
		return "Unknown"

	seconds = (now_ms - epoch_ms) // 1000
	if seconds < 60:
		return "Just now"
	minutes = seconds // 60
	if minutes < 60:
		return _plural(minutes, "min")
	hours = minutes // 60
	if hours < 24:
		return _plural(hours, "hour")
	return to_datetime(epoch_ms, tz).date().isoformat()
