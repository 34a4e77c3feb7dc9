"""Enum types shared by schemas, services and routes.

These are separate from the StrEnum in paddywatch/config.py:
config enums validate settings, domain enums type payload fields.
"""

from enum import StrEnum

# ── Advisory enums ──────────────────────────────────────────────────────────


class SeverityEnum(StrEnum):
    """Advisory verdict severity (drives card colour in the dashboard)."""

    good = "good"
    warn = "warn"
    critical = "critical"
    info = "info"


class StageCategoryEnum(StrEnum):
    """Water-management rule family a growth stage belongs to."""

    needs_flood = "needs_flood"
    allows_drying = "allows_drying"
    needs_drain = "needs_drain"


# ── Time-series enums ───────────────────────────────────────────────────────


class RangeKindEnum(StrEnum):
    """Chart window presets."""

    last_24h = "24h"
    last_7d = "7d"
    last_30d = "30d"
    all_time = "all"
    custom = "custom"


# ── Telemetry enums ─────────────────────────────────────────────────────────


class NetworkEnum(StrEnum):
    """Uplink the gateway used for its last batch."""

    wifi = "WiFi"
    gsm = "GSM"
    unknown = "unknown"
