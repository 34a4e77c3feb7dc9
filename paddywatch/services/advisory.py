"""Irrigation advisory engine: fuses gauge level, growth stage and weather into one verdict.

Sensor depth mapping (absolute gauge readings):
  0cm  = bottom of the AWD pipe (dry)
  15cm = soil surface
  30cm = top of the gauge

Rules are evaluated top to bottom from :data:`ADVISORY_RULES`; the first guard
that holds produces the verdict. The final rule always holds, so
:func:`evaluate` returns a verdict for every input, including out-of-range
levels and stage indices the table does not know.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from paddywatch.config import AdvisoryThresholds
from paddywatch.models.enums import SeverityEnum, StageCategoryEnum
from paddywatch.schemas.advisory import AdvisoryVerdict, WeatherSnapshot
from paddywatch.schemas.crop import CropStage, StageTable
from paddywatch.services.crop_stage import DEFAULT_STAGE_TABLE

DEFAULT_STAGE_INDEX = 1
DEFAULT_STAGE_NAME = "Vegetative"


class InvalidReadingError(ValueError):
	"""Raised by the optional boundary check for physically impossible levels."""


@dataclass(frozen=True, slots=True)
class AdvisoryContext:
	level: float
	stage_index: int
	stage_name: str
	category: StageCategoryEnum | None
	temp: float
	rain_chance: float
	rain_forecast_mm: float
	rain_expected: bool
	high_heat: bool
	thresholds: AdvisoryThresholds

	@property
	def drain_stage(self) -> bool:
		return self.category == StageCategoryEnum.needs_drain

	@property
	def flood_stage(self) -> bool:
		return self.category == StageCategoryEnum.needs_flood

	@property
	def drying_stage(self) -> bool:
		return self.category == StageCategoryEnum.allows_drying

	@property
	def above_soil(self) -> bool:
		return self.level > self.thresholds.soil_surface_cm

	@property
	def below_soil(self) -> bool:
		return self.level < self.thresholds.soil_surface_cm

	@property
	def above_high(self) -> bool:
		return self.level > self.thresholds.high_cm

	@property
	def below_low(self) -> bool:
		return self.level < self.thresholds.low_cm


@dataclass(frozen=True, slots=True)
class AdvisoryRule:
	name: str
	applies: Callable[[AdvisoryContext], bool]
	build: Callable[[AdvisoryContext], AdvisoryVerdict]


def _cm(value: float) -> str:
	return f"{value:g}"


def build_context(
	level: float,
	stage: CropStage | None = None,
	weather: WeatherSnapshot | None = None,
	thresholds: AdvisoryThresholds | None = None,
	table: StageTable | None = None,
) -> AdvisoryContext:
	"""Apply the default-substitution rules for missing stage and weather."""
	thresholds = thresholds or AdvisoryThresholds()
	table = table or DEFAULT_STAGE_TABLE

	stage_index = stage.stage_index if stage is not None else DEFAULT_STAGE_INDEX
	stage_name = stage.stage_name if stage is not None else DEFAULT_STAGE_NAME

	temp = weather.temp if weather is not None else 0.0
	rain_chance = weather.rain_chance if weather is not None else 0.0
	rain_forecast_mm = weather.rain_forecast_24h if weather is not None else 0.0

	return AdvisoryContext(
		level=level,
		stage_index=stage_index,
		stage_name=stage_name,
		category=table.category_of(stage_index),
		temp=temp,
		rain_chance=rain_chance,
		rain_forecast_mm=rain_forecast_mm,
		rain_expected=rain_chance > thresholds.rain_chance_pct or rain_forecast_mm > thresholds.rain_forecast_mm,
		high_heat=temp > thresholds.heat_temp_c,
		thresholds=thresholds,
	)


# ── Verdict builders ────────────────────────────────────────────────────────


def _drain_field(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.warn,
		headline="Drain Field",
		subtext="Prepare harvest.",
		rationale=(
			f"Gauge reads {_cm(ctx.level)}cm, above the soil surface ({_cm(soil)}cm). "
			f"Field should be dry for {ctx.stage_name}."
		),
		tip="Open all drainage outlets.",
	)


def _harvest_ready(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.good,
		headline="Ready",
		subtext="Field dry.",
		rationale=(
			f"Gauge reads {_cm(ctx.level)}cm, at or below the soil surface ({_cm(soil)}cm). "
			"Conditions optimal for harvest."
		),
	)


def _drain_excess(ctx: AdvisoryContext) -> AdvisoryVerdict:
	high = ctx.thresholds.high_cm
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.warn,
		headline="Drain Excess",
		subtext="Rain Expected.",
		rationale=(
			f"Gauge is at {_cm(ctx.level)}cm, above {_cm(high)}cm. Rain will increase this further. "
			f"Drain to ~{_cm(soil)}cm to prevent overflow."
		),
		tip=f"Lower spillways to {_cm(soil)}cm level.",
	)


def _stop_irrigating(ctx: AdvisoryContext) -> AdvisoryVerdict:
	high = ctx.thresholds.high_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.info,
		headline="Stop Irrigating",
		subtext=f"Level {_cm(ctx.level)}cm (High)",
		rationale=f"Water is deep (gauge {_cm(ctx.level)}cm > {_cm(high)}cm). Further irrigation is wasteful.",
		tip="Allow water to subside naturally.",
	)


def _wait_for_rain_low(ctx: AdvisoryContext) -> AdvisoryVerdict:
	low = ctx.thresholds.low_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.warn,
		headline="Wait for Rain",
		subtext=f"Rain chance {_cm(ctx.rain_chance)}%.",
		rationale=(
			f"Current gauge: {_cm(ctx.level)}cm, below {_cm(low)}cm. "
			f"With {_cm(ctx.rain_forecast_mm)}mm rain forecast, delay irrigation to save water."
		),
		tip="Monitor level closely. If rain misses, irrigate.",
	)


def _irrigate_now(ctx: AdvisoryContext) -> AdvisoryVerdict:
	low = ctx.thresholds.low_cm
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.critical,
		headline="Irrigate Now",
		subtext=f"Level {_cm(ctx.level)}cm (Low)",
		rationale=(
			f"Gauge reads {_cm(ctx.level)}cm, which is critically low (<{_cm(low)}cm) "
			f"for {ctx.stage_name}. Risk of soil cracking."
		),
		tip=f"Fill to gauge {_cm(soil)}cm+ (soil surface) immediately.",
	)


def _wait_for_rain_flood(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.warn,
		headline="Wait for Rain",
		subtext=f"Rain chance {_cm(ctx.rain_chance)}%.",
		rationale=f"Gauge ({_cm(ctx.level)}cm) is below the soil surface ({_cm(soil)}cm), but rain is likely.",
	)


def _increase_level(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.warn,
		headline="Increase Level",
		subtext=f"Target Gauge {_cm(soil)}cm+.",
		rationale=(
			f"Gauge reads {_cm(ctx.level)}cm. Stage {ctx.stage_name} requires standing water "
			f"(gauge >{_cm(soil)}cm)."
		),
		tip=f"Top up to {_cm(soil + 2)}-{_cm(soil + 3)}cm.",
	)


def _optimal_flood(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	tip = None
	if ctx.high_heat:
		tip = f"Air temperature {_cm(ctx.temp)}°C: flood water helps cool the canopy."
	return AdvisoryVerdict(
		severity=SeverityEnum.good,
		headline="Optimal Flood",
		subtext="Maintained.",
		rationale=(
			f"Gauge level ({_cm(ctx.level)}cm) is at or above the soil surface ({_cm(soil)}cm) "
			f"and ideal for {ctx.stage_name}."
		),
		tip=tip,
	)


def _awd_active(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	low = ctx.thresholds.low_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.info,
		headline="AWD Active",
		subtext="Soil drying.",
		rationale=(
			f"Water is below the soil surface (gauge {_cm(ctx.level)}cm < {_cm(soil)}cm) "
			f"but above {_cm(low)}cm, which is safe. Promotes root depth."
		),
		tip="Monitor for soil cracks.",
	)


def _levels_good(ctx: AdvisoryContext) -> AdvisoryVerdict:
	soil = ctx.thresholds.soil_surface_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.good,
		headline="Levels Good",
		subtext="Saturated.",
		rationale=f"Water availability is adequate (gauge {_cm(ctx.level)}cm >= {_cm(soil)}cm).",
	)


def _levels_optimal(ctx: AdvisoryContext) -> AdvisoryVerdict:
	low = ctx.thresholds.low_cm
	high = ctx.thresholds.high_cm
	return AdvisoryVerdict(
		severity=SeverityEnum.good,
		headline="Levels Optimal",
		subtext="Monitoring...",
		rationale=(
			f"Gauge reads {_cm(ctx.level)}cm, within {_cm(low)}-{_cm(high)}cm. "
			f"No water rule is configured for stage {ctx.stage_index}."
		),
	)


ADVISORY_RULES: tuple[AdvisoryRule, ...] = (
	AdvisoryRule("drain_field", lambda ctx: ctx.drain_stage and ctx.above_soil, _drain_field),
	AdvisoryRule("harvest_ready", lambda ctx: ctx.drain_stage, _harvest_ready),
	AdvisoryRule("drain_excess", lambda ctx: ctx.above_high and ctx.rain_expected, _drain_excess),
	AdvisoryRule("stop_irrigating", lambda ctx: ctx.above_high, _stop_irrigating),
	AdvisoryRule("wait_for_rain_low", lambda ctx: ctx.below_low and ctx.rain_expected, _wait_for_rain_low),
	AdvisoryRule("irrigate_now", lambda ctx: ctx.below_low, _irrigate_now),
	AdvisoryRule(
		"wait_for_rain_flood",
		lambda ctx: ctx.flood_stage and ctx.below_soil and ctx.rain_expected,
		_wait_for_rain_flood,
	),
	AdvisoryRule("increase_level", lambda ctx: ctx.flood_stage and ctx.below_soil, _increase_level),
	AdvisoryRule("optimal_flood", lambda ctx: ctx.flood_stage, _optimal_flood),
	AdvisoryRule("awd_active", lambda ctx: ctx.drying_stage and ctx.below_soil, _awd_active),
	AdvisoryRule("levels_good", lambda ctx: ctx.drying_stage, _levels_good),
	AdvisoryRule("levels_optimal", lambda ctx: True, _levels_optimal),
)


def match_rule(ctx: AdvisoryContext) -> AdvisoryRule:
	for rule in ADVISORY_RULES:
		if rule.applies(ctx):
			return rule
	# unreachable while the last rule is unconditional
	raise LookupError("no advisory rule matched")


def evaluate(
	level: float,
	stage: CropStage | None = None,
	weather: WeatherSnapshot | None = None,
	thresholds: AdvisoryThresholds | None = None,
	table: StageTable | None = None,
) -> AdvisoryVerdict:
	ctx = build_context(level, stage, weather, thresholds, table)
	return match_rule(ctx).build(ctx)


def validate_level(level: float, thresholds: AdvisoryThresholds | None = None) -> float:
	"""Boundary check for callers that want strict readings; the engine never calls it."""
	thresholds = thresholds or AdvisoryThresholds()
	if math.isnan(level) or not 0 <= level <= thresholds.gauge_max_cm:
		raise InvalidReadingError(
			f"level {_cm(level)}cm is outside the gauge range 0-{_cm(thresholds.gauge_max_cm)}cm"
		)
	return level
