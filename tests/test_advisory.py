from __future__ import annotations

import math

import pytest
from httpx import AsyncClient

from paddywatch.config import AdvisoryThresholds, Settings
from paddywatch.models.enums import SeverityEnum
from paddywatch.schemas.advisory import AdvisoryVerdict, WeatherSnapshot
from paddywatch.schemas.crop import CropStage
from paddywatch.services.advisory import (
	ADVISORY_RULES,
	DEFAULT_STAGE_INDEX,
	InvalidReadingError,
	build_context,
	evaluate,
	match_rule,
	validate_level,
)
from paddywatch.services.crop_stage import DEFAULT_STAGE_TABLE

RAINY = WeatherSnapshot(temp=30, rain_chance=80, rain_forecast_24h=0, is_rainy=True, condition_text="Showers")
DRY = WeatherSnapshot(temp=30, rain_chance=10, rain_forecast_24h=0)
HOT = WeatherSnapshot(temp=38, rain_chance=0, rain_forecast_24h=0, condition_text="Sunny")


def _stage(index: int) -> CropStage:
	return CropStage(stage_index=index, stage_name=DEFAULT_STAGE_TABLE.stages[index].name, days_elapsed=0)


@pytest.mark.parametrize(
	("level", "stage_index", "weather", "severity", "headline"),
	[
		(3, 1, None, SeverityEnum.critical, "Irrigate Now"),
		(3, 1, RAINY, SeverityEnum.warn, "Wait for Rain"),
		(22, 3, None, SeverityEnum.info, "Stop Irrigating"),
		(17, 3, None, SeverityEnum.good, "Optimal Flood"),
		(10, 1, None, SeverityEnum.info, "AWD Active"),
		(17, 7, None, SeverityEnum.warn, "Drain Field"),
	],
)
def test_reference_scenarios(
	level: float,
	stage_index: int,
	weather: WeatherSnapshot | None,
	severity: SeverityEnum,
	headline: str,
) -> None:
	verdict = evaluate(level, _stage(stage_index), weather)
	assert verdict.severity == severity
	assert verdict.headline == headline


def test_engine_is_total() -> None:
	for level in range(-100, 101):
		for stage_index in range(8):
			for weather in (None, RAINY, HOT):
				verdict = evaluate(float(level), _stage(stage_index), weather)
				assert isinstance(verdict, AdvisoryVerdict)
				assert verdict.headline
				assert verdict.severity in set(SeverityEnum)


def test_engine_handles_non_finite_levels() -> None:
	for level in (math.nan, math.inf, -math.inf):
		assert isinstance(evaluate(level, None, None), AdvisoryVerdict)


@pytest.mark.parametrize("stage_index", sorted(DEFAULT_STAGE_TABLE.needs_drain))
@pytest.mark.parametrize("weather", [None, RAINY])
def test_drain_stages_override_other_bands(stage_index: int, weather: WeatherSnapshot | None) -> None:
	assert evaluate(25, _stage(stage_index), weather).headline == "Drain Field"
	assert evaluate(15.5, _stage(stage_index), weather).headline == "Drain Field"
	assert evaluate(15, _stage(stage_index), weather).headline == "Ready"
	assert evaluate(1, _stage(stage_index), weather).headline == "Ready"
	assert evaluate(1, _stage(stage_index), weather).severity == SeverityEnum.good


def test_high_water_with_rain_drains_excess() -> None:
	verdict = evaluate(24, _stage(4), RAINY)
	assert verdict.severity == SeverityEnum.warn
	assert verdict.headline == "Drain Excess"
	assert "24cm" in verdict.rationale


def test_rain_expected_from_forecast_volume_alone() -> None:
	weather = WeatherSnapshot(temp=28, rain_chance=0, rain_forecast_24h=6)
	assert evaluate(3, _stage(1), weather).headline == "Wait for Rain"


def test_rain_thresholds_are_strict() -> None:
	weather = WeatherSnapshot(temp=28, rain_chance=50, rain_forecast_24h=5)
	assert evaluate(3, _stage(1), weather).headline == "Irrigate Now"


def test_flood_stage_below_soil_surface() -> None:
	waiting = evaluate(10, _stage(0), RAINY)
	assert waiting.severity == SeverityEnum.warn
	assert waiting.headline == "Wait for Rain"
	assert waiting.tip is None

	top_up = evaluate(10, _stage(0), DRY)
	assert top_up.severity == SeverityEnum.warn
	assert top_up.headline == "Increase Level"
	assert top_up.tip is not None and "17-18" in top_up.tip
	assert "10cm" in top_up.rationale and "15cm" in top_up.rationale


def test_optimal_flood_heat_tip() -> None:
	hot = evaluate(18, _stage(4), HOT)
	assert hot.headline == "Optimal Flood"
	assert hot.tip is not None and "38" in hot.tip

	mild = evaluate(18, _stage(4), DRY)
	assert mild.headline == "Optimal Flood"
	assert mild.tip is None


@pytest.mark.parametrize(
	("level", "stage_index", "headline"),
	[
		(5, 1, "AWD Active"),
		(14.9, 2, "AWD Active"),
		(15, 1, "Levels Good"),
		(20, 5, "Levels Good"),
		(15, 3, "Optimal Flood"),
		(20, 3, "Optimal Flood"),
		(20.1, 3, "Stop Irrigating"),
		(4.9, 3, "Irrigate Now"),
	],
)
def test_band_edges(level: float, stage_index: int, headline: str) -> None:
	assert evaluate(level, _stage(stage_index), None).headline == headline


def test_missing_stage_defaults_to_vegetative() -> None:
	ctx = build_context(10, None, None)
	assert ctx.stage_index == DEFAULT_STAGE_INDEX
	assert ctx.stage_name == "Vegetative"
	assert ctx.rain_expected is False
	assert ctx.high_heat is False

	assert evaluate(10).headline == "AWD Active"
	assert "Vegetative" in evaluate(2).rationale


def test_rationale_embeds_level_and_threshold() -> None:
	verdict = evaluate(3, _stage(1), None)
	assert "3cm" in verdict.rationale
	assert "5cm" in verdict.rationale

	verdict = evaluate(22, _stage(1), None)
	assert "22cm" in verdict.rationale
	assert "20cm" in verdict.rationale


def test_custom_thresholds() -> None:
	thresholds = AdvisoryThresholds(low_cm=8, soil_surface_cm=12, high_cm=18)
	assert evaluate(6, _stage(1), None, thresholds).headline == "Irrigate Now"
	assert evaluate(13, _stage(1), None, thresholds).headline == "Levels Good"
	assert evaluate(19, _stage(1), None, thresholds).headline == "Stop Irrigating"


def test_unknown_stage_index_still_gets_a_verdict() -> None:
	foreign = CropStage(stage_index=12, stage_name="Ratoon", days_elapsed=200)
	assert evaluate(10, foreign, None).headline == "Levels Optimal"
	assert evaluate(2, foreign, None).headline == "Irrigate Now"
	assert evaluate(25, foreign, None).headline == "Stop Irrigating"


def test_rule_table_shape() -> None:
	names = [rule.name for rule in ADVISORY_RULES]
	assert len(names) == len(set(names))
	assert ADVISORY_RULES[0].name == "drain_field"
	assert ADVISORY_RULES[-1].applies(build_context(0))
	assert match_rule(build_context(3, _stage(1), None)).name == "irrigate_now"


def test_verdict_is_immutable() -> None:
	verdict = evaluate(10)
	with pytest.raises(ValueError):
		verdict.headline = "changed"  # type: ignore[misc]


@pytest.mark.parametrize("level", [-0.1, 30.5, math.nan])
def test_validate_level_rejects_out_of_range(level: float) -> None:
	with pytest.raises(InvalidReadingError):
		validate_level(level)


def test_validate_level_accepts_gauge_range() -> None:
	assert validate_level(0) == 0
	assert validate_level(30) == 30


@pytest.mark.asyncio
async def test_evaluate_endpoint(client: AsyncClient) -> None:
	response = await client.post(
		"/api/v1/advisory/evaluate",
		json={
			"level": 3,
			"stage": {"stage_index": 1, "stage_name": "Tillering", "days_elapsed": 20},
			"weather": {"temp": 30, "rain_chance": 80, "rain_forecast_24h": 0},
		},
	)
	assert response.status_code == 200
	body = response.json()
	assert body["severity"] == "warn"
	assert body["headline"] == "Wait for Rain"


@pytest.mark.asyncio
async def test_evaluate_endpoint_permissive_by_default(client: AsyncClient) -> None:
	response = await client.post("/api/v1/advisory/evaluate", json={"level": 45})
	assert response.status_code == 200
	assert response.json()["headline"] == "Stop Irrigating"


@pytest.mark.asyncio
async def test_evaluate_endpoint_strict_validation(client: AsyncClient, settings: Settings) -> None:
	settings.strict_level_validation = True

	response = await client.post("/api/v1/advisory/evaluate", json={"level": 45})
	assert response.status_code == 400
	assert "outside the gauge range" in response.json()["detail"]

	response = await client.post("/api/v1/advisory/evaluate", json={"level": 12})
	assert response.status_code == 200


@pytest.mark.asyncio
async def test_evaluate_endpoint_rejects_bad_weather(client: AsyncClient) -> None:
	response = await client.post(
		"/api/v1/advisory/evaluate",
		json={"level": 10, "weather": {"rain_chance": 140}},
	)
	assert response.status_code == 422
