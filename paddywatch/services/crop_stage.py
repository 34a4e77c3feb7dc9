"""Growth-stage resolution from a planting date and a stage-duration table."""

from __future__ import annotations

from datetime import date, datetime

from paddywatch.models.enums import StageCategoryEnum
from paddywatch.schemas.crop import CropPlan, CropStage, StageDefinition, StageRow, StageTable, StageTableResponse

# Lowland rice, 120-day cycle.
DEFAULT_STAGE_TABLE = StageTable(
	stages=(
		StageDefinition(name="Establishment", duration_days=15),
		StageDefinition(name="Tillering", duration_days=25),
		StageDefinition(name="Stem Elongation", duration_days=20),
		StageDefinition(name="Booting", duration_days=15),
		StageDefinition(name="Flowering", duration_days=10),
		StageDefinition(name="Grain Filling", duration_days=15),
		StageDefinition(name="Ripening", duration_days=12),
		StageDefinition(name="Harvest", duration_days=8),
	),
	needs_flood=frozenset({0, 3, 4}),
	allows_drying=frozenset({1, 2, 5}),
	needs_drain=frozenset({6, 7}),
)


def _as_date(value: date | datetime) -> date:
	if isinstance(value, datetime):
		return value.date()
	return value


def days_since(planting_date: date | datetime, now: date | datetime) -> int:
	"""Whole days from planting to ``now``, never negative."""
	return max(0, (_as_date(now) - _as_date(planting_date)).days)


def resolve_stage(
	planting_date: date | datetime,
	now: date | datetime,
	table: StageTable = DEFAULT_STAGE_TABLE,
) -> CropStage:
	days_elapsed = days_since(planting_date, now)

	stage_end = 0
	for index, stage in enumerate(table.stages):
		stage_end += stage.duration_days
		if days_elapsed < stage_end:
			return CropStage(stage_index=index, stage_name=stage.name, days_elapsed=days_elapsed)

	last = table.stages[table.last_index]
	return CropStage(stage_index=table.last_index, stage_name=last.name, days_elapsed=days_elapsed)


def resolve_plan_stage(
	plan: CropPlan | None,
	now: date | datetime,
	table: StageTable = DEFAULT_STAGE_TABLE,
) -> CropStage | None:
	"""Stage for a plot's plan, or None when no planting date is recorded."""
	if plan is None or plan.planting_date is None:
		return None
	return resolve_stage(plan.planting_date, now, table)


def stage_category(stage_index: int, table: StageTable = DEFAULT_STAGE_TABLE) -> StageCategoryEnum | None:
	return table.category_of(stage_index)


def describe_table(table: StageTable = DEFAULT_STAGE_TABLE) -> StageTableResponse:
	rows: list[StageRow] = []
	start_day = 0
	for index, stage in enumerate(table.stages):
		category = table.category_of(index)
		assert category is not None
		rows.append(
			StageRow(
				index=index,
				name=stage.name,
				duration_days=stage.duration_days,
				start_day=start_day,
				category=category,
			)
		)
		start_day += stage.duration_days
	return StageTableResponse(total_days=table.total_days, stages=rows)
