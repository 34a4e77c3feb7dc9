"""Pydantic schemas for crop plans, growth-stage tables and resolved stages."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

from paddywatch.models.enums import StageCategoryEnum


class StageDefinition(BaseModel):
	model_config = ConfigDict(frozen=True)

	name: str = Field(min_length=1, max_length=64)
	duration_days: int = Field(gt=0)


class StageTable(BaseModel):
	"""Ordered growth stages plus the category sets that partition their indices.

	Construction fails with a ``ValueError`` (pydantic ``ValidationError``) when
	the category sets overlap, leave an index uncovered, or name an index the
	table does not have.
	"""

	model_config = ConfigDict(frozen=True)

	stages: tuple[StageDefinition, ...] = Field(min_length=1)
	needs_flood: frozenset[int]
	allows_drying: frozenset[int]
	needs_drain: frozenset[int]

	@model_validator(mode="after")
	def _validate_partition(self) -> "StageTable":
		categories = (self.needs_flood, self.allows_drying, self.needs_drain)
		covered: set[int] = set().union(*categories)
		if sum(len(members) for members in categories) != len(covered):
			raise ValueError("stage categories overlap")

		expected = set(range(len(self.stages)))
		unknown = sorted(covered - expected)
		if unknown:
			raise ValueError(f"stage categories reference unknown indices: {unknown}")
		missing = sorted(expected - covered)
		if missing:
			raise ValueError(f"stages without a category: {missing}")
		return self

	@property
	def total_days(self) -> int:
		return sum(stage.duration_days for stage in self.stages)

	@property
	def last_index(self) -> int:
		return len(self.stages) - 1

	def category_of(self, stage_index: int) -> StageCategoryEnum | None:
		if stage_index in self.needs_flood:
			return StageCategoryEnum.needs_flood
		if stage_index in self.allows_drying:
			return StageCategoryEnum.allows_drying
		if stage_index in self.needs_drain:
			return StageCategoryEnum.needs_drain
		return None


class CropStage(BaseModel):
	model_config = ConfigDict(frozen=True)

	stage_index: int = Field(ge=0)
	stage_name: str
	days_elapsed: int = Field(default=0, ge=0)


class CropPlan(BaseModel):
	sensor_id: str
	planting_date: date | None = None


class CropStageRequest(BaseModel):
	planting_date: date
	now: date | None = None


class StageRow(BaseModel):
	index: int
	name: str
	duration_days: int
	start_day: int
	category: StageCategoryEnum


class StageTableResponse(BaseModel):
	total_days: int
	stages: list[StageRow] = Field(default_factory=list)
