"""Irrigation advisory routes."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status

from paddywatch.config import Settings, get_settings
from paddywatch.schemas.advisory import AdvisoryRequest, AdvisoryVerdict, PlotSummary, PlotSummaryRequest
from paddywatch.services import advisory
from paddywatch.services.plot_service import PlotService

router = APIRouter(prefix="/advisory", tags=["advisory"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="advisory failure")


def _now_ms() -> int:
	return int(datetime.now(UTC).timestamp() * 1000)


@router.post("/evaluate", response_model=AdvisoryVerdict)
async def evaluate_advisory(
	payload: AdvisoryRequest,
	settings: Settings = Depends(get_settings),
) -> AdvisoryVerdict:
	thresholds = settings.thresholds()
	try:
		if settings.strict_level_validation:
			advisory.validate_level(payload.level, thresholds)
		return advisory.evaluate(payload.level, payload.stage, payload.weather, thresholds)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/plot", response_model=PlotSummary)
async def summarize_plot(
	payload: PlotSummaryRequest,
	settings: Settings = Depends(get_settings),
) -> PlotSummary:
	service = PlotService(thresholds=settings.thresholds(), tz=settings.tz())
	now_ms = payload.now_ms if payload.now_ms is not None else _now_ms()
	try:
		summary = service.summarize(payload.readings, payload.plan, payload.weather, now_ms)
		if settings.strict_level_validation and summary.current_level is not None:
			advisory.validate_level(summary.current_level, service.thresholds)
		return summary
	except Exception as exc:
		raise _map_error(exc) from exc
