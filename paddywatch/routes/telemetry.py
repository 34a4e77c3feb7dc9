"""Telemetry row shaping routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from paddywatch.config import Settings, get_settings
from paddywatch.schemas.telemetry import TelemetryShapeRequest, TelemetrySnapshot
from paddywatch.services.telemetry_service import TelemetryService

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="telemetry failure")


@router.post("/shape", response_model=TelemetrySnapshot)
async def shape_telemetry(
	payload: TelemetryShapeRequest,
	settings: Settings = Depends(get_settings),
) -> TelemetrySnapshot:
	service = TelemetryService(tz=settings.tz())
	try:
		return service.shape(payload.rows)
	except Exception as exc:
		raise _map_error(exc) from exc
