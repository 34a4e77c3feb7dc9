"""Chart window routes."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, status

from paddywatch.config import Settings, get_settings
from paddywatch.schemas.series import SeriesWindowRequest, SeriesWindowResponse
from paddywatch.services.series import select_window, window_bounds

router = APIRouter(prefix="/series", tags=["series"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="series failure")


@router.post("/window", response_model=SeriesWindowResponse)
async def get_series_window(
	payload: SeriesWindowRequest,
	settings: Settings = Depends(get_settings),
) -> SeriesWindowResponse:
	tz = settings.tz()
	now_ms = payload.now_ms if payload.now_ms is not None else int(datetime.now(UTC).timestamp() * 1000)
	try:
		start_ms, end_ms = window_bounds(payload.range, now_ms, tz)
		points = select_window(payload.readings, payload.range, now_ms, tz)
	except Exception as exc:
		raise _map_error(exc) from exc

	return SeriesWindowResponse(
		range=payload.range,
		start_ms=start_ms,
		end_ms=end_ms,
		points=points,
	)
