"""Crop growth-stage routes."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status

from paddywatch.config import Settings, get_settings
from paddywatch.schemas.crop import CropStage, CropStageRequest, StageTableResponse
from paddywatch.services.crop_stage import describe_table, resolve_stage

router = APIRouter(prefix="/crop", tags=["crop"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="crop stage failure")


@router.post("/stage", response_model=CropStage)
async def get_crop_stage(
	payload: CropStageRequest,
	settings: Settings = Depends(get_settings),
) -> CropStage:
	now = payload.now or datetime.now(settings.tz()).date()
	try:
		return resolve_stage(payload.planting_date, now)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/stages", response_model=StageTableResponse)
async def list_crop_stages() -> StageTableResponse:
	return describe_table()
