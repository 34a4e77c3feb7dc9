from __future__ import annotations

import pytest
from httpx import AsyncClient
from pydantic import ValidationError

from paddywatch.config import AdvisoryThresholds, LogFormat, Settings


@pytest.mark.asyncio
async def test_health_ok(client: AsyncClient) -> None:
	response = await client.get("/health")
	assert response.status_code == 200
	assert response.json()["service"] == "paddywatch"


@pytest.mark.asyncio
async def test_request_id_is_propagated(client: AsyncClient) -> None:
	request_id = "gauge-refresh-request-id"
	response = await client.get("/health", headers={"x-request-id": request_id})
	assert response.status_code == 200
	assert response.headers.get("x-request-id") == request_id


@pytest.mark.asyncio
async def test_request_id_generated_when_missing(client: AsyncClient) -> None:
	response = await client.get("/health")
	assert response.status_code == 200
	generated = response.headers.get("x-request-id")
	assert generated is not None
	assert len(generated) >= 8


@pytest.mark.asyncio
async def test_openapi_contract(client: AsyncClient) -> None:
	openapi = await client.get("/openapi.json")
	assert openapi.status_code == 200
	paths = openapi.json()["paths"]
	assert "/api/v1/advisory/evaluate" in paths
	assert "/api/v1/advisory/plot" in paths
	assert "/api/v1/crop/stage" in paths
	assert "/api/v1/crop/stages" in paths
	assert "/api/v1/series/window" in paths
	assert "/api/v1/telemetry/shape" in paths


def test_settings_thresholds_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("PADDYWATCH_ADVISORY_LOW_CM", "6")
	monkeypatch.setenv("PADDYWATCH_LOG_FORMAT", "console")

	settings = Settings()

	assert settings.log_format == LogFormat.console
	thresholds = settings.thresholds()
	assert thresholds.low_cm == 6.0
	assert thresholds.soil_surface_cm == AdvisoryThresholds().soil_surface_cm


def test_settings_timezone() -> None:
	assert Settings(timezone="").tz() is None
	assert str(Settings(timezone="Asia/Colombo").tz()) == "Asia/Colombo"


@pytest.mark.parametrize(
	"bands",
	[
		{"low_cm": 15, "soil_surface_cm": 15, "high_cm": 20},
		{"low_cm": 5, "soil_surface_cm": 22, "high_cm": 20},
		{"low_cm": 5, "soil_surface_cm": 15, "high_cm": 35},
	],
)
def test_thresholds_reject_misordered_bands(bands: dict[str, float]) -> None:
	with pytest.raises(ValidationError):
		AdvisoryThresholds(**bands)


def test_settings_reject_misordered_bands_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
	monkeypatch.setenv("PADDYWATCH_ADVISORY_HIGH_CM", "10")

	with pytest.raises(ValidationError, match="low < soil surface < high"):
		Settings()
