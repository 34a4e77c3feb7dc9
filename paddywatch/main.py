"""FastAPI application entrypoint: lifespan, routers, middleware."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paddywatch.config import get_settings
from paddywatch.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from paddywatch.routes import advisory, crop, series, telemetry
from paddywatch.services.crop_stage import DEFAULT_STAGE_TABLE

logger = logging.getLogger("paddywatch")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
	"""Application startup / shutdown lifecycle.

	Startup:
	  1. Initialize structured logging
	  2. Resolve the configured time zone (fails fast on an unknown IANA name)
	"""
	settings = get_settings()
	configure_structured_logging(settings)
	try:
		tz = settings.tz()
	except Exception as exc:
		logger.exception("startup failure", extra={"error": str(exc)})
		raise

	logger.info(
		"PaddyWatch starting",
		extra={
			"log_level": settings.log_level,
			"timezone": str(tz) if tz is not None else "local",
			"stage_count": len(DEFAULT_STAGE_TABLE.stages),
			"strict_level_validation": settings.strict_level_validation,
		},
	)

	yield

	logger.info("PaddyWatch shutting down")


app = FastAPI(
	title="PaddyWatch API",
	description=(
		"Paddy-field water telemetry API: windows AWD gauge readings for charting, "
		"resolves rice growth stages from planting dates, and turns gauge level, "
		"stage and weather into a single irrigation advisory."
	),
	version=VERSION,
	lifespan=lifespan,
	docs_url="/docs",
	redoc_url="/redoc",
)

# ── CORS ────────────────────────────────────────────────────────────────────
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health check ────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
	"""Basic health check: verifies the API process is alive."""
	return {
		"status": "ok",
		"service": "paddywatch",
		"version": VERSION,
	}


# ── Router registration ────────────────────────────────────────────────────
app.include_router(advisory.router, prefix="/api/v1")
app.include_router(crop.router, prefix="/api/v1")
app.include_router(series.router, prefix="/api/v1")
app.include_router(telemetry.router, prefix="/api/v1")
