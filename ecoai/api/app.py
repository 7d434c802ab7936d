"""
EcoAI — REST API

FastAPI application over the attribution, carbon, analytics, alerts,
simulation and dashboard engines.

Endpoints (all under /api/v1 except /health):
  POST/GET          /companies, /companies/{id}              (+ PUT, DELETE)
  POST/GET          /companies/{id}/departments              (+ /departments/{id})
  GET               /companies/{id}/departments/attribution
  POST/GET          /companies/{id}/energy                   (+ /energy/import CSV)
  GET               /companies/{id}/energy/attribution-preview
  GET/PUT           /companies/{id}/carbon/configs, /carbon/defaults
  POST              /companies/{id}/carbon/recalculate
  GET               /companies/{id}/analytics/{trends,forecast,year-over-year}
  GET/PUT           /companies/{id}/alerts, /alerts/thresholds, /alerts/insights
  POST              /companies/{id}/simulations/{growth,region-change,efficiency,custom}
  POST/GET          /companies/{id}/simulations/scenarios    (+ /simulations/scenarios/{id})
  GET               /companies/{id}/dashboard                (+ /summary, /regions)
  GET               /health
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import settings
from ..database import create_schema, make_engine, make_session_factory, session_scope
from ..exceptions import NotFoundError, ScenarioSaveError

logger = logging.getLogger("ecoai.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: DB engine and session factory."""
    logger.info("EcoAI API starting...")

    engine = make_engine()
    create_schema(engine)
    app.state.db_engine = engine
    app.state.db_session = make_session_factory(engine)

    if settings.SEED_ON_STARTUP:
        from ..seed import seed_sample_data
        with session_scope(app.state.db_session) as session:
            seed_sample_data(session)

    logger.info("EcoAI API ready")
    yield

    engine.dispose()
    logger.info("EcoAI API stopped")


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def scenario_save_handler(request: Request, exc: ScenarioSaveError) -> JSONResponse:
    logger.error("Scenario save failed on %s: %s", request.url.path, exc.__cause__)
    return JSONResponse(status_code=500, content={"detail": "Failed to save scenario"})


def create_app() -> FastAPI:
    app = FastAPI(
        title="EcoAI — AI Energy & Carbon Attribution API",
        description=(
            "Attributes company electricity use to AI workloads, converts it to "
            "CO2e, and serves trends, forecasts, alerts and what-if simulations."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ScenarioSaveError, scenario_save_handler)

    # Register routers
    from .routes import (
        alerts, analytics, carbon, companies, dashboard, departments, energy, health, simulations,
    )
    app.include_router(companies.router, prefix="/api/v1", tags=["Companies"])
    app.include_router(departments.router, prefix="/api/v1", tags=["Departments"])
    app.include_router(energy.router, prefix="/api/v1", tags=["Energy"])
    app.include_router(carbon.router, prefix="/api/v1", tags=["Carbon"])
    app.include_router(analytics.router, prefix="/api/v1", tags=["Analytics"])
    app.include_router(alerts.router, prefix="/api/v1", tags=["Alerts"])
    app.include_router(simulations.router, prefix="/api/v1", tags=["Simulations"])
    app.include_router(dashboard.router, prefix="/api/v1", tags=["Dashboard"])
    app.include_router(health.router, tags=["Health"])

    return app


app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
