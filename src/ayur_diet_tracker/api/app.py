"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ayur_diet_tracker.api.compliance import router as compliance_router
from ayur_diet_tracker.api.diet_charts import router as diet_charts_router
from ayur_diet_tracker.api.errors import register_exception_handlers
from ayur_diet_tracker.api.patients import router as patients_router
from ayur_diet_tracker.api.profile import router as profile_router
from ayur_diet_tracker.api.reports import router as reports_router
from ayur_diet_tracker.app_logging import configure_logging
from ayur_diet_tracker.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Ayurvedic Diet Tracker", lifespan=lifespan)
    app.state.container = container
    register_exception_handlers(app)

    app.include_router(patients_router)
    app.include_router(diet_charts_router)
    app.include_router(compliance_router)
    app.include_router(reports_router)
    app.include_router(profile_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
