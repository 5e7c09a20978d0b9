from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from lidora_functions.config import load_settings
from lidora_functions.logging_config import setup_logging
from lidora_functions.routes import router
from lidora_functions.services import build_services

logger = structlog.get_logger(__name__)


def create_app(services=None) -> FastAPI:
    """Build the app. Handles are built once at startup unless injected."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            settings = load_settings()
            setup_logging(settings.log_level)
            app.state.services = build_services(settings)
        logger.info("event_functions_started")
        yield

    app = FastAPI(title="Lidora Event Functions", lifespan=lifespan)
    app.state.services = services
    app.include_router(router)
    return app


app = create_app()
