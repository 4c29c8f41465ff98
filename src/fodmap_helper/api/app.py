"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fodmap_helper.api.chat import router as chat_router
from fodmap_helper.api.search import router as search_router
from fodmap_helper.app_logging import configure_logging
from fodmap_helper.containers import AppContainer
from fodmap_helper.errors import FodmapError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(search_router)
    app.include_router(chat_router)

    @app.exception_handler(FodmapError)
    async def handle_fodmap_error(request: Request, exc: FodmapError) -> JSONResponse:
        """Render domain errors as ``{"error": message}``."""
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed bodies as 400 with the offending field."""
        errors = exc.errors()
        field = ".".join(str(part) for part in errors[0]["loc"]) if errors else "body"
        return JSONResponse(
            status_code=400, content={"error": f"Invalid or missing field: {field}"}
        )

    @app.get("/health")
    def health(request: Request) -> dict[str, object]:
        """Simple health check endpoint."""
        state_container: AppContainer = request.app.state.container
        return {"status": "ok", "foodsLoaded": len(state_container.catalog.list_all())}

    return app
