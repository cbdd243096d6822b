from collections.abc import Awaitable, Callable

import uvicorn
from fastapi import FastAPI, Request, Response

from app.analysis.client_base import BaseAnalysisClient
from app.api.errors import CORS_HEADERS, register_exception_handlers
from app.api.routes import router
from app.config.settings import Settings
from app.logging.logger import Log
from app.processor.processor import build_processors


async def add_cors_headers(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


def create_app(
    settings: Settings | None = None,
    client: BaseAnalysisClient | None = None,
) -> FastAPI:
    """Build the FastAPI app with one processor per analysis mode.

    ``client`` replaces the provider client from settings (tests, local runs).
    """
    settings = settings if settings is not None else Settings()
    app = FastAPI(title="Document Analysis Service", version="1.0.0")
    app.state.settings = settings
    app.state.processors = build_processors(settings, client)
    app.middleware("http")(add_cors_headers)
    register_exception_handlers(app)
    app.include_router(router)
    return app


def main() -> None:
    """Entry point: load settings -> configure logging -> serve the app."""
    settings = Settings()
    Log.configure(settings.log_level)
    app = create_app(settings)
    Log.info(
        "Starting document analysis service",
        host=settings.host,
        port=settings.port,
        provider=settings.analysis_provider,
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
