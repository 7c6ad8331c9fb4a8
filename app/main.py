from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import uuid

# Local imports
from app.core.config import Settings, settings as default_settings
from app.core.context import ServiceContext
from app.core.errors import WeatherProxyError
from app.api.routes import router as api_router
from app.logging import configure_logging
from app.middleware.logging import RequestLoggingMiddleware
from app.models.dto import ErrorEnvelope, ErrorResponse

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, context: Optional[ServiceContext] = None) -> FastAPI:
    """
    Builds the proxy application.

    ``context`` lets callers supply pre-built shared handles (tests pass an
    in-memory cache and a fake upstream); otherwise they are built from
    ``settings`` when the application starts.
    """
    settings = settings or default_settings

    # --- Application Lifecycle Management ---
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.ENV)
        ctx = context or ServiceContext(settings)
        app.state.context = ctx
        await ctx.start()
        logger.info(f"Backend running on port {settings.PORT} (v{settings.VERSION})")

        yield

        logger.info("Application shutdown: Cleaning up resources.")
        await ctx.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.BRIEF_DESCRIPTION,
        lifespan=lifespan,
    )

    # --- Middleware ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # --- API Routes ---
    app.include_router(api_router)

    # --- Exception Handlers ---
    @app.exception_handler(WeatherProxyError)
    async def weather_proxy_error_handler(request: Request, exc: WeatherProxyError):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorEnvelope(detail=exc.to_response()).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())
        logger.error(f"Unhandled exception (ID: {error_id}): {exc}", exc_info=True)
        error = ErrorResponse(
            error="INTERNAL_SERVER_ERROR",
            detail="Unable to retrieve data from the upstream API.",
            error_id=error_id,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorEnvelope(detail=error).model_dump(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=default_settings.PORT)
