"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config.settings import Settings, settings as default_settings
from .controllers import audio, videos
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .pipelines.waveform import WaveformPipeline
from .services import AssetPublisher, AssetStore, S3AssetStore, WaveformRenderer

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _rotating_handler(path: str, max_bytes: int, fmt: str) -> RotatingFileHandler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _configure_logging(settings: Settings) -> None:
    """Stream logs to stdout and the application log file."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(_rotating_handler(settings.log_file, 1_000_000, _LOG_FORMAT))
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    middleware_logger = logging.getLogger("wavepub.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    # Pipeline runs (progress included) also get their own file.
    pipeline_logger = logging.getLogger("wavepub.pipeline")
    pipeline_logger.handlers.clear()
    pipeline_logger.addHandler(
        _rotating_handler(
            settings.pipeline_log_file,
            500_000,
            "%(asctime)s | %(levelname)s | %(message)s",
        )
    )
    pipeline_logger.setLevel(logging.INFO)

    noisy_loggers = [
        "botocore",
        "boto3",
        "s3transfer",
        "urllib3",
        "multipart",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_pipeline(
    settings: Settings,
    store: AssetStore,
) -> tuple[AssetPublisher, WaveformPipeline]:
    """Wire the publisher and orchestrator around an already-built store."""

    publisher = AssetPublisher(store, default_folder=settings.publish.default_folder)
    pipeline = WaveformPipeline(
        publisher,
        WaveformRenderer(ffmpeg_binary=settings.render.ffmpeg_binary),
        videos_dir=settings.render.videos_dir,
        background_image=settings.render.background_image,
        compositing=settings.publish.compositing,
        render_timeout=settings.render.timeout_seconds,
    )
    return publisher, pipeline


def create_app(
    settings: Settings = default_settings,
    *,
    store: Optional[AssetStore] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The store client is created here, once, and reaches the handlers only
    through ``app.state``.
    """

    if configure_logging:
        _configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Render audio into waveform videos and publish them to a remote asset store",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.state.settings = settings
    app.state.store = store or S3AssetStore.from_config(settings.store)
    app.state.publisher, app.state.pipeline = build_pipeline(settings, app.state.store)

    app.include_router(audio.router)
    app.include_router(videos.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "operational",
        }

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""

        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(
                status_code=405,
                content={"message": "Method not allowed"},
                headers=exc.headers,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": "Error", "error": str(exc.detail)},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"message": "Error", "error": "Internal server error"},
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        Path(settings.render.videos_dir).mkdir(parents=True, exist_ok=True)
        Path(settings.render.uploads_dir).mkdir(parents=True, exist_ok=True)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "wavepub.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
