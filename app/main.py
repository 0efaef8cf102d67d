from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from app.api.v1.router import api_router
from app.core.exceptions import (
    AppError,
    ConfigurationError,
    EntityNotFoundError,
    GenerationError,
    InputValidationError,
    NotAuthenticatedError,
)
from app.core.logging import configure_logging
from app.core.metrics import get_metrics_payload
from app.core.request_context import get_project_id, get_scene_id, reset_request_id, set_request_id
from app.core.settings import settings
from app.db.session import create_tables, init_engine
from app.services.runtime import build_runtime


logger = logging.getLogger("app")

_STATUS_BY_ERROR: list[tuple[type[AppError], int]] = [
    (InputValidationError, 400),
    (NotAuthenticatedError, 401),
    (EntityNotFoundError, 404),
    (GenerationError, 502),
    (ConfigurationError, 503),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_file)
    init_engine(settings.database_url)
    if settings.db_auto_create:
        create_tables()

    app.state.runtime = build_runtime(settings)
    try:
        yield
    finally:
        await app.state.runtime.shutdown()


app = FastAPI(title="Hakawati Studio", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount(
    settings.media_url_prefix,
    StaticFiles(directory=settings.media_root, check_dir=False),
    name="media",
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    token = set_request_id(request_id)
    start = time.perf_counter()
    try:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": (time.perf_counter() - start) * 1000,
                },
            )
            raise

        request_logger = logger.debug if request.url.path == "/v1/batch" else logger.info
        request_logger(
            "request_complete",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": (time.perf_counter() - start) * 1000,
                "project_id": get_project_id(),
                "scene_id": get_scene_id(),
            },
        )
        response.headers["x-request-id"] = request_id
        return response
    finally:
        reset_request_id(token)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    request_id = getattr(request.state, "request_id", None)
    if status_code >= 500:
        logger.warning("app_error", extra={"error": str(exc), "status": status_code})
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "request_id": request_id},
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics_endpoint():
    return PlainTextResponse(get_metrics_payload(), media_type="text/plain; version=0.0.4; charset=utf-8")


app.include_router(api_router)
