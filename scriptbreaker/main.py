from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scriptbreaker.api.v1.router import api_router
from scriptbreaker.core.exceptions import AppError, EntityNotFoundError, TransitionRejectedError
from scriptbreaker.core.logging import configure_logging
from scriptbreaker.core.metrics import get_metrics_payload
from scriptbreaker.core.request_context import reset_request_id, set_request_id
from scriptbreaker.core.settings import settings
from scriptbreaker.db.base import Base
from scriptbreaker.db.migrate import upgrade_database
from scriptbreaker.db.session import get_engine, init_engine


logger = logging.getLogger("scriptbreaker")


def _is_polling_request(method: str, path: str) -> bool:
    if method != "GET":
        return False
    return path == "/v1/panels/progress" or path == "/metrics"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level, settings.log_file)

    init_engine(settings.database_url)

    if settings.db_migrate_on_startup:
        upgrade_database(settings.database_url)
    elif settings.db_auto_create and settings.database_url.startswith("sqlite"):
        engine = get_engine()
        Base.metadata.create_all(bind=engine)

    logger.info("startup_complete", extra={"episode_store_backend": settings.episode_store_backend})
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
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
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request_failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                },
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        request_logger = logger.debug if _is_polling_request(request.method, request.url.path) else logger.info
        request_logger(
            "request_complete",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers["x-request-id"] = request_id
        return response
    finally:
        reset_request_id(token)


def _error_response(request: Request, status_code: int, detail: object, headers: dict | None = None) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "request_id": request_id},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(request, exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(request, 422, jsonable_encoder(exc.errors()))


@app.exception_handler(EntityNotFoundError)
async def entity_not_found_handler(request: Request, exc: EntityNotFoundError):
    return _error_response(request, 404, exc.detail)


@app.exception_handler(TransitionRejectedError)
async def transition_rejected_handler(request: Request, exc: TransitionRejectedError):
    return _error_response(request, 409, exc.detail)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return _error_response(request, 500, exc.detail)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return _error_response(request, 400, str(exc))


@app.exception_handler(KeyError)
async def key_error_handler(request: Request, exc: KeyError):
    return _error_response(request, 400, f"{exc}")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics_endpoint():
    return PlainTextResponse(get_metrics_payload(), media_type="text/plain; version=0.0.4; charset=utf-8")


app.include_router(api_router)
