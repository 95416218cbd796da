import os, sys, threading, time, logging
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
WEB_DIR = os.path.join(REPO_ROOT, "interface", "web")
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from Generate.params import Params
from Generate.orchestrator import generate_city
from Generate.stats import (
    DistributionInverted,
    HttpSampler,
    Sampler,
    StatsRequestError,
    UnknownDistribution,
)
from Generate.constants import (
    SAMPLE_WORKERS_DEFAULT,
    SIMULTANEOUS_JOBS_DEFAULT,
    STATS_TIMEOUT_S,
    STATS_URL_DEFAULT,
)
from render.raster import encode_image, render_city


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("city_api")

MEDIA_TYPES = {"jpeg": "image/jpeg", "png": "image/png"}

OVERLOADED_MESSAGE = "Server is overloaded, please try again later."
SERVER_MESSAGE = (
    "There is something wrong with our equipment at the moment, "
    "we recommend you stand by and try again in a few hours"
)


class Overloaded(Exception):
    """Every generation slot is taken."""


class GenerateRequest(BaseModel):
    params: Params = Params()
    format: str = Field(default="jpeg", pattern="^(jpeg|png)$")


class ErrorResponse(BaseModel):
    code: str
    error: str
    metadata: Dict[str, float]
    details: Optional[Any] = None


def _elapsed(request: Request) -> float:
    return time.perf_counter() - getattr(request.state, "start_time", time.perf_counter())


def _error(request: Request, status_code: int, code: str, message: str, details: Any = None) -> JSONResponse:
    content = {"code": code, "error": message, "metadata": {"processing_time": _elapsed(request)}}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    *,
    stats_url: str = STATS_URL_DEFAULT,
    timeout: float = STATS_TIMEOUT_S,
    simultaneous_jobs: int = SIMULTANEOUS_JOBS_DEFAULT,
    sample_workers: int = SAMPLE_WORKERS_DEFAULT,
    sampler: Optional[Sampler] = None,
    web_dir: Optional[str] = WEB_DIR,
) -> FastAPI:
    """Build the service. Nothing here reads the environment."""
    app = FastAPI(title="City Generator API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.sampler = sampler if sampler is not None else HttpSampler(stats_url, timeout=timeout)
    app.state.job_slots = threading.BoundedSemaphore(max(1, simultaneous_jobs))
    app.state.sample_workers = sample_workers

    # Prometheus metrics
    registry = CollectorRegistry()
    request_count = Counter(
        "request_total", "Total HTTP requests", ["method", "endpoint", "http_status"],
        registry=registry,
    )
    request_latency = Histogram(
        "request_latency_seconds", "Latency of HTTP requests", ["endpoint"],
        registry=registry,
    )
    error_count = Counter(
        "request_errors_total", "Total HTTP errors",
        registry=registry,
    )
    rejected_count = Counter(
        "request_rejected_total", "Requests turned away because every job slot was taken",
        registry=registry,
    )
    app.state.registry = registry

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.perf_counter()
        request.state.start_time = start_time
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as exc:
            logger.exception("Unhandled exception during request: %s", exc)
            raise
        finally:
            duration = time.perf_counter() - start_time
            endpoint = request.url.path
            if status_code >= 400:
                error_count.inc()
            request_count.labels(request.method, endpoint, status_code).inc()
            request_latency.labels(endpoint).observe(duration)
            logger.info(
                "%s %s -> %s in %.3fs",
                request.method,
                endpoint,
                status_code,
                duration,
            )
        return response

    @app.exception_handler(Overloaded)
    async def overloaded_handler(request: Request, exc: Overloaded):
        rejected_count.inc()
        logger.warning("Rejected %s: no free job slot", request.url.path)
        return _error(request, 503, "overloaded", OVERLOADED_MESSAGE)

    @app.exception_handler(UnknownDistribution)
    @app.exception_handler(DistributionInverted)
    async def distribution_handler(request: Request, exc: Exception):
        logger.warning("Bad distribution: %s", exc)
        return _error(request, 400, "bad_distribution", f"There was a random number sampling issue: {exc}")

    @app.exception_handler(StatsRequestError)
    async def stats_handler(request: Request, exc: StatsRequestError):
        logger.error("Stats service failure: %s", exc, exc_info=exc)
        return _error(request, 500, "server_error", SERVER_MESSAGE)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error: %s", exc)
        return _error(request, 422, "validation_error", "Invalid request", details=jsonable_encoder(exc.errors()))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return _error(request, 500, "internal_error", "Internal server error")

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.post(
        "/generate",
        responses={
            200: {"content": {"image/jpeg": {}, "image/png": {}}},
            400: {"model": ErrorResponse},
            422: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
            503: {"model": ErrorResponse},
        },
        response_class=Response,
    )
    def generate(req: GenerateRequest):
        slots = app.state.job_slots
        if not slots.acquire(blocking=False):
            raise Overloaded()
        try:
            city = generate_city(req.params, app.state.sampler, max_workers=app.state.sample_workers)
            body = encode_image(render_city(city), req.format)
        finally:
            slots.release()
        logger.info("Generated %d roads, %d blocks, %d buildings",
                    len(city.roads), len(city.blocks), len(city.buildings))
        return Response(content=body, media_type=MEDIA_TYPES[req.format])

    # Serve the browser front end if present
    if web_dir and os.path.isdir(web_dir):
        index_path = os.path.join(web_dir, "index.html")

        @app.get("/", include_in_schema=False)
        def index():
            return FileResponse(index_path, media_type="text/html")

        app.mount("/static", StaticFiles(directory=web_dir), name="static")

    return app


app = create_app(
    stats_url=os.environ.get("STATS_URL", STATS_URL_DEFAULT),
    timeout=float(os.environ.get("STATS_TIMEOUT_S", STATS_TIMEOUT_S)),
    simultaneous_jobs=int(os.environ.get("SIMULTANEOUS_JOBS", SIMULTANEOUS_JOBS_DEFAULT)),
)
