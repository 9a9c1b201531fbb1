"""
FastAPI Backend — MedSafe data endpoints.

Serves the JSON behind the charts on the MedSafe data page:

    GET /api/data-wordcloud               term frequencies in openFDA label safety text
    GET /api/data-interaction-clusters    labels per interaction concern
    GET /api/data-signals-exposure        FAERS reports vs CMS Part D exposure
    GET /api/health                       liveness

Common query flags: debug=1 (no cache read/write, diagnostic fields) and
refresh=1 (recompute, then store). Every response carries permissive CORS
headers and any OPTIONS request gets an empty 200.

Run locally:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse

# Load environment variables from .env file
load_dotenv()

from medsafe import config
from medsafe.cache import TTLCache
from medsafe.errors import MedsafeError, log_step, utc_now_iso
from medsafe.models import ErrorResponse, HealthResponse
from medsafe.pipelines import interaction_clusters, signals_exposure, wordcloud

# ── Logging ─────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# ── Lifespan ────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("MedSafe data API starting up")
    logger.info("OPENFDA_LABEL_URL=%s", config.OPENFDA_LABEL_URL)
    logger.info("OPENFDA_EVENT_URL=%s", config.OPENFDA_EVENT_URL)
    logger.info("CMS_DATASET_URL=%s", config.CMS_DATASET_URL)
    logger.info("OPENFDA_API_KEY=%s", "set" if config.OPENFDA_API_KEY else "NOT SET")
    yield
    logger.info("MedSafe data API shutting down")


# ── App ─────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="MedSafe Data API",
    version="0.1.0",
    description="Aggregated drug-safety views over openFDA and CMS Part D data",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


# ── Dependencies ────────────────────────────────────────────────────────────
_cache = TTLCache()


def get_cache() -> TTLCache:
    """Process-wide payload cache; tests override this dependency."""
    return _cache


# ── Helpers ─────────────────────────────────────────────────────────────────
def _flag(value: str | None) -> bool:
    return value == "1"


def _json(payload: dict, status_code: int = 200, cache_control: str | None = None) -> JSONResponse:
    headers = {"Cache-Control": cache_control} if cache_control else None
    return JSONResponse(payload, status_code=status_code, headers=headers)


def _success(payload: dict, debug: bool) -> JSONResponse:
    return _json(payload, cache_control="no-cache" if debug else config.BROWSER_CACHE_CONTROL)


def _error(endpoint: str, exc: Exception) -> JSONResponse:
    """Log a failure with its context and convert it to the client error shape."""
    if isinstance(exc, MedsafeError):
        status_code, details, extra = exc.status_code, exc.details, exc.extra
    else:
        status_code = 500
        details = f"{type(exc).__name__}: {exc}"[: config.DETAILS_CHARS]
        extra = {}

    log_step(
        logger,
        "handler error",
        logging.ERROR,
        endpoint=endpoint,
        status=status_code,
        errorName=type(exc).__name__,
        errorMessage=str(exc),
        **extra,
    )
    body = ErrorResponse(error=f"{endpoint} failed", details=details, generated_at=utc_now_iso(), **extra)
    return _json(body.to_payload(), status_code=status_code)


def _handle(endpoint: str, produce, debug: bool) -> JSONResponse:
    try:
        payload = produce()
    except MedsafeError as exc:
        return _error(endpoint, exc)
    except Exception as exc:
        logger.exception("Unexpected error in %s", endpoint)
        return _error(endpoint, exc)
    return _success(payload, debug)


# ── Endpoints ───────────────────────────────────────────────────────────────
@app.options("/{path:path}")
async def preflight(path: str):
    """CORS preflight for every route."""
    return Response(status_code=200)


@app.get("/api/health")
async def health():
    return HealthResponse(now=utc_now_iso()).to_payload()


@app.get("/api/data-wordcloud")
def data_wordcloud(
    debug: str | None = None,
    refresh: str | None = None,
    selftest: str | None = None,
    ping: str | None = None,
    cache: TTLCache = Depends(get_cache),
):
    """Top label terms. selftest=1 and ping=1 are diagnostic modes that bypass the cache."""
    if _flag(selftest):
        return _json(wordcloud.selftest())

    if _flag(ping):
        status_code, payload = wordcloud.ping()
        return _json(payload, status_code=status_code)

    return _handle(
        "data-wordcloud",
        lambda: wordcloud.run(cache, debug=_flag(debug), refresh=_flag(refresh)),
        _flag(debug),
    )


@app.get("/api/data-interaction-clusters")
def data_interaction_clusters(
    debug: str | None = None,
    refresh: str | None = None,
    cache: TTLCache = Depends(get_cache),
):
    return _handle(
        "data-interaction-clusters",
        lambda: interaction_clusters.run(cache, debug=_flag(debug), refresh=_flag(refresh)),
        _flag(debug),
    )


@app.get("/api/data-signals-exposure")
def data_signals_exposure(
    drug: str | None = None,
    debug: str | None = None,
    refresh: str | None = None,
    cache: TTLCache = Depends(get_cache),
):
    """Top list of drugs by Part D exposure; with drug=NAME, that drug's FAERS report rate."""
    return _handle(
        "data-signals-exposure",
        lambda: signals_exposure.run(cache, drug=drug, debug=_flag(debug), refresh=_flag(refresh)),
        _flag(debug),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
