"""
PoA Receipt Backend — FastAPI application entry-point.
"""
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from poa_receipts import __version__
from poa_receipts.config import settings
from poa_receipts.database import Base, make_engine, make_session_factory
from poa_receipts.middleware import PreflightCORSMiddleware, cors_headers
from poa_receipts.store import ReceiptStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure data dir + table exist, then load the receipt log
    os.makedirs(settings.DATA_DIR, exist_ok=True)
    import poa_receipts.models  # noqa: F401
    engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    Base.metadata.create_all(bind=engine)
    logger.info("Database ready: %s", settings.DATABASE_URL)

    store = ReceiptStore(make_session_factory(engine))
    store.load()
    app.state.store = store
    logger.info(
        "Webhook endpoint: %s/api/webhook/proof (contract %s.%s)",
        settings.PUBLIC_BASE_URL.rstrip("/"),
        settings.CONTRACT_ADDRESS,
        settings.CONTRACT_NAME,
    )

    yield

    if store.pending_count:
        logger.warning("Shutting down with %d unsaved receipt(s)", store.pending_count)
        store.flush()
    engine.dispose()
    logger.info("Shutting down")


app = FastAPI(
    title="PoA Receipts",
    description="Chain webhook → proof event → receipt store → lookups",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ── Error envelope: {"error": ...} ───────────────────────────────────────
@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    fields = {
        ".".join(str(p) for p in err.get("loc", ()) if p not in ("query", "body")): err.get("msg")
        for err in exc.errors()
    }
    return JSONResponse(status_code=400, content={"error": "Invalid request", "fields": fields})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # Runs outside the CORS middleware, so add its headers here
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
        headers=cors_headers(request, settings.CORS_ORIGINS),
    )


@app.get("/")
async def root():
    return {"service": "PoA Receipts", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# ── Register routers ─────────────────────────────────────────────────────
from poa_receipts.routers.receipts import public_router, router as receipts_router  # noqa: E402
from poa_receipts.routers.webhook import router as webhook_router  # noqa: E402

app.include_router(webhook_router, prefix="/api", tags=["Webhook"])
app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
app.include_router(public_router, tags=["Receipts"])


def run() -> None:
    import uvicorn

    uvicorn.run("poa_receipts.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
