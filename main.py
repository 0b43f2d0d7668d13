import time

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

import models  # noqa: F401  creates tables on import
from config import IS_PRODUCTION, WEB_URL
from logging_config import init_sentry, setup_logging
from routers import account, ai, conditions, journal, medications, onboarding, regions, reports, symptoms, uploads

logger = setup_logging()
init_sentry()

app = FastAPI(title="Health Heatmap API")

# ────── CORS ──────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[WEB_URL] if IS_PRODUCTION else [],
    allow_origin_regex=None if IS_PRODUCTION else r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)

# ────── Request logging ──────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response

# ────── Errors ──────
@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    sentry_sdk.capture_exception(exc)
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": type(exc).__name__, "message": "An error occurred" if IS_PRODUCTION else str(exc)},
    )

# ════════════════════════════════════
#               ROUTES
# ════════════════════════════════════

@app.get("/")
def home():
    return {"message": "Health Heatmap API Running"}

@app.get("/health")
def health():
    return {"status": "ok"}

for module in (account, onboarding, uploads, regions, symptoms, conditions, journal, ai, medications, reports):
    app.include_router(module.router)
