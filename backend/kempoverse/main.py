# kempoverse/main.py
import logging
import time
import uuid
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from kempoverse.exceptions import KempoverseError
from kempoverse.routers.auth import router as auth_router
from kempoverse.routers.entries import router as entries_router
from kempoverse.routers.images import router as images_router
from kempoverse.routers.training import router as training_router
from kempoverse.schemas.envelope import ErrorEnvelope
from kempoverse.settings import get_settings
from kempoverse.db import SessionLocal  # for healthz DB check

settings = get_settings()

log = logging.getLogger("kempoverse")
log.setLevel(settings.LOG_LEVEL.upper())
access_log = logging.getLogger("uvicorn")

app = FastAPI(
    title="Kempoverse API",
    openapi_tags=[
        {"name": "auth", "description": "Shared-password login"},
        {"name": "entries", "description": "Technique, form and knowledge notes"},
        {"name": "images", "description": "Entry image uploads"},
        {"name": "training", "description": "Timed training sessions"},
    ],
    responses={code: {"model": ErrorEnvelope} for code in (400, 401, 404, 500)},
)


# CORS (permissive by default; tighten origins in prod via env)
ALLOW_ORIGINS = settings.ALLOW_ORIGINS.split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    access_log.info("rid=%s %s %s -> %s in %.1fms",
                    req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response


# Every failure leaves as {"error": "..."}
def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)

@app.exception_handler(KempoverseError)
async def domain_error_handler(request: Request, exc: KempoverseError):
    return error_response(exc.status_code, exc.message, headers=exc.headers)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for err in jsonable_encoder(exc.errors()):
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        problems.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid input"))
    return error_response(400, "; ".join(problems) or "Invalid request")

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


@app.get("/")
def root():
    return {"ok": True, "name": "Kempoverse API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/api/test")
def api_test():
    return {"message": "API is working!"}

@app.get("/healthz")
def healthz():
    # Quick DB sanity check
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as e:
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": settings.API_VERSION}

# Routers
app.include_router(auth_router)
app.include_router(entries_router)
app.include_router(images_router)
app.include_router(training_router)

# Locally stored images; IMAGE_PUBLIC_BASE_URL points here by default
_media_dir = Path(settings.IMAGE_STORAGE_DIR)
_media_dir.mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=_media_dir), name="media")
