from dotenv import load_dotenv
import logging
import os
from contextlib import asynccontextmanager

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.config import settings
from app.core.database import attach_database, build_engine
from app.core.error_messages import find_hint
from app.core.errors import ElectionError
from app.services.results_service import ResultsTally

# ───────────────── ROUTER IMPORTS ─────────────────
from app.routes.admin import router as admin_router
from app.routes.aspirant import router as aspirant_router
from app.routes.audit import router as audit_router
from app.routes.auth import router as auth_router
from app.routes.notifications import router as notifications_router
from app.routes.otp import router as otp_router
from app.routes.results import router as results_router
from app.routes.timeline import router as timeline_router
from app.routes.voters import router as voters_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    attach_database(app, engine)
    logger.info("Database engine ready (%s)", settings.APP_ENV)
    try:
        yield
    finally:
        await engine.dispose()


# ───────── SAFE VALIDATION HANDLER (FIXES UNICODE CRASH) ─────────

def _sanitize(obj):
    if isinstance(obj, (bytes, bytearray)):
        return f"<bytes:{len(obj)}>"
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, Exception):
        return str(obj)
    return obj


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    safe_errors = _sanitize(exc.errors())
    first = safe_errors[0] if safe_errors else {}
    message = first.get("msg", "Invalid request") if isinstance(first, dict) else "Invalid request"
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"error": message, "code": "VALIDATION_ERROR", "detail": safe_errors},
    )


async def election_error_handler(request: Request, exc: ElectionError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    payload = exc.to_payload()
    hint = find_hint(exc.message)
    if hint is not None:
        payload["hint"] = hint.as_dict()
    return JSONResponse(status_code=exc.status_code, content=payload)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s crashed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="COHSSA Elections API",
        description="Backend API for the COHSSA election and aspirant portal",
        version="1.0.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.results_tally = ResultsTally()

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ElectionError, election_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ───────────────── CORS ─────────────────
    origins = settings.origins_list or ["http://localhost:5173"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ───────────────── ROUTES ─────────────────
    app.include_router(auth_router, prefix="/api")
    app.include_router(otp_router, prefix="/api")
    app.include_router(voters_router, prefix="/api")
    app.include_router(aspirant_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")
    app.include_router(results_router, prefix="/api")
    app.include_router(timeline_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(audit_router, prefix="/api")

    # ───────────────── HEALTH ─────────────────
    @app.get("/", tags=["Health"])
    async def root():
        return {
            "status": "ok",
            "app": "COHSSA Elections API",
            "env": settings.APP_ENV,
        }

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
