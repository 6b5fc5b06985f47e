"""Campus Connect - account backend for the VIT Connect campus platform."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.database import create_tables
from app.errors import AccountError, CompletionError, InvalidAssertion
from app.rate_limit import limiter
from app.routers import auth_router, chat_router, profile_router
from app.services.completion import GeminiCompletionService
from app.services.google_login import GoogleIdentityVerifier
from app.services.notifier import build_notifier
from app.services.passwords import PasswordHasher

# Logging
logger = logging.getLogger("campus_connect")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()
for warning in settings.validate():
    logger.warning(warning)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        create_tables()
        logger.info("Database tables ensured")
    yield


app = FastAPI(title="Campus Connect", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter

# Collaborators, built once and injected through app.dependencies
app.state.hasher = PasswordHasher(settings.BCRYPT_ROUNDS_DEFAULT, settings.BCRYPT_ROUNDS_STRONG)
app.state.notifier = build_notifier(settings)
app.state.identity_verifier = GoogleIdentityVerifier(settings.GOOGLE_CLIENT_ID)
app.state.completion_service = GeminiCompletionService(
    api_key=settings.GEMINI_API_KEY,
    model=settings.GEMINI_MODEL,
    base_url=settings.GEMINI_API_URL,
    timeout=settings.GEMINI_TIMEOUT_SECONDS,
)


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 1024 * 1024  # 1MB, JSON bodies only

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"success": False, "error": "Request body too large"})
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {
        "/api/register",
        "/api/login",
        "/api/google-login",
        "/api/forgot-password",
        "/api/reset-password",
        "/api/change-password",
    }

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        path = request.url.path
        if request.method == "POST" and path in self.AUDIT_PATHS:
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                request.method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(chat_router)


# --- Domain error handlers ---
@app.exception_handler(AccountError)
async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Expected account failures: 200 with success=false unless the error says otherwise."""
    content = {"success": False, "message": exc.message}
    if isinstance(exc, InvalidAssertion):
        content["error"] = exc.reason
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(CompletionError)
async def completion_error_handler(request: Request, exc: CompletionError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed bodies with 400. Submitted values are not echoed back."""
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request", "details": details})


# --- Rate limit error handler ---
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content={"success": False, "error": "Too many requests. Try again later."})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "campus-connect", "version": "0.1.0"}
