from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.config import get_settings
from app.database import init_db
from app.middleware.correlation import CorrelationMiddleware, install_log_filter
from app.middleware.rate_limit import limiter
from app.routes import analysis, assistant, auth, jobs, progress, resources, resume, roadmap
from app.services.errors import (
    GenerationError,
    MalformedResponse,
    NoCredentialConfigured,
    QuotaExceeded,
    RateLimited,
)
from app.utils.logger import logger
from app.utils.metrics import get_snapshot

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS - Explicit origins for security
allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)
install_log_filter()


# Startup: Initialize database
@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name} Backend...")
    await init_db()
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400), described field by field"""
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return JSONResponse(status_code=400, content={"detail": "; ".join(problems) or "Invalid request"})


def generation_error_status(exc: GenerationError) -> int:
    if isinstance(exc, MalformedResponse):
        return 502
    if isinstance(exc, NoCredentialConfigured):
        return 503
    if isinstance(exc, (RateLimited, QuotaExceeded)):
        return 429
    return 500


def generation_error_message(exc: GenerationError) -> str:
    if isinstance(exc, MalformedResponse):
        return "Failed to process AI response. Please try again."
    if isinstance(exc, NoCredentialConfigured):
        return str(exc)
    if isinstance(exc, (RateLimited, QuotaExceeded)):
        return "API rate limit reached. Please try again in a few moments."
    return "AI service error. Please try again later."


@app.exception_handler(GenerationError)
async def generation_exception_handler(request: Request, exc: GenerationError):
    status = generation_error_status(exc)
    logger.error(
        f"[Generation] {request.method} {request.url.path} failed: {type(exc).__name__}: {exc}",
        extra={"status": status, "error_type": type(exc).__name__},
    )
    content = {"detail": generation_error_message(exc)}
    # Internals only in debug mode
    if settings.debug:
        content["error"] = str(exc)
        if isinstance(exc, MalformedResponse) and exc.snippet:
            content["snippet"] = exc.snippet
    return JSONResponse(status_code=status, content=content)


# Health check endpoint (minimal response to prevent information disclosure)
@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    """Counters and latency percentiles for generation calls"""
    return get_snapshot()


# Register routes
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(resume.router, prefix="/api/resume", tags=["Resume"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["Job Roles"])
app.include_router(analysis.router, prefix="/api/analysis", tags=["Analysis"])
app.include_router(roadmap.router, prefix="/api/roadmap", tags=["Roadmap"])
app.include_router(resources.router, prefix="/api/resources", tags=["Resources"])
app.include_router(assistant.router, prefix="/api/assistant", tags=["Assistant"])
app.include_router(progress.router, prefix="/api/progress", tags=["Progress"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )
