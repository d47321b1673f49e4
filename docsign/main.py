"""FastAPI application entry point for the local signing surface."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docsign.api.routes import close_all_sessions, open_session_count, router
from docsign.config import settings
from docsign.core.errors import AuthError, DocSignError
from docsign.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    settings.ensure_directories()
    yield
    close_all_sessions()
    logger.info("Application shutdown")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Capture a signature and place it on a PDF page.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.exception_handler(DocSignError)
async def docsign_exception_handler(request: Request, exc: DocSignError):
    """Render domain errors as an inline message; auth errors carry the login route."""
    payload: dict[str, object] = {"detail": exc.inline_message}
    if isinstance(exc, AuthError):
        payload["redirect"] = settings.login_route
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.inline_message)
    return JSONResponse(status_code=exc.status_code, content=payload)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "operational",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "sessions": open_session_count()}
