"""
CaseDesk Legal - Main Application Entry Point

REST backend for legal practice management: accounts, cases, clients,
documents and tasks.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import settings
from src.database import connection, init_db, close_db
from src.errors import AppError, UnclassifiedError
from src.rate_limit import RateLimitMiddleware
from src.request_logging import RequestLoggingMiddleware
from src.routes.auth_routes import router as auth_router
from src.routes.user_routes import router as user_router
from src.routes.case_routes import router as case_router
from src.routes.client_routes import router as client_router
from src.routes.document_routes import router as document_router
from src.routes.task_routes import router as task_router

logger = logging.getLogger(__name__)


# =============================================================================
# STARTUP & SHUTDOWN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the database on startup and release it on shutdown."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    await init_db()

    print(f"""
    ==============================================================
    CaseDesk Legal is starting...

    Version: {settings.APP_VERSION}
    Port: {settings.PORT}
    Database: {connection.safe_url}
    ==============================================================
    """)

    yield

    await close_db()
    print("\nCaseDesk Legal is shutting down...\n")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# Middleware (the last one added runs first)
app.add_middleware(RateLimitMiddleware)
if settings.LOG_REQUESTS:
    app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(case_router)
app.include_router(client_router)
app.include_router(document_router)
app.include_router(task_router)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Validation error", "error": "VALIDATION_ERROR", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("%s %s failed with an unhandled error", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=UnclassifiedError("Internal server error").to_dict())


# =============================================================================
# ROUTES
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "database": connection.state.value,
    }


# =============================================================================
# RUN (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "src.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
