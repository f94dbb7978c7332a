import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from audit.interfaces.routes import router as audit_router
from auth.interfaces.routes import router as auth_router
from comments.interfaces.routes import router as comments_router
from documents.interfaces.routes import router as documents_router
from revisions.interfaces.routes import router as revisions_router
from shared.config import settings
from shared.exceptions import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from shared.infrastructure.database import engine, init_models
from shared.infrastructure.redis import close_redis_pool
from shared.logging import configure_logging
from timeline.interfaces.routes import activity_router
from timeline.interfaces.routes import router as timeline_router
from versions.interfaces.routes import router as versions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    if settings.AUTO_CREATE_TABLES:
        await init_models()
    yield
    await engine.dispose()
    await close_redis_pool()


app = FastAPI(
    title="DocFlow",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(documents_router)
app.include_router(versions_router)
app.include_router(revisions_router)
app.include_router(timeline_router)
app.include_router(comments_router)
app.include_router(activity_router)
app.include_router(audit_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(AuthenticationError)
async def auth_error_handler(request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(AuthorizationError)
async def forbidden_handler(request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(StorageUnavailableError)
async def storage_error_handler(request, exc: StorageUnavailableError):
    logger.error("Storage unavailable: %s", exc.message)
    return JSONResponse(status_code=503, content={"detail": exc.message})


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.get("/health")
async def health_check():
    return {"status": "ok"}
