# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import API_PREFIX
from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.logging_config import RequestLoggingMiddleware, setup_logging
from app.core.sessions import MemorySessionStore
from app.core.storage import Storage, build_storage_provider, get_storage, seed_defaults

from app.domains.shared.routers import router as shared_router
from app.domains.usr.routers import router as usr_router
from app.domains.fms.routers import router as fms_router

logger = logging.getLogger(__name__)


# -- application lifespan --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, storage backend, tables, seed data and the session store.
    Shutdown: dispose of the database engine when one was used.
    """
    setup_logging()
    logger.info(f"Starting {settings.APP_NAME} {settings.APP_VERSION} ({settings.APP_ENV})")

    provider = build_storage_provider(settings.STORAGE_BACKEND)
    if settings.STORAGE_BACKEND == "database":
        from app.core.database import create_db_and_tables

        await create_db_and_tables()

    if settings.SEED_DEFAULT_DATA:
        async with provider.session() as storage:
            await seed_defaults(
                storage,
                admin_username=settings.DEFAULT_ADMIN_USERNAME,
                admin_password=settings.DEFAULT_ADMIN_PASSWORD.get_secret_value(),
            )

    app.state.storage_provider = provider
    app.state.session_store = MemorySessionStore(settings.SESSION_MAX_AGE_SECONDS)

    yield

    logger.info("Shutting down")
    if settings.STORAGE_BACKEND == "database":
        from app.core.database import engine

        await engine.dispose()


# -- FastAPI application --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -- error handlers --
@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    content = {"detail": exc.message}
    if exc.errors:
        content["errors"] = jsonable_encoder(exc.errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


# -- routers --
app.include_router(usr_router, prefix=API_PREFIX)
app.include_router(fms_router, prefix=API_PREFIX)
app.include_router(shared_router)


@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."}


@app.get("/health-check", summary="Health Check", response_description="Status of the application and its storage.")
async def health_check(storage: Storage = Depends(get_storage)):
    """Runs a cheap read against the configured storage backend."""
    try:
        await storage.list_departments()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Storage health check failed",
        )
    return {"status": "ok", "storage": settings.STORAGE_BACKEND}
