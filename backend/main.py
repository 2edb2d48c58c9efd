"""FastAPI application entry point and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.api.answer_router import router as answer_router
from backend.api.cache_router import router as cache_router
from backend.api.deps import GENERATION_FAILED_MESSAGE
from backend.api.exercise_router import router as exercise_router
from backend.api.progress_router import router as progress_router
from backend.config import settings
from backend.database import async_session, engine, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create cache tables on startup when the SQL backend is selected."""
    if settings.cache_backend == "sql":
        await init_db()
    logger.info("Starting %s with %s cache backend", settings.app_name, settings.cache_backend)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Croatian grammar exercises from static worksheets, a shared cache, or LLM generation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(exercise_router)
app.include_router(answer_router)
app.include_router(progress_router)
app.include_router(cache_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %d validation errors", request.method, request.url.path, len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Errors are reported as {"error": message}
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": GENERATION_FAILED_MESSAGE})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Return status, checking database connectivity when the SQL cache is in use."""
    if settings.cache_backend == "sql":
        async with async_session() as session:
            await session.execute(text("SELECT 1"))
    return {"status": "ok"}
