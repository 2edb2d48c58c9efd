"""FastAPI dependencies for the shared services.

Each getter returns a process-wide instance; tests swap them out through
``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from acquisition.orchestrator import ExerciseOrchestrator
from acquisition.progress import InMemoryProgressStore
from backend.cache.base import CacheStore
from backend.config import Settings, settings
from backend.database import create_cache_store
from backend.errors import AcquisitionError, ErrorKind
from backend.worksheets import WorksheetBank, get_worksheet_bank
from generation.generator import ExerciseGenerator
from generation.providers import default_registry

# Status code per error kind; generation-side kinds share one generic message
ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.REQUEST_VALIDATION: 400,
    ErrorKind.MISSING_CREDENTIAL: 400,
    ErrorKind.AUTH_REQUIRED: 401,
    ErrorKind.PROVIDER: 500,
    ErrorKind.INVALID_JSON: 500,
    ErrorKind.SCHEMA_VIOLATION: 500,
    ErrorKind.GENERATION_FAILED: 500,
}

GENERATION_FAILED_MESSAGE = "Failed to generate exercises"


def http_error(error: AcquisitionError) -> HTTPException:
    """Map an acquisition error to the HTTP error the client sees."""
    status_code = ERROR_STATUS[error.kind]
    detail = GENERATION_FAILED_MESSAGE if status_code >= 500 else error.message
    return HTTPException(status_code=status_code, detail=detail)


def get_settings() -> Settings:
    return settings


@lru_cache
def get_cache_store() -> CacheStore:
    return create_cache_store(settings)


@lru_cache
def get_progress_store() -> InMemoryProgressStore:
    return InMemoryProgressStore()


def get_bank() -> WorksheetBank:
    return get_worksheet_bank()


@lru_cache
def get_generator() -> ExerciseGenerator:
    return ExerciseGenerator(default_registry(settings))


def get_orchestrator(
    cache: CacheStore = Depends(get_cache_store),
    generator: ExerciseGenerator = Depends(get_generator),
    config: Settings = Depends(get_settings),
) -> ExerciseOrchestrator:
    return ExerciseOrchestrator(cache, generator, config)


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    """The signed-in learner, if the session layer identified one."""
    return x_user_id or None


async def require_user_id(user_id: str | None = Depends(get_current_user_id)) -> str:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id
