"""API routes for inspecting the shared exercise cache."""

from collections import Counter

from fastapi import APIRouter, Depends

from backend.api.deps import get_cache_store
from backend.api.schemas import CacheOverviewResponse
from backend.cache.base import CacheStore

router = APIRouter(prefix="/api/cache", tags=["cache"])


@router.get("/overview", response_model=CacheOverviewResponse)
async def cache_overview(cache: CacheStore = Depends(get_cache_store)) -> CacheOverviewResponse:
    """Entry counts per cache key and per exercise type."""
    counts = await cache.counts()
    by_type: Counter[str] = Counter()
    for key, count in counts.items():
        by_type[key.split(":", 1)[0]] += count
    return CacheOverviewResponse(
        total_cached_exercises=sum(counts.values()),
        by_type=dict(by_type),
        keys=counts,
    )
