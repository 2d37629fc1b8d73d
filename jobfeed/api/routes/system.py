"""System API Routes"""

from fastapi import APIRouter

from config import settings
from jobfeed.core.cache import snapshot_cache
from jobfeed.core.database import db_manager
from jobfeed.discovery.tiers import get_registry
from jobfeed.orchestration.scheduler import feed_scheduler

router = APIRouter()


@router.get("/health")
async def health_check():
    """Component health; the cache is optional and does not fail the check"""
    db_health = await db_manager.health_check()
    if settings.redis.enabled:
        cache_health = await snapshot_cache.health_check()
    else:
        cache_health = {"healthy": False, "error": "Cache disabled"}
    scheduler_status = await feed_scheduler.get_status()

    return {
        "healthy": db_health.get("healthy", False),
        "components": {
            "database": db_health,
            "cache": cache_health,
            "scheduler": scheduler_status,
        },
    }


@router.get("/config")
async def get_config():
    """Non-sensitive runtime configuration"""
    return {
        "app_name": settings.app_name,
        "app_env": settings.app_env,
        "sources": {
            "timeout_seconds": settings.sources.timeout_seconds,
            "batch_size": settings.sources.batch_size,
            "greenhouse_cap": settings.sources.greenhouse_cap,
            "workable_cap": settings.sources.workable_cap,
        },
        "mixer": {
            "tier1_ratio": settings.mixer.tier1_ratio,
            "tier2_ratio": settings.mixer.tier2_ratio,
            "tier3_ratio": settings.mixer.tier3_ratio,
            "recent_window_hours": settings.mixer.recent_window_hours,
        },
        "feed": {
            "default_limit": settings.feed.default_limit,
            "max_limit": settings.feed.max_limit,
            "cache_max_age": settings.feed.cache_max_age,
        },
        "scrape": {
            "default_limit": settings.scrape.default_limit,
            "max_limit": settings.scrape.max_limit,
            "max_inserts": settings.scrape.max_inserts,
            "schedule_enabled": settings.scrape.schedule_enabled,
            "schedule_minutes": settings.scrape.schedule_minutes,
        },
    }


@router.get("/sources")
async def list_sources():
    """Configured job boards grouped by tier"""
    registry = get_registry()
    pollable = {s.name for s in registry.pollable_sources()}

    return {
        "total": len(registry.sources),
        "pollable": len(pollable),
        "tiers": {
            str(tier): len(registry.companies(tier)) for tier in (1, 2)
        },
        "sources": [
            {
                "name": s.name,
                "kind": s.kind,
                "tier": s.tier,
                "token": s.token,
                "pollable": s.name in pollable,
            }
            for s in registry.sources
        ],
    }
