"""
Redis memo for feed snapshots

A snapshot is a JSON document (freshness token, timestamp, total and
response body) kept for a few seconds so bursts of identical polls do not
each hit the database. The cache is optional: when Redis is disabled or
failing, reads miss and writes are dropped.
"""

import hashlib
import json
from datetime import datetime, timedelta
from typing import Any, Optional, Union

import redis.asyncio as redis
import structlog

from config import settings

logger = structlog.get_logger(__name__)

DATETIME_TAG = "$datetime"


def _encode_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return {DATETIME_TAG: obj.isoformat()}
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


def _decode_hook(obj: dict) -> Any:
    if len(obj) == 1 and DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[DATETIME_TAG])
    return obj


def encode_snapshot(value: Any) -> bytes:
    """JSON-encode a snapshot; datetimes keep their offset"""
    return json.dumps(value, default=_encode_default, separators=(",", ":")).encode("utf-8")


def decode_snapshot(data: Union[bytes, str]) -> Any:
    return json.loads(data, object_hook=_decode_hook)


class SnapshotCache:
    """
    Short-lived snapshot storage in Redis.

    Keys are ``jobfeed:<namespace>:<sha1 of fingerprint>`` so arbitrary
    query fingerprints map to fixed-length keys.
    """

    KEY_PREFIX = "jobfeed"

    def __init__(self) -> None:
        self._client: Optional[redis.Redis] = None

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def initialize(self, redis_url: Optional[str] = None) -> None:
        url = redis_url or settings.redis.cache_url
        self._client = redis.from_url(url)
        logger.info("Snapshot cache configured", url=url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def key_for(self, fingerprint: str, namespace: str = "feed") -> str:
        digest = hashlib.sha1(fingerprint.encode("utf-8")).hexdigest()
        return f"{self.KEY_PREFIX}:{namespace}:{digest}"

    async def get(self, fingerprint: str, namespace: str = "feed") -> Optional[Any]:
        """Cached snapshot, or None on miss or any cache failure"""
        if self._client is None:
            return None

        key = self.key_for(fingerprint, namespace)
        try:
            data = await self._client.get(key)
        except redis.RedisError as e:
            logger.warning("Snapshot read failed", key=key, error=str(e))
            return None
        if data is None:
            return None

        try:
            return decode_snapshot(data)
        except ValueError as e:
            logger.warning("Discarding unreadable snapshot", key=key, error=str(e))
            return None

    async def set(
        self,
        fingerprint: str,
        value: Any,
        ttl: Union[int, timedelta],
        namespace: str = "feed",
    ) -> bool:
        """Store a snapshot for ``ttl``; returns False when it was not stored"""
        if self._client is None:
            return False

        key = self.key_for(fingerprint, namespace)
        seconds = int(ttl.total_seconds()) if isinstance(ttl, timedelta) else int(ttl)
        if seconds <= 0:
            return False

        try:
            await self._client.set(key, encode_snapshot(value), ex=seconds)
        except (TypeError, ValueError) as e:
            logger.warning("Snapshot not serializable", key=key, error=str(e))
            return False
        except redis.RedisError as e:
            logger.warning("Snapshot write failed", key=key, error=str(e))
            return False
        return True

    async def health_check(self) -> dict:
        if self._client is None:
            return {"healthy": False, "error": "Cache not initialized"}
        try:
            await self._client.ping()
        except redis.RedisError as e:
            return {"healthy": False, "error": str(e)}
        return {"healthy": True}


# Shared instance
snapshot_cache = SnapshotCache()
