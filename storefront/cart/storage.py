"""
Persistent cache backends for the cart snapshot.

A backend is async key-value string storage that survives restarts:
- FileCache: JSON document on local disk (local storage analogue)
- RedisCache: Upstash Redis over REST
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Optional, Protocol

from upstash_redis.asyncio import Redis as AsyncRedis

from storefront.config import Settings
from storefront.errors import CartStorageError
from storefront.logging import get_logger

logger = get_logger(__name__)


class PersistentCache(Protocol):
    """Async key-value storage."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class FileCache:
    """
    Stores every key in one JSON object on disk.

    Writes go to a temporary file that replaces the original, so a crash
    mid-write leaves the previous document intact.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable cache file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def get(self, key: str) -> Optional[str]:
        try:
            data = await asyncio.to_thread(self._read_all)
        except (OSError, ValueError) as e:
            raise CartStorageError(f"Failed to read {self.path}: {e}") from e
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str) -> None:
        def _set():
            data = self._read_all()
            data[key] = value
            self._write_all(data)

        try:
            await asyncio.to_thread(_set)
        except (OSError, ValueError) as e:
            raise CartStorageError(f"Failed to write {self.path}: {e}") from e

    async def delete(self, key: str) -> None:
        def _delete():
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)

        try:
            await asyncio.to_thread(_delete)
        except (OSError, ValueError) as e:
            raise CartStorageError(f"Failed to write {self.path}: {e}") from e


class RedisCache:
    """Upstash Redis backend; keys never expire."""

    def __init__(self, redis: AsyncRedis):
        self.redis = redis

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCache":
        if not settings.use_redis:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        return cls(AsyncRedis(url=settings.redis_url, token=settings.redis_token))

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Failed to read {key} from Redis: {e}")
            raise CartStorageError(f"Redis unavailable: {e}") from e
        return value if value else None

    async def set(self, key: str, value: str) -> None:
        try:
            await self.redis.set(key, value)
        except Exception as e:
            logger.error(f"Failed to save {key} to Redis: {e}")
            raise CartStorageError(f"Redis unavailable: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete {key} from Redis: {e}")
            raise CartStorageError(f"Redis unavailable: {e}") from e


def create_cache(settings: Settings) -> PersistentCache:
    """Redis when Upstash is configured, otherwise the local JSON file."""
    if settings.use_redis:
        logger.info("Using Redis cart storage")
        return RedisCache.from_settings(settings)
    logger.info(f"Using file cart storage at {settings.storage_path}")
    return FileCache(settings.storage_path)
