"""Repositories persisted as one JSON blob in Redis.

Every identity table (pairs, tickers, alerts, categories...) lives in memory
while the service runs. Mutations are synchronous and mark the repository
dirty; ``save()`` writes the whole table back under its store key, guarded by
a per-store version counter so a process never overwrites a newer copy.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from redis.exceptions import WatchError

from tickersync.core.redis import get_redis, store_key


logger = logging.getLogger(__name__)

V = TypeVar("V")


class BlobStore:
    """Whole-table JSON persistence under one Redis key."""

    store: str = ""

    def __init__(self, redis=None):
        self.redis = redis
        self._dirty = False
        self._version = 0
        self._lock = asyncio.Lock()

    async def _get_redis(self):
        """Get Redis connection."""
        if self.redis is None:
            self.redis = await get_redis()
        return self.redis

    @property
    def key(self) -> str:
        return store_key(self.store)

    @property
    def version_key(self) -> str:
        """Counter bumped on every write, shared by every process using the store."""
        return f"{self.key}:version"

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def version(self) -> int:
        return self._version

    def _touch(self):
        self._dirty = True

    def _serialize(self) -> Any:
        raise NotImplementedError

    def _deserialize(self, raw: Any):
        raise NotImplementedError

    def _reset(self):
        """Drop in-memory contents."""
        raise NotImplementedError

    async def load(self):
        """Replace in-memory contents with the persisted blob."""
        redis = await self._get_redis()
        async with self._lock:
            blob, version = await redis.mget(self.key, self.version_key)
            self._reset()
            if blob:
                try:
                    self._deserialize(json.loads(blob))
                except (json.JSONDecodeError, TypeError, ValueError) as e:
                    logger.error(f"Corrupt {self.store} store, starting empty: {e}")
                    self._reset()
            self._version = int(version or 0)
            self._dirty = False
        logger.debug(f"Loaded {self.store} store (version {self._version})")

    async def persisted_version(self) -> int:
        redis = await self._get_redis()
        return int(await redis.get(self.version_key) or 0)

    async def refresh(self) -> bool:
        """
        Reload when another process wrote the store since our last load/save.

        Dirty stores are left alone; their pending changes go through save().

        Returns:
            True when the store was reloaded
        """
        if self._dirty:
            return False
        if await self.persisted_version() == self._version:
            return False
        await self.load()
        return True

    async def save(self, force: bool = False) -> bool:
        """
        Persist when dirty. Returns whether a write happened.

        The write only lands if nobody else wrote the store since we loaded
        it. On a conflict the persisted copy wins: local changes are dropped
        and the store is reloaded.
        """
        if not self._dirty and not force:
            return False
        redis = await self._get_redis()
        async with self._lock:
            blob = json.dumps(self._serialize())
            try:
                async with redis.pipeline(transaction=True) as pipe:
                    await pipe.watch(self.version_key)
                    current = int(await pipe.get(self.version_key) or 0)
                    if current != self._version:
                        raise WatchError(f"version {current}, loaded {self._version}")
                    pipe.multi()
                    pipe.set(self.key, blob)
                    pipe.incr(self.version_key)
                    _, version = await pipe.execute()
            except WatchError as e:
                conflict = str(e)
            else:
                self._version = int(version)
                self._dirty = False
                logger.debug(f"Saved {self.store} store (version {self._version})")
                return True

        logger.warning(f"{self.store} store changed underneath us ({conflict}); reloading")
        await self.load()
        return False


class MapRepository(BlobStore, Generic[V]):
    """Flat string-keyed map."""

    def __init__(self, redis=None):
        super().__init__(redis)
        self._data: Dict[str, V] = {}

    def _encode_value(self, value: V) -> Any:
        return value

    def _decode_value(self, key: str, raw: Any) -> V:
        return raw

    def _serialize(self) -> Dict[str, Any]:
        return {k: self._encode_value(v) for k, v in self._data.items()}

    def _deserialize(self, raw: Dict[str, Any]):
        if not isinstance(raw, dict):
            raise ValueError(f"{self.store} store must be a JSON object")
        for k, v in raw.items():
            try:
                self._data[k] = self._decode_value(k, v)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed {self.store} entry {k!r}: {e}")
        self._on_reload()

    def _reset(self):
        self._data = {}
        self._on_reload()

    def _on_reload(self):
        """Rebuild derived indexes after the map was replaced."""
        pass

    def get(self, key: str) -> Optional[V]:
        return self._data.get(key)

    def has(self, key: str) -> bool:
        return key in self._data

    def set(self, key: str, value: V):
        self._data[key] = value
        self._touch()

    def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        self._touch()
        return True

    def clear(self):
        self._reset()
        self._touch()

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def items(self) -> List[Tuple[str, V]]:
        return list(self._data.items())

    def values(self) -> List[V]:
        return list(self._data.values())

    def size(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)
