import hashlib
import heapq
import logging
import threading
import time
import typing
from urllib.parse import urlencode

from .envelope import RequestInfo
from .interfaces import CacheBackend

logger = logging.getLogger(__name__)


class InMemoryCacheBackend(CacheBackend):
    """
    A process-local :py:class:`CacheBackend` with per-entry lifetimes and a tag index.

    Expired entries are purged whenever a new entry is written, and an evicted
    key is removed from every tag it was filed under. All operations hold a
    lock, so handlers running in a threadpool may share one backend.
    """

    clock: typing.Callable[[], float]
    _entries: typing.Dict[str, typing.Tuple[str, float, typing.Tuple[str, ...]]]
    _tags: typing.Dict[str, typing.Set[str]]
    _expiries: typing.List[typing.Tuple[float, str]]
    _lock: threading.Lock

    def _discard(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        for tag in entry[2]:
            keys = self._tags.get(tag)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._tags[tag]
        return True

    def _evict_if_expired(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is not None and entry[1] <= self.clock():
            self._discard(key)

    def _purge(self, now: float) -> None:
        while self._expiries and self._expiries[0][0] <= now:
            _, key = heapq.heappop(self._expiries)
            entry = self._entries.get(key)
            # rewritten with a later expiry
            if entry is not None and entry[1] <= now:
                self._discard(key)

    def get(self, key: str) -> typing.Optional[str]:
        with self._lock:
            self._evict_if_expired(key)
            entry = self._entries.get(key)
            return entry[0] if entry is not None else None

    def contains(self, key: str) -> bool:
        with self._lock:
            self._evict_if_expired(key)
            return key in self._entries

    def put(self, key: str, body: str, lifetime: int, tags: typing.Iterable[str] = ()) -> bool:
        tags = tuple(tags)
        with self._lock:
            now = self.clock()
            self._purge(now)
            self._discard(key)
            expiry = now + lifetime
            self._entries[key] = (body, expiry, tags)
            heapq.heappush(self._expiries, (expiry, key))
            for tag in tags:
                self._tags.setdefault(tag, set()).add(key)
        return True

    def invalidate_tags(self, tags: typing.Iterable[str]) -> int:
        removed = 0
        with self._lock:
            for tag in tags:
                for key in list(self._tags.get(tag, ())):
                    if self._discard(key):
                        removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._entries)

    def __init__(self, clock: typing.Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries = {}
        self._tags = {}
        self._expiries = []
        self._lock = threading.Lock()


class ResponseCache:
    """
    Caches serialized response bodies by request URI.

    :param CacheBackend backend: where entries are kept.
    :param bool enabled: :py:const:`False` turns every lookup into a miss and every fill into a no-op.
    :param str skip_param: a query parameter whose mere presence bypasses the cache.
    """

    backend: CacheBackend
    enabled: bool
    skip_param: str

    def key_for(self, request: RequestInfo) -> str:
        query = urlencode(sorted(request.query_params.items()))
        return hashlib.md5((request.path + query).encode("utf-8")).hexdigest()

    def _bypassed(self, request: RequestInfo) -> bool:
        return not self.enabled or self.skip_param in request.query_params

    def inspect(self, request: RequestInfo) -> typing.Optional[str]:
        """
        Returns the cached body for ``request``, or :py:const:`None` on a miss.
        """
        if self._bypassed(request):
            return None
        key = self.key_for(request)
        body = self.backend.get(key)
        if body is not None:
            logger.info("cache hit", extra={"key": key, "path": request.path})
        return body

    def add(
        self,
        request: RequestInfo,
        body: str,
        lifetime: int,
        tags: typing.Iterable[str] = (),
    ) -> bool:
        """
        Stores ``body`` for ``request`` unless an entry already exists. Concurrent
        fills of the same key may both write; the last one wins.

        :return: :py:const:`True` when an entry was written.
        """
        if self._bypassed(request):
            return False
        key = self.key_for(request)
        if self.backend.contains(key):
            return False
        stored = self.backend.put(key, body, lifetime, tags)
        if stored:
            logger.info(
                "cache entry added",
                extra={"key": key, "size": len(body), "lifetime": lifetime, "path": request.path},
            )
        return stored

    def invalidate(self, tags: typing.Iterable[str]) -> int:
        tags = list(tags)
        removed = self.backend.invalidate_tags(tags)
        if removed:
            logger.info("invalidated %d cache entries for %s", removed, ", ".join(tags))
        return removed

    def __init__(self, backend: CacheBackend, enabled: bool = True, skip_param: str = "skipCache"):
        self.backend = backend
        self.enabled = enabled
        self.skip_param = skip_param
