"""
Query Cache

Small in-process cache for read queries, keyed by
(user id, entity, parameters) with a staleness window per entry.
Mutations invalidate a user's entries for the entity they touched.

A load that was already running when an invalidation happened may have read
rows from before the mutation, so its result is returned to its caller but
never stored.
"""

import logging
import threading
import time

from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

_MISSING = object()

DEFAULT_MAX_ENTRIES = 1024


class QueryCache:
    """Per-process cache of query results with time-based staleness."""

    def __init__(self, ttl=30, clock=time.monotonic, max_entries=DEFAULT_MAX_ENTRIES):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries = {}  # key -> (expires_at, value)
        self._lock = threading.Lock()
        self._key_locks = {}  # key -> [lock, callers holding or waiting]
        self._generations = {}  # (user_id, entity or None) -> invalidation count

    @staticmethod
    def make_key(user_id, entity, params=()):
        return (user_id, entity, tuple(params))

    def get(self, key, default=None):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key, value, ttl=None):
        ttl = self.ttl if ttl is None else ttl
        with self._lock:
            self._store(key, value, ttl)

    def _store(self, key, value, ttl):
        # Caller holds self._lock
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        if ttl <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = (now + ttl, value)
        while len(self._entries) > self.max_entries:
            soonest = min(self._entries, key=lambda k: self._entries[k][0])
            del self._entries[soonest]

    def _generation(self, key):
        # Caller holds self._lock
        user_id, entity = key[0], key[1]
        return (self._generations.get((user_id, None), 0), self._generations.get((user_id, entity), 0))

    def _acquire_key_lock(self, key):
        with self._lock:
            slot = self._key_locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        slot[0].acquire()
        return slot

    def _release_key_lock(self, key, slot):
        slot[0].release()
        with self._lock:
            slot[1] -= 1
            if slot[1] == 0 and self._key_locks.get(key) is slot:
                del self._key_locks[key]

    def get_or_load(self, key, loader, ttl=None):
        """
        Return the fresh cached value for ``key`` or call ``loader``.

        Concurrent callers asking for the same key wait on one load instead
        of each running the query. Exceptions from ``loader`` propagate and
        nothing is cached. A result is not cached if the key's user/entity
        was invalidated while ``loader`` ran.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value

        slot = self._acquire_key_lock(key)
        try:
            value = self.get(key, _MISSING)
            if value is not _MISSING:
                return value

            with self._lock:
                generation = self._generation(key)
            value = loader()
            with self._lock:
                if self._generation(key) == generation:
                    self._store(key, value, self.ttl if ttl is None else ttl)
                else:
                    logger.debug("Discarded cached load for %s: invalidated while loading", key[:2])
            return value
        finally:
            self._release_key_lock(key, slot)

    def invalidate(self, user_id, entity=None):
        """Drop a user's entries, optionally only for one entity. Returns the count."""
        with self._lock:
            marker = (user_id, entity)
            self._generations[marker] = self._generations.get(marker, 0) + 1
            doomed = [
                key for key in self._entries
                if key[0] == user_id and (entity is None or key[1] == entity)
            ]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cached %s queries for user %s", len(doomed), entity or 'all', user_id)
        return len(doomed)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def pending_loads(self):
        """Number of keys with a load in progress or waited on."""
        with self._lock:
            return len(self._key_locks)

    def __len__(self):
        return len(self._entries)


def get_query_cache():
    """The app's cache, or None outside an app context."""
    if not has_app_context():
        return None
    return current_app.extensions.get('query_cache')


def invalidate(user_id, entity=None):
    cache = get_query_cache()
    if cache is not None:
        cache.invalidate(user_id, entity)
