# cache_utils.py
#
# Purpose:
# A small in-memory TTL cache for narrative (LLM) results, so the same
# repository is not sent to the model again within the time-to-live.
#
# Notes:
# - Entries live only as long as the process. Nothing is written to disk.
# - Expired entries are not evicted in the background. get() ignores them,
#   set() replaces them, and prune() removes them when a caller asks.
# - The clock is injectable, so tests can move time forward.
# - There is no locking. Concurrent writers for one key: last write wins.

import time
from dataclasses import dataclass

import config


@dataclass
class CacheEntry:
    key: str
    payload: object
    created_at: float


def make_cache_key(kind, owner, name):
    """
    Cache key for one narrative artifact of one repository, e.g.
    "summary:octocat/hello-world".
    """
    return f"{kind}:{owner}/{name}"


class ResponseCache:
    """Key -> CacheEntry map with a fixed time-to-live."""

    def __init__(self, ttl_seconds=None, clock=time.time):
        self.ttl_seconds = config.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return self.get_entry(key) is not None

    def is_fresh(self, entry):
        return self._clock() - entry.created_at < self.ttl_seconds

    def get_entry(self, key):
        """The entry for key, or None if missing or older than the TTL."""
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def get(self, key, default=None):
        entry = self.get_entry(key)
        if entry is None:
            return default
        return entry.payload

    def set(self, key, payload):
        entry = CacheEntry(key=key, payload=payload, created_at=self._clock())
        self._entries[key] = entry
        return entry

    def prune(self):
        """Drop every expired entry. Returns how many were removed."""
        stale = [key for key, entry in self._entries.items() if not self.is_fresh(entry)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self):
        self._entries.clear()
