"""Dedup cache for sent message ids."""

from msgdispatch.cache.dedup import DedupCache, DedupCacheError, RedisDedupCache

__all__ = ["DedupCache", "DedupCacheError", "RedisDedupCache"]
