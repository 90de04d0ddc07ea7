"""
Cache helpers for catalog fragments.

Derived data (product groups, the RGB lookup table) lives in the
`fragments` alias when it is configured, otherwise in the default cache.
Groups of keys are invalidated together through a generation counter.
"""
from django.core.cache import cache, caches
from django.core.cache.backends.base import InvalidCacheBackendError


def get_cache(alias='default'):
    if alias in ('default', None):
        return cache
    try:
        return caches[alias]
    except InvalidCacheBackendError:
        return cache


def get_fragment_cache():
    return get_cache('fragments')


def get_generation(key, cache_backend=None):
    """Current generation stored under `key`; 0 until first bumped."""
    cache_backend = cache_backend or get_fragment_cache()
    return cache_backend.get(key, 0)


def bump_generation(key, cache_backend=None):
    """
    Move `key` to the next generation so every key built from the old one
    is ignored. The counter never expires.
    """
    cache_backend = cache_backend or get_fragment_cache()
    cache_backend.add(key, 0, None)
    try:
        return cache_backend.incr(key)
    except ValueError:
        # Evicted between add() and incr().
        cache_backend.set(key, 1, None)
        return 1
