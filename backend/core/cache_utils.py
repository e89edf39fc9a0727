"""
Caching utilities for list queries
Uses Redis when configured (django-redis), the default cache backend otherwise
"""
from django.conf import settings
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

SWEETS_LIST_PREFIX = "sweets_list"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern.

    django-redis exposes `delete_pattern` (SCAN + DEL); backends without
    pattern support are cleared entirely.
    """
    try:
        if hasattr(cache, 'delete_pattern'):
            deleted = cache.delete_pattern(f"*{pattern}*")
            logger.debug(f"Invalidated {deleted} cache keys matching pattern: {pattern}")
        else:
            cache.clear()
            logger.debug(f"Cleared cache for pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def get_cached_sweets_list(filters_dict):
    """
    Get cached sweets list for the given filters
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = make_cache_key(SWEETS_LIST_PREFIX, **filters_dict)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache HIT for {SWEETS_LIST_PREFIX}: {cache_key}")
    return cached_data, cache_key


def cache_sweets_list(cache_key, data, ttl=None):
    """Cache sweets list data"""
    if ttl is None:
        ttl = getattr(settings, 'SWEETS_LIST_CACHE_TTL', 120)
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached sweets list: {cache_key}")


def invalidate_sweets_cache():
    """Invalidate all sweets-list cache entries"""
    invalidate_cache_pattern(SWEETS_LIST_PREFIX)
