import dataclasses
import hashlib
import json
import logging
import ssl

import redis

from storefront.core.config import settings
from storefront.schemas.product import ProductListResponse
from storefront.services.listing import ListingQuery

logger = logging.getLogger(__name__)

CACHE_PREFIX = "product_listing:"


def get_cache_key(query: ListingQuery) -> str:
    """Generate a cache key from the normalized listing query."""
    cache_str = json.dumps(dataclasses.asdict(query), sort_keys=True, default=str)
    cache_hash = hashlib.md5(cache_str.encode()).hexdigest()
    return f"{CACHE_PREFIX}{cache_hash}"


def get_redis_client() -> redis.Redis | None:
    """Get a Redis client for caching, or None when caching is not configured."""
    if not settings.REDIS_URL:
        return None
    try:
        if settings.REDIS_URL.startswith("rediss"):
            return redis.from_url(settings.REDIS_URL, ssl_cert_reqs=ssl.CERT_NONE)
        return redis.from_url(settings.REDIS_URL)
    except Exception as e:
        logger.warning(f"Failed to create Redis client for caching: {e}")
        return None


def get_cached_listing(redis_client: redis.Redis, query: ListingQuery) -> ProductListResponse | None:
    cache_key = get_cache_key(query)
    try:
        cached_result = redis_client.get(cache_key)
    except Exception as e:
        logger.warning(f"Cache read error: {e}")
        return None
    if not cached_result:
        return None

    logger.info(f"Cache hit for key: {cache_key}")
    try:
        return ProductListResponse.model_validate_json(cached_result)
    except ValueError as e:
        logger.warning(f"Discarding unreadable cache entry {cache_key}: {e}")
        return None


def cache_listing(redis_client: redis.Redis, query: ListingQuery, response: ProductListResponse) -> None:
    cache_key = get_cache_key(query)
    try:
        redis_client.setex(cache_key, settings.LISTING_CACHE_TTL, response.model_dump_json(by_alias=True))
        logger.info(f"Cached result for key: {cache_key}")
    except Exception as e:
        logger.warning(f"Cache write error: {e}")


def invalidate_listing_cache() -> None:
    """Invalidate all cached listings when products or categories are modified."""
    redis_client = get_redis_client()
    if redis_client is None:
        return
    try:
        keys = list(redis_client.scan_iter(match=f"{CACHE_PREFIX}*"))
        if keys:
            redis_client.delete(*keys)
            logger.info(f"Invalidated {len(keys)} listing cache entries")
    except Exception as e:
        logger.warning(f"Cache invalidation error: {e}")
    finally:
        redis_client.close()
