"""
Caching utilities for expensive list queries.
Uses the configured Django cache (Redis via django-redis in production).

List responses are stored under keys that embed a version number per
namespace. Writes bump the version instead of deleting keys, so stale
entries simply age out.
"""
from django.core.cache import cache
from django.db import transaction
import hashlib
import logging

logger = logging.getLogger(__name__)

ITEMS_LIST_NAMESPACE = 'items_list'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def get_cache_version(namespace):
    version = cache.get(f"{namespace}:version")
    if version is None:
        version = 1
        cache.set(f"{namespace}:version", version, None)
    return version


def bump_cache_version(namespace):
    """Invalidate every cached entry of a namespace"""
    try:
        version = cache.incr(f"{namespace}:version")
    except ValueError:
        version = 2
        cache.set(f"{namespace}:version", version, None)
    logger.debug(f"Cache version for {namespace} bumped to {version}")
    return version


def bump_cache_version_on_commit(namespace):
    """
    Bump the version once the current transaction commits, so a list read
    during the write cannot be cached under the new version with old rows.
    Outside a transaction the bump runs immediately.
    """
    transaction.on_commit(lambda: bump_cache_version(namespace))


def versioned_cache_key(namespace, params):
    return make_cache_key(namespace, get_cache_version(namespace), sorted(params.items()))

