"""
Cache utilities for Spread Pick'em application
Provides caching decorators and helper functions for the score services
"""

import functools

from flask import current_app

from pickem import cache


def make_cache_key(prefix, func_name, *args, **kwargs):
    """Generate a cache key from function name and arguments"""
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"query_{prefix}_{func_name}_{args_str}_{kwargs_str}"


def cached_query(model_name, timeout=300):
    """
    Decorator for caching service results

    Args:
        model_name: Name used as the cache key prefix
        timeout: Cache timeout in seconds
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = make_cache_key(model_name, f.__name__, *args, **kwargs)

            # Try to get from cache
            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Query cache hit: {cache_key}")
                return result

            # Execute query and cache result
            result = f(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            current_app.logger.debug(f"Query cache set: {cache_key}")

            return result

        return wrapped

    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate cache keys matching a pattern

    Args:
        pattern: Pattern to match cache keys
    """
    try:
        # SimpleCache cannot delete by pattern, so clear everything
        cache.clear()
        current_app.logger.info(f"Cache cleared for pattern: {pattern}")
    except Exception as e:
        current_app.logger.error(f"Failed to clear cache: {e}")


def invalidate_model_cache(model_name):
    """
    Invalidate all cache entries for a specific model

    Args:
        model_name: Name of the model to invalidate
    """
    invalidate_cache_pattern(f"*{model_name}*")
