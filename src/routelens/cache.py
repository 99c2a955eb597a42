"""
Caching of per-file classification facts.

Uses diskcache for SQLite-based persistent caching. Cache failures are
never fatal: a failing get is a miss and a failing set is dropped.
"""

import hashlib
import json
from typing import Any, Optional

from diskcache import Cache

from .logging_config import get_logger

logger = get_logger(__name__)


class ClassificationCache:
    """
    SQLite-based cache for file classification facts.

    Features:
    - Content-addressed keys (identical text classifies identically)
    - TTL-based expiration
    - Thread-safe operations
    """

    def __init__(
        self,
        cache_dir: str = ".routelens/cache",
        ttl_hours: int = 24,
        enabled: bool = True,
        config_hash: str = "",
    ):
        """
        Initialize cache.

        Args:
            cache_dir: Directory for cache storage
            ttl_hours: Time-to-live in hours
            enabled: Whether caching is enabled
            config_hash: Hash of the settings that affect classification
        """
        self.enabled = enabled
        self.ttl_seconds = ttl_hours * 3600
        self.config_hash = config_hash

        if self.enabled:
            self.cache = Cache(cache_dir)
            logger.debug(f"Cache initialized at {cache_dir} with TTL={ttl_hours}h")
        else:
            self.cache = None
            logger.debug("Cache disabled")

    def key_for(self, content: str, kind: str, family: str) -> str:
        """
        Generate cache key from file content and classification inputs.

        Args:
            content: File text
            kind: Route kind value ("" for non-convention files)
            family: Router family value

        Returns:
            Cache key string
        """
        digest = hashlib.sha256()
        for part in (kind, family, self.config_hash):
            digest.update(part.encode())
            digest.update(b"\0")
        digest.update(content.encode("utf-8", errors="surrogatepass"))
        return digest.hexdigest()

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found/expired
        """
        if not self.enabled or self.cache is None:
            return None

        try:
            value = self.cache.get(key)
            if value is not None:
                logger.debug(f"Cache hit: {key[:16]}...")
            return value
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.set(key, value, expire=self.ttl_seconds)
            logger.debug(f"Cache set: {key[:16]}...")
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def clear(self) -> None:
        """Clear all cache entries."""
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.clear()
            logger.info("Cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear failed: {e}")

    def stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        if not self.enabled or self.cache is None:
            return {"enabled": False}

        try:
            return {
                "enabled": True,
                "size": len(self.cache),
                "directory": self.cache.directory,
                "volume": self.cache.volume(),
            }
        except Exception as e:
            logger.warning(f"Cache stats failed: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()


def compute_config_hash(config: dict) -> str:
    """
    Compute hash of configuration for cache invalidation.

    Args:
        config: Configuration dictionary

    Returns:
        SHA256 hash of configuration
    """
    config_str = json.dumps(config, sort_keys=True)
    return hashlib.sha256(config_str.encode()).hexdigest()[:16]
