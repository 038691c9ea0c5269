"""Product detail cache.

Product detail payloads are cached per product id on top of Django's cache
framework. Writes that can stale a payload call :meth:`ProductCache.invalidate`:

- product create, update and delete
- review create, update and delete (rating aggregates change)

``invalidate()`` with no id drops every cached product by bumping a
generation number that is part of each key, so it works on any backend.
"""

import logging

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


class ProductCache:
    key_prefix = 'product-detail'

    def __init__(self, backend=None, timeout=None):
        self.backend = backend if backend is not None else caches['default']
        self.timeout = timeout if timeout is not None else settings.PRODUCT_CACHE_TTL

    def _generation(self):
        return self.backend.get_or_set(f'{self.key_prefix}:generation', 1, timeout=None)

    def _key(self, product_id):
        return f'{self.key_prefix}:{self._generation()}:{product_id}'

    def get(self, product_id):
        return self.backend.get(self._key(product_id))

    def set(self, product_id, data):
        self.backend.set(self._key(product_id), data, timeout=self.timeout)

    def invalidate(self, product_id=None):
        """Drop one cached product, or all of them when ``product_id`` is None.

        Failures are logged and swallowed: a stale cache entry expires with
        its TTL and must never fail the write that triggered the invalidation.
        """
        try:
            if product_id is None:
                generation_key = f'{self.key_prefix}:generation'
                try:
                    self.backend.incr(generation_key)
                except ValueError:
                    self.backend.set(generation_key, 2, timeout=None)
                logger.debug("Product cache cleared")
            else:
                self.backend.delete(self._key(product_id))
                logger.debug("Product cache invalidated for %s", product_id)
        except Exception:
            logger.exception("Product cache invalidation failed for %s", product_id or 'all products')


_product_cache = None


def get_product_cache() -> ProductCache:
    """Return the process-wide product cache."""
    global _product_cache
    if _product_cache is None:
        _product_cache = ProductCache()
    return _product_cache


class ProductCacheMixin:
    """Gives a view ``self.product_cache``.

    Set ``product_cache`` on the view class to swap in another instance.
    """

    product_cache = None

    def get_product_cache(self) -> ProductCache:
        return self.product_cache or get_product_cache()
