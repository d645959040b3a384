from .cache import CacheKeys, CacheStore, RedisCache
from .cache_invalidation import CacheInvalidationService
from .computed_values import ComputedValueResolver
from .product_info import ProductInfoAssembler
from .product_store import ProductStore, ProductLookups, AgencyStock
