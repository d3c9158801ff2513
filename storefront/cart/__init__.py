"""Cart package: models, storage, and store facade."""
from .models import LineItem, Cart
from .service import CartResult, CartStore, open_cart_store
from .storage import FileCache, PersistentCache, RedisCache, create_cache

__all__ = [
    "LineItem",
    "Cart",
    "CartResult",
    "CartStore",
    "open_cart_store",
    "FileCache",
    "PersistentCache",
    "RedisCache",
    "create_cache",
]
