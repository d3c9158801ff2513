"""Pytest configuration and fixtures"""
from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from storefront.cart import CartStore
from storefront.errors import CartErrorKind, CartStorageError, StoreApiError
from storefront.models import ProductRecord, StockRecord
from storefront.services.notifications import CollectingNotifier


class FakeStockOracle:
    """Stock levels keyed by product id; unknown ids are 404s."""

    def __init__(self, stock: Optional[Dict[int, int]] = None):
        self.stock = dict(stock or {})
        self.calls: List[int] = []
        self.error: Optional[StoreApiError] = None

    async def fetch_stock(self, product_id: int) -> StockRecord:
        self.calls.append(product_id)
        if self.error is not None:
            raise self.error
        if product_id not in self.stock:
            raise StoreApiError(CartErrorKind.PRODUCT_NOT_FOUND, f"stock/{product_id} not found", 404)
        return StockRecord(id=product_id, amount=self.stock[product_id])


class FakeCatalog:
    def __init__(self, products: Optional[Dict[int, ProductRecord]] = None):
        self.products = dict(products or {})
        self.calls: List[int] = []
        self.error: Optional[StoreApiError] = None

    async def fetch_product(self, product_id: int) -> ProductRecord:
        self.calls.append(product_id)
        if self.error is not None:
            raise self.error
        if product_id not in self.products:
            raise StoreApiError(CartErrorKind.PRODUCT_NOT_FOUND, f"products/{product_id} not found", 404)
        return self.products[product_id]


class MemoryCache:
    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data = dict(data or {})
        self.writes: List[str] = []
        self.fail_writes = False

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise CartStorageError("disk full")
        self.writes.append(value)
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


def make_product(product_id: int, title: str = "Running shoe", price: str = "179.90") -> ProductRecord:
    return ProductRecord(
        id=product_id,
        title=title,
        price=Decimal(price),
        image=f"https://cdn.example.com/{product_id}.jpg",
    )


@pytest.fixture
def stock_oracle():
    return FakeStockOracle({42: 5, 7: 3, 99: 0})


@pytest.fixture
def catalog():
    return FakeCatalog({
        42: make_product(42, "Tênis de Caminhada Leve Confortável", "179.90"),
        7: make_product(7, "Tênis VR Caminhada Confortável", "139.90"),
        99: make_product(99, "Sold out shoe", "99.90"),
    })


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def store(stock_oracle, catalog, cache, notifier):
    """Store with an empty persisted cart."""
    return CartStore(stock_oracle, catalog, cache, notifier=notifier)
