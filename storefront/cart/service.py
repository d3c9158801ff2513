"""Cart store: stock-checked mutations over a persisted cart."""
import asyncio
import json
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Protocol, Tuple

from storefront.config import DEFAULT_STORAGE_KEY, Settings, load_settings
from storefront.errors import (
    ERROR_ADD_PRODUCT,
    ERROR_REMOVE_PRODUCT,
    ERROR_UPDATE_AMOUNT,
    CartErrorKind,
    CartStorageError,
    StoreApiError,
    message_for,
)
from storefront.logging import get_logger
from storefront.models import ProductRecord, StockRecord
from storefront.services.money import to_float
from storefront.services.notifications import LogNotifier, Notifier, create_notifier
from storefront.services.store_api import StoreApiClient
from .models import Cart, LineItem
from .storage import PersistentCache, create_cache

logger = get_logger(__name__)

Snapshot = Tuple[LineItem, ...]
Subscriber = Callable[[Snapshot], None]


class StockOracle(Protocol):
    async def fetch_stock(self, product_id: int) -> StockRecord: ...


class ProductCatalog(Protocol):
    async def fetch_product(self, product_id: int) -> ProductRecord: ...


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart mutation."""
    ok: bool
    cart: Snapshot
    error: Optional[CartErrorKind] = None
    message: str = ""


def _snapshot(cart: Cart) -> Snapshot:
    return tuple(replace(item) for item in cart.items)


class CartStore:
    """
    Owns the cart and every change made to it.

    Each mutation checks the stock oracle where needed, writes the full
    snapshot to the persistent cache, and only then swaps in the new state
    and publishes it to subscribers. A rejected mutation leaves both the
    in-memory and persisted cart untouched and reports through the notifier;
    nothing is raised to the caller.

    Mutations are serialized with a lock, so the read-check-write sequence of
    one call never interleaves with another call on the same store. Two
    stores sharing one cache key (separate processes) can still race.
    """

    def __init__(
        self,
        stock_oracle: StockOracle,
        catalog: ProductCatalog,
        cache: PersistentCache,
        notifier: Optional[Notifier] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ):
        self.stock_oracle = stock_oracle
        self.catalog = catalog
        self.cache = cache
        self.notifier = notifier or LogNotifier()
        self.storage_key = storage_key
        self._cart = Cart()
        self._subscribers: List[Subscriber] = []
        self._lock = asyncio.Lock()

    @classmethod
    async def load(
        cls,
        stock_oracle: StockOracle,
        catalog: ProductCatalog,
        cache: PersistentCache,
        notifier: Optional[Notifier] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
    ) -> "CartStore":
        """Create a store initialized from the persisted snapshot."""
        store = cls(stock_oracle, catalog, cache, notifier=notifier, storage_key=storage_key)
        await store.reload()
        return store

    async def reload(self) -> None:
        """Replace in-memory state with the persisted snapshot (empty if absent or malformed)."""
        try:
            data = await self.cache.get(self.storage_key)
        except CartStorageError as e:
            logger.error(f"Cart storage unreadable, starting empty: {e}")
            self._cart = Cart()
            return

        if not data:
            self._cart = Cart()
            return

        try:
            self._cart = Cart.from_list(json.loads(data))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Corrupted snapshot - clear it and start empty
            logger.warning(f"Corrupted cart snapshot under {self.storage_key!r}: {e}")
            self._cart = Cart()
            try:
                await self.cache.delete(self.storage_key)
            except CartStorageError as delete_error:
                logger.error(f"Failed to clear corrupted cart snapshot: {delete_error}")

    @property
    def cart(self) -> Snapshot:
        """Read-only snapshot of the current line items."""
        return _snapshot(self._cart)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call `callback` with the new snapshot after every committed mutation."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_item(self, product_id: int) -> CartResult:
        """Add one unit of the product, fetching its display record on first add."""
        async with self._lock:
            try:
                stock = await self.stock_oracle.fetch_stock(product_id)
            except StoreApiError as e:
                return self._fail(e.kind, ERROR_ADD_PRODUCT, str(e))

            if stock.amount < 1:
                return self._fail(
                    CartErrorKind.STOCK_UNAVAILABLE, ERROR_ADD_PRODUCT, f"product {product_id} is out of stock"
                )

            working = self._cart.copy()
            existing = working.find(product_id)
            amount = (existing.amount if existing else 0) + 1

            if amount > stock.amount:
                return self._fail(
                    CartErrorKind.STOCK_EXCEEDED,
                    ERROR_ADD_PRODUCT,
                    f"product {product_id}: requested {amount}, available {stock.amount}",
                )

            if existing is None:
                try:
                    product = await self.catalog.fetch_product(product_id)
                except StoreApiError as e:
                    return self._fail(e.kind, ERROR_ADD_PRODUCT, str(e))
                working.items.append(
                    LineItem(
                        product_id=product_id,
                        amount=amount,
                        title=product.title,
                        price=product.price,
                        image=product.image,
                    )
                )
            else:
                existing.amount = amount

            return await self._commit(working, ERROR_ADD_PRODUCT)

    async def remove_item(self, product_id: int) -> CartResult:
        """Take one unit of the product out; the line goes away with its last unit."""
        async with self._lock:
            working = self._cart.copy()
            index = working.index_of(product_id)
            if index == -1:
                return self._fail(
                    CartErrorKind.ITEM_NOT_IN_CART, ERROR_REMOVE_PRODUCT, f"product {product_id} not in cart"
                )

            if working.items[index].amount == 1:
                del working.items[index]
            else:
                working.items[index].amount -= 1

            return await self._commit(working, ERROR_REMOVE_PRODUCT)

    async def set_amount(self, product_id: int, amount: int) -> CartResult:
        """Set the product's amount to exactly `amount`."""
        async with self._lock:
            if amount < 1:
                return self._fail(CartErrorKind.INVALID_AMOUNT, ERROR_UPDATE_AMOUNT, f"amount {amount}")

            working = self._cart.copy()
            item = working.find(product_id)
            if item is None:
                return self._fail(
                    CartErrorKind.ITEM_NOT_IN_CART, ERROR_UPDATE_AMOUNT, f"product {product_id} not in cart"
                )

            try:
                stock = await self.stock_oracle.fetch_stock(product_id)
            except StoreApiError as e:
                return self._fail(e.kind, ERROR_UPDATE_AMOUNT, str(e))

            if stock.amount - amount < 0:
                return self._fail(
                    CartErrorKind.STOCK_EXCEEDED,
                    ERROR_UPDATE_AMOUNT,
                    f"product {product_id}: requested {amount}, available {stock.amount}",
                )

            item.amount = amount
            return await self._commit(working, ERROR_UPDATE_AMOUNT)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _commit(self, working: Cart, operation_message: str) -> CartResult:
        try:
            await self.cache.set(self.storage_key, json.dumps(working.to_list()))
        except CartStorageError as e:
            return self._fail(CartErrorKind.STORAGE_UNAVAILABLE, operation_message, str(e))

        self._cart = working
        snapshot = self.cart
        self._publish(snapshot)
        return CartResult(ok=True, cart=snapshot)

    def _publish(self, snapshot: Snapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Cart subscriber failed")

    def _fail(self, kind: CartErrorKind, operation_message: str, detail: str) -> CartResult:
        message = message_for(kind, operation_message)
        logger.warning(f"Cart mutation rejected ({kind.value}): {detail}")
        try:
            self.notifier.notify(message)
        except Exception:
            logger.exception("Cart notifier failed")
        return CartResult(ok=False, cart=self.cart, error=kind, message=message)

    def summary(self) -> dict:
        """Cart summary for display (header badge and cart page totals)."""
        cart = self._cart
        if not cart.items:
            return {
                "is_empty": True,
                "size": 0,
                "total_items": 0,
                "items": [],
                "total": 0.0,
            }

        return {
            "is_empty": False,
            "size": cart.size,
            "total_items": cart.total_items,
            "items": [
                {
                    "product_id": item.product_id,
                    "title": item.title,
                    "amount": item.amount,
                    "unit_price": to_float(item.price),
                    "subtotal": to_float(item.subtotal),
                }
                for item in cart.items
            ],
            "total": to_float(cart.total),
        }


async def open_cart_store(
    settings: Optional[Settings] = None,
    notifier: Optional[Notifier] = None,
) -> Tuple[CartStore, StoreApiClient]:
    """
    Build a store wired to the configured API, cache and notifier.

    Returns the store and its API client; close the client when done.
    """
    settings = settings or load_settings()
    client = StoreApiClient.from_settings(settings)
    try:
        store = await CartStore.load(
            stock_oracle=client,
            catalog=client,
            cache=create_cache(settings),
            notifier=notifier or create_notifier(settings),
            storage_key=settings.storage_key,
        )
    except Exception:
        await client.close()
        raise
    return store, client
