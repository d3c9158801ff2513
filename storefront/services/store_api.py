"""Store API client - stock availability and product display records.

One client serves both collaborators of the cart:
- StockOracle: GET stock/{id} -> {"id", "amount"}
- ProductCatalog: GET products/{id} -> {"id", "title", "price", "image"}

Lookups are single attempts: a failure surfaces immediately as StoreApiError.
"""

import httpx
from pydantic import ValidationError

from storefront.config import Settings
from storefront.errors import CartErrorKind, StoreApiError
from storefront.logging import get_logger
from storefront.models import ProductRecord, StockRecord

logger = get_logger(__name__)


class StoreApiClient:
    """Async client for the storefront REST API."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreApiClient":
        return cls(settings.store_api_url, timeout=settings.store_api_timeout)

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_json(self, path: str) -> object:
        client = await self._get_http_client()
        try:
            response = await client.get(path)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout requesting {path}: {e}")
            raise StoreApiError(CartErrorKind.PRODUCT_LOOKUP_FAILED, f"Timeout requesting {path}") from e
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise StoreApiError(CartErrorKind.PRODUCT_LOOKUP_FAILED, f"Request to {path} failed: {e}") from e

        if response.status_code == 404:
            raise StoreApiError(CartErrorKind.PRODUCT_NOT_FOUND, f"{path} not found", status_code=404)
        if response.status_code != 200:
            logger.warning(f"Store API returned {response.status_code} for {path}")
            raise StoreApiError(
                CartErrorKind.PRODUCT_LOOKUP_FAILED,
                f"Store API returned {response.status_code} for {path}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise StoreApiError(
                CartErrorKind.PRODUCT_LOOKUP_FAILED, f"Invalid JSON from {path}", status_code=200
            ) from e

    async def fetch_stock(self, product_id: int) -> StockRecord:
        """Units of the product currently available."""
        data = await self._get_json(f"stock/{product_id}")
        try:
            return StockRecord.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed stock record for product {product_id}: {e}")
            raise StoreApiError(
                CartErrorKind.PRODUCT_LOOKUP_FAILED, f"Malformed stock record for product {product_id}"
            ) from e

    async def fetch_product(self, product_id: int) -> ProductRecord:
        """Display record of the product."""
        data = await self._get_json(f"products/{product_id}")
        try:
            return ProductRecord.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed product record for product {product_id}: {e}")
            raise StoreApiError(
                CartErrorKind.PRODUCT_LOOKUP_FAILED, f"Malformed product record for product {product_id}"
            ) from e
