"""
Pydantic Models - Store API records

Responses of the store API are validated here before they reach the cart.
"""

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field


class StockRecord(BaseModel):
    """`GET stock/{id}` response."""
    id: int | None = None
    amount: int = Field(..., description="Units available right now")


class ProductRecord(BaseModel):
    """`GET products/{id}` response: display fields copied into the cart."""
    id: int
    title: str = Field(..., validation_alias=AliasChoices("title", "name"))
    price: Decimal = Field(..., ge=0)
    image: str = ""
