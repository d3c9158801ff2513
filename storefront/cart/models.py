"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from storefront.services.money import to_decimal, round_money, multiply


def _parse_price(value) -> Decimal:
    """Snapshot price as a finite, non-negative Decimal."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"price must be a number or numeric string, got {value!r}")
    try:
        price = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"price is not a number: {value!r}") from e
    if not price.is_finite() or price < 0:
        raise ValueError(f"price must be finite and non-negative, got {value!r}")
    return price


@dataclass
class LineItem:
    """Single product entry in the cart."""
    product_id: int
    amount: int
    title: str = ""
    price: Decimal = Decimal("0")
    image: str = ""

    def __post_init__(self):
        self.price = to_decimal(self.price)

    @property
    def subtotal(self) -> Decimal:
        """Price for all units of this line."""
        return round_money(multiply(self.price, self.amount))

    def to_dict(self) -> dict:
        """Convert to the snapshot representation."""
        return {
            "id": self.product_id,
            "title": self.title,
            "price": str(self.price),
            "image": self.image,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """
        Create from a snapshot entry.

        Raises:
            KeyError, TypeError, ValueError: entry is malformed
        """
        product_id = data["id"]
        amount = data["amount"]
        if isinstance(product_id, bool) or not isinstance(product_id, int):
            raise TypeError(f"product id must be an integer, got {product_id!r}")
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TypeError(f"amount must be an integer, got {amount!r}")
        if amount < 1:
            raise ValueError(f"amount must be positive, got {amount}")
        title = data["title"]
        image = data.get("image", "")
        if not isinstance(title, str):
            raise TypeError(f"title must be a string, got {title!r}")
        if not isinstance(image, str):
            raise TypeError(f"image must be a string, got {image!r}")
        return cls(
            product_id=product_id,
            amount=amount,
            title=title,
            price=_parse_price(data["price"]),
            image=image,
        )


@dataclass
class Cart:
    """Ordered line items, unique by product id."""
    items: List[LineItem] = field(default_factory=list)

    def index_of(self, product_id: int) -> int:
        """Position of the product's line, or -1."""
        for index, item in enumerate(self.items):
            if item.product_id == product_id:
                return index
        return -1

    def find(self, product_id: int) -> Optional[LineItem]:
        index = self.index_of(product_id)
        return self.items[index] if index != -1 else None

    def copy(self) -> "Cart":
        """Working copy whose line items can be mutated independently."""
        return Cart(items=[replace(item) for item in self.items])

    @property
    def size(self) -> int:
        """Number of distinct products."""
        return len(self.items)

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(item.amount for item in self.items)

    @property
    def total(self) -> Decimal:
        return round_money(sum((item.subtotal for item in self.items), Decimal("0")))

    def to_list(self) -> list:
        """Convert to the snapshot representation (JSON array of line items)."""
        return [item.to_dict() for item in self.items]

    @classmethod
    def from_list(cls, data: list) -> "Cart":
        """
        Create from a snapshot.

        Raises:
            KeyError, TypeError, ValueError: snapshot is malformed
        """
        if not isinstance(data, list):
            raise TypeError(f"cart snapshot must be a list, got {type(data).__name__}")
        items = [LineItem.from_dict(entry) for entry in data]
        seen = set()
        for item in items:
            if item.product_id in seen:
                raise ValueError(f"duplicate product {item.product_id} in snapshot")
            seen.add(item.product_id)
        return cls(items=items)
