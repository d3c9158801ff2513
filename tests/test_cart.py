"""
Tests for cart models
"""

from decimal import Decimal

import pytest

from storefront.cart import Cart, LineItem


class TestLineItem:
    """Tests for LineItem dataclass."""

    def test_create_line_item(self):
        item = LineItem(product_id=42, amount=2, title="Tênis", price=179.9, image="shoe.jpg")

        assert item.product_id == 42
        assert item.amount == 2
        assert item.price == Decimal("179.9")

    def test_subtotal_calculation(self):
        item = LineItem(product_id=42, amount=3, price="179.90")

        # 179.90 * 3 = 539.70
        assert item.subtotal == Decimal("539.70")

    def test_to_dict(self):
        item = LineItem(product_id=42, amount=1, title="Tênis", price="179.90", image="shoe.jpg")

        assert item.to_dict() == {
            "id": 42,
            "title": "Tênis",
            "price": "179.90",
            "image": "shoe.jpg",
            "amount": 1,
        }

    def test_from_dict(self):
        item = LineItem.from_dict({"id": 42, "title": "Tênis", "price": 179.9, "image": "", "amount": 2})

        assert item.product_id == 42
        assert item.amount == 2
        assert item.price == Decimal("179.9")

    def test_from_dict_rejects_zero_amount(self):
        with pytest.raises(ValueError):
            LineItem.from_dict({"id": 42, "amount": 0})

    def test_from_dict_rejects_non_integer_fields(self):
        with pytest.raises(TypeError):
            LineItem.from_dict({"id": "42", "amount": 1})
        with pytest.raises(TypeError):
            LineItem.from_dict({"id": 42, "amount": True})

    def test_from_dict_requires_id(self):
        with pytest.raises(KeyError):
            LineItem.from_dict({"amount": 1})

    @pytest.mark.parametrize("price", ["abc", "Infinity", "NaN", "-1", None, True])
    def test_from_dict_rejects_bad_price(self, price):
        with pytest.raises((TypeError, ValueError)):
            LineItem.from_dict({"id": 42, "title": "Tênis", "price": price, "amount": 1})

    def test_from_dict_rejects_non_string_display_fields(self):
        with pytest.raises(TypeError):
            LineItem.from_dict({"id": 42, "title": None, "price": "1.00", "amount": 1})
        with pytest.raises(TypeError):
            LineItem.from_dict({"id": 42, "title": "Tênis", "price": "1.00", "image": 5, "amount": 1})

    def test_from_dict_requires_price(self):
        with pytest.raises(KeyError):
            LineItem.from_dict({"id": 42, "title": "Tênis", "amount": 1})


class TestCart:
    """Tests for Cart dataclass."""

    def test_create_empty_cart(self):
        cart = Cart()

        assert cart.size == 0
        assert cart.total_items == 0
        assert cart.total == 0

    def test_cart_with_items(self):
        cart = Cart(items=[
            LineItem(product_id=1, amount=2, price="100"),
            LineItem(product_id=2, amount=1, price="49.99"),
        ])

        assert cart.size == 2
        assert cart.total_items == 3
        assert cart.total == Decimal("249.99")

    def test_find_and_index_of(self):
        cart = Cart(items=[LineItem(product_id=1, amount=1), LineItem(product_id=2, amount=4)])

        assert cart.index_of(2) == 1
        assert cart.index_of(3) == -1
        assert cart.find(2).amount == 4
        assert cart.find(3) is None

    def test_copy_is_independent(self):
        cart = Cart(items=[LineItem(product_id=1, amount=1)])
        working = cart.copy()

        working.items[0].amount = 5
        working.items.append(LineItem(product_id=2, amount=1))

        assert cart.items[0].amount == 1
        assert cart.size == 1

    def test_cart_serialization(self):
        cart = Cart(items=[
            LineItem(product_id=7, amount=2, title="B", price="139.90", image="b.jpg"),
            LineItem(product_id=42, amount=1, title="A", price="179.90", image="a.jpg"),
        ])

        restored = Cart.from_list(cart.to_list())

        assert restored == cart
        assert [item.product_id for item in restored.items] == [7, 42]

    def test_from_list_rejects_duplicates(self):
        with pytest.raises(ValueError):
            Cart.from_list([
                {"id": 1, "title": "A", "price": "1.00", "amount": 1},
                {"id": 1, "title": "A", "price": "1.00", "amount": 2},
            ])

    def test_from_list_rejects_non_list(self):
        with pytest.raises(TypeError):
            Cart.from_list({"id": 1, "amount": 1})
