from __future__ import annotations

import pytest

from basketledger.errors import InvalidRecord
from basketledger.pos import Basket, Position, PositionView, Product, ProductView


def test_product_price_is_normalised_to_float() -> None:
    assert Product("A", "", 5).price == 5.0
    assert Product("A", "", " 5.31 ").price == 5.31
    assert Product("A", "", 5) == Product("A", "", "5.0")


@pytest.mark.parametrize("price", [True, "cheap", None, float("inf"), -1])
def test_product_rejects_bad_prices(price: object) -> None:
    with pytest.raises(InvalidRecord):
        Product("A", "", price)  # type: ignore[arg-type]


def test_product_requires_a_name() -> None:
    with pytest.raises(InvalidRecord):
        Product("  ", "", 1)


@pytest.mark.parametrize("amount", [0, -2, 1.5, "3", True])
def test_position_rejects_bad_amounts(amount: object) -> None:
    with pytest.raises(InvalidRecord):
        Position(amount=amount)  # type: ignore[arg-type]


def test_position_timestamp_defaults_to_now() -> None:
    first = Position(amount=1)
    assert first.timestamp.endswith("+00:00")
    assert Position(amount=1, timestamp="t").to_payload() == {"amount": 1, "timestamp": "t"}


def test_basket_payload_omits_missing_origin() -> None:
    assert Basket(name="cart").to_payload() == {"name": "cart", "sum": 0.0}
    assert Basket(name="cart", sum=3, origin="x").to_payload() == {"name": "cart", "sum": 3.0, "origin": "x"}
    assert Basket.from_payload({"name": "cart", "sum": 3, "origin": "x"}) == Basket("cart", 3.0, "x")


def test_position_view_total() -> None:
    product = ProductView(id="p", name="A", description="", price=2.5)
    view = PositionView(id="x", amount=4, timestamp="t", product=product)
    assert view.total == 10.0
    assert view.to_dict()["product"] == {"id": "p", "name": "A", "description": "", "price": 2.5}
