"""
Point-of-sale records and the views assembled from them.

Product, Basket and Position are stored entries. The *View classes are
computed on read and never stored.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from ..errors import InvalidRecord

PRODUCT = "product"
BASKET = "basket"
POSITION = "position"


def _require_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise TypeError(f"expected an object payload, got {type(payload).__name__}")
    return payload


def _coerce_number(value: Any, field_name: str) -> float:
    """Numbers and numeric strings become float; bools and NaN are rejected."""
    if isinstance(value, bool):
        raise InvalidRecord(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise InvalidRecord(f"{field_name} must be a number, got {value!r}") from None
    else:
        raise InvalidRecord(f"{field_name} must be a number, got {type(value).__name__}")
    if not math.isfinite(number):
        raise InvalidRecord(f"{field_name} must be finite, got {value!r}")
    return number


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Product:
    """Something offered for sale."""

    type_tag: ClassVar[str] = PRODUCT

    name: str
    description: str
    price: float

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidRecord("product name must be a non-empty string")
        if not isinstance(self.description, str):
            raise InvalidRecord("product description must be a string")
        price = _coerce_number(self.price, "price")
        if price < 0:
            raise InvalidRecord(f"price must not be negative, got {price}")
        object.__setattr__(self, "price", price)

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "price": self.price}

    @classmethod
    def from_payload(cls, payload: Any) -> Product:
        data = _require_dict(payload)
        return cls(name=data["name"], description=data.get("description", ""), price=data["price"])


@dataclass(frozen=True)
class Basket:
    """
    One version of a customer basket.

    sum is a cached aggregate. Versions written after an add carry origin,
    the address of the basket as first created.
    """

    type_tag: ClassVar[str] = BASKET

    name: str
    sum: float = 0.0
    origin: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise InvalidRecord("basket name must be a string")
        object.__setattr__(self, "sum", _coerce_number(self.sum, "sum"))
        if self.origin is not None and not isinstance(self.origin, str):
            raise InvalidRecord("basket origin must be an address")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "sum": self.sum}
        if self.origin is not None:
            payload["origin"] = self.origin
        return payload

    @classmethod
    def from_payload(cls, payload: Any) -> Basket:
        data = _require_dict(payload)
        return cls(name=data["name"], sum=data["sum"], origin=data.get("origin"))


@dataclass(frozen=True)
class Position:
    """One line item: an amount of the product it links to."""

    type_tag: ClassVar[str] = POSITION

    amount: int
    timestamp: str = field(default_factory=_now_iso)

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise InvalidRecord(f"amount must be an integer, got {self.amount!r}")
        if self.amount < 1:
            raise InvalidRecord(f"amount must be at least 1, got {self.amount}")
        if not isinstance(self.timestamp, str):
            raise InvalidRecord("timestamp must be a string")

    def to_payload(self) -> dict[str, Any]:
        return {"amount": self.amount, "timestamp": self.timestamp}

    @classmethod
    def from_payload(cls, payload: Any) -> Position:
        data = _require_dict(payload)
        return cls(amount=data["amount"], timestamp=data.get("timestamp", ""))


# -----------------------------------------------------------------------------
# Views (computed on read)
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ProductView:
    id: str
    name: str
    description: str
    price: float

    @classmethod
    def of(cls, address: str, product: Product) -> ProductView:
        return cls(id=address, name=product.name, description=product.description, price=product.price)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description, "price": self.price}


@dataclass(frozen=True)
class PositionView:
    id: str
    amount: int
    timestamp: str
    product: ProductView

    @property
    def total(self) -> float:
        return self.amount * self.product.price

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "timestamp": self.timestamp,
            "product": self.product.to_dict(),
        }


@dataclass(frozen=True)
class BasketView:
    """
    Fully resolved basket: current version plus every linked position.

    id is the current head; basket_id is the stable identity.
    """

    id: str
    basket_id: str
    name: str
    sum: float
    positions: list[PositionView] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "basket_id": self.basket_id,
            "name": self.name,
            "sum": self.sum,
            "positions": [p.to_dict() for p in self.positions],
        }


@dataclass(frozen=True)
class BasketSummary:
    id: str
    basket_id: str
    name: str
    sum: float

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "basket_id": self.basket_id, "name": self.name, "sum": self.sum}
