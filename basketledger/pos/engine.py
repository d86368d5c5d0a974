"""
Basket engine: products, baskets and positions over the entry store.

Adding a position links it from the basket's logical identity
("positions") and links the product from the position ("product").
The basket sum is then recomputed by traversing every linked position
and stored as a new basket version; the head table is redirected to it
with compare-and-set. The sum is always recomputed from the links,
never incremented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..errors import ConcurrentUpdateConflict, DecodeError, InconsistentLink, InvalidRecord, NotFound
from ..store import Address, EntryStore, HeadTable, LinkIndex, Substrate, TypeCatalog, address_of
from .models import (
    BASKET,
    PRODUCT,
    Basket,
    BasketSummary,
    BasketView,
    Position,
    PositionView,
    Product,
    ProductView,
)

logger = logging.getLogger(__name__)

POSITIONS_TAG = "positions"
PRODUCT_TAG = "product"

DEFAULT_MAX_UPDATE_ATTEMPTS = 3


@dataclass
class ListingMetrics:
    """
    Counters for items dropped while listing.

    Listings skip entries that cannot be resolved or decoded instead of
    failing; these counters keep that observable.
    """

    listings: int = 0
    skipped_items: int = 0
    last_skipped: int = 0

    def record(self, skipped: int) -> None:
        self.listings += 1
        self.skipped_items += skipped
        self.last_skipped = skipped

    def to_dict(self) -> dict[str, Any]:
        return {
            "listings": self.listings,
            "skipped_items": self.skipped_items,
            "last_skipped": self.last_skipped,
        }


def basket_total(positions: list[PositionView]) -> float:
    """Sum of amount * price over positions, in link order."""
    total = 0.0
    for position in positions:
        total += position.total
    return total


class BasketEngine:
    """Operations exposed to the invocation layer."""

    def __init__(self, substrate: Substrate, *, max_update_attempts: int = DEFAULT_MAX_UPDATE_ATTEMPTS):
        if max_update_attempts < 1:
            raise ValueError("max_update_attempts must be at least 1")
        self.substrate = substrate
        self.entries = EntryStore(substrate)
        self.links = LinkIndex(substrate)
        self.catalog = TypeCatalog(substrate)
        self.heads = HeadTable(substrate)
        self.max_update_attempts = max_update_attempts
        self.metrics = ListingMetrics()

    # --- writes ---

    def create_product(self, product: Product) -> Address:
        address = self.entries.put_record(product)
        logger.info(f"Created product {product.name!r} at {address}")
        return address

    def create_basket(self, basket: Basket) -> Address:
        """
        Store a new basket; its address is the basket's identity and first head.

        Raises:
            InvalidRecord: opening sum is not zero, or origin is set
        """
        if basket.sum != 0:
            raise InvalidRecord(f"a new basket starts empty; got sum {basket.sum}")
        if basket.origin is not None:
            raise InvalidRecord("a new basket cannot name an origin")
        address = self.entries.put_record(basket)
        self.heads.register(address)
        logger.info(f"Created basket {basket.name!r} at {address}")
        return address

    def add_product(self, product_addr: Address, basket_addr: Address, position: Position) -> BasketView:
        """
        Add a position for a product to a basket.

        Args:
            product_addr: Address of the product
            basket_addr: Address of the basket (identity or any version)
            position: The line item

        Returns:
            The basket view after the add

        Raises:
            NotFound: basket or product does not exist
            DecodeError: an address holds a different kind of entry
            InconsistentLink: the position is already linked to another product
            ConcurrentUpdateConflict: the head kept moving while recomputing
        """
        basket_id = self._basket_identity(basket_addr)
        self.entries.get_typed(product_addr, Product)
        position_addr = address_of(Position.type_tag, position.to_payload())
        self.heads.register(basket_id)

        with self.heads.lock(basket_id):
            linked = self.links.links_from(position_addr, PRODUCT_TAG)
            if any(target != product_addr for target in linked):
                raise InconsistentLink(
                    position_addr,
                    PRODUCT_TAG,
                    len(set(linked) | {product_addr}),
                    detail="position is already linked to a different product",
                )

            self.entries.put_record(position)
            self.links.link(basket_id, position_addr, POSITIONS_TAG)
            self.links.link(position_addr, product_addr, PRODUCT_TAG, unique=True)
            view = self._recompute(basket_id)

        logger.info(f"Added {position.amount} x {product_addr[:12]} to basket {basket_id[:12]}; sum={view.sum}")
        return view

    def _recompute(self, basket_id: Address) -> BasketView:
        """Store a new basket version whose sum is derived from all positions."""
        for attempt in range(1, self.max_update_attempts + 1):
            head, current = self._current(basket_id)
            positions = self._positions(basket_id)
            version = Basket(name=current.name, sum=basket_total(positions), origin=basket_id)
            new_head = self.entries.put_record(version)
            if self.heads.advance(basket_id, head, new_head):
                return BasketView(
                    id=new_head,
                    basket_id=basket_id,
                    name=version.name,
                    sum=version.sum,
                    positions=positions,
                )
            logger.warning(
                f"Head of basket {basket_id[:12]} moved during update (attempt {attempt}/{self.max_update_attempts})"
            )
        raise ConcurrentUpdateConflict(basket_id, self.max_update_attempts)

    # --- reads ---

    def get_basket(self, basket_addr: Address) -> BasketView:
        """
        Resolve a basket to its current version with all positions.

        Raises:
            NotFound: the basket or a linked position/product is missing
            DecodeError: a linked entry has the wrong shape
            InconsistentLink: a position does not have exactly one product
        """
        basket_id = self._basket_identity(basket_addr)
        head, basket = self._current(basket_id)
        return BasketView(
            id=head,
            basket_id=basket_id,
            name=basket.name,
            sum=basket.sum,
            positions=self._positions(basket_id),
        )

    def get_product(self, product_addr: Address) -> ProductView:
        return ProductView.of(product_addr, self.entries.get_typed(product_addr, Product))

    def list_products(self) -> list[ProductView]:
        """All distinct products; undecodable entries are skipped and counted."""
        result: list[ProductView] = []
        skipped = 0
        for address in self.catalog.all_of_type(PRODUCT):
            try:
                result.append(self.get_product(address))
            except (NotFound, DecodeError) as e:
                skipped += 1
                logger.warning(f"Skipping product {address}: {e}")
        self.metrics.record(skipped)
        return result

    def list_baskets(self) -> list[BasketSummary]:
        """
        One row per logical basket, showing its current version.

        Superseded versions are folded into their basket's row.
        """
        result: list[BasketSummary] = []
        seen: set[Address] = set()
        skipped = 0
        for address in self.catalog.all_of_type(BASKET):
            try:
                basket_id = self.heads.resolve(address)
                if basket_id is None:
                    basket_id = self.entries.get_typed(address, Basket).origin or address
                if basket_id in seen:
                    continue
                seen.add(basket_id)
                head = self.heads.current(basket_id) or basket_id
                basket = self.entries.get_typed(head, Basket)
            except (NotFound, DecodeError) as e:
                skipped += 1
                logger.warning(f"Skipping basket {address}: {e}")
                continue
            result.append(BasketSummary(id=head, basket_id=basket_id, name=basket.name, sum=basket.sum))
        self.metrics.record(skipped)
        return result

    # --- helpers ---

    def _basket_identity(self, address: Address) -> Address:
        """
        Logical id for any basket address. Never writes.

        A basket stored without a head record (put directly, not through
        create_basket) is its own identity until add_product registers it.
        """
        basket_id = self.heads.resolve(address)
        if basket_id is not None:
            return basket_id
        basket = self.entries.get_typed(address, Basket)
        return basket.origin or address

    def _current(self, basket_id: Address) -> tuple[Address, Basket]:
        head = self.heads.current(basket_id) or basket_id
        return head, self.entries.get_typed(head, Basket)

    def _positions(self, basket_id: Address) -> list[PositionView]:
        views: list[PositionView] = []
        for position_addr in self.links.links_from(basket_id, POSITIONS_TAG):
            position = self.entries.get_typed(position_addr, Position)
            products = self.links.links_from(position_addr, PRODUCT_TAG)
            if len(products) != 1:
                raise InconsistentLink(position_addr, PRODUCT_TAG, len(products))
            views.append(
                PositionView(
                    id=position_addr,
                    amount=position.amount,
                    timestamp=position.timestamp,
                    product=self.get_product(products[0]),
                )
            )
        return views
