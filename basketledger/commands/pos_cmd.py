"""Basket and product CLI commands."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from ..config import StoreConfig, open_engine
from ..errors import BasketLedgerError
from ..pos.engine import BasketEngine
from ..pos.models import BASKET, POSITION, PRODUCT, Basket, BasketView, Position, Product


def _engine(config: StoreConfig) -> BasketEngine:
    return open_engine(config)


def _fail(e: BasketLedgerError) -> int:
    Console(stderr=True).print(f"{type(e).__name__}: {e}", style="bold red", markup=False)
    return 1


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _print_basket(console: Console, view: BasketView) -> None:
    table = Table(title=f"Basket {view.name} (sum {view.sum:.2f})")
    table.add_column("position", style="dim", no_wrap=True)
    table.add_column("amount", justify="right")
    table.add_column("product", style="cyan")
    table.add_column("price", justify="right")
    table.add_column("total", justify="right")
    for p in view.positions:
        table.add_row(
            p.id[:12] + "…",
            str(p.amount),
            p.product.name,
            f"{p.product.price:.2f}",
            f"{p.total:.2f}",
        )
    console.print(table)
    console.print(f"basket: {view.basket_id}", style="dim")
    console.print(f"head:   {view.id}", style="dim")


def run_product_create(config: StoreConfig, name: str, price: float, description: str = "") -> int:
    try:
        address = _engine(config).create_product(Product(name=name, description=description, price=price))
    except BasketLedgerError as e:
        return _fail(e)
    print(address)
    return 0


def run_product_list(config: StoreConfig, *, output_json: bool = False) -> int:
    engine = _engine(config)
    products = engine.list_products()
    skipped = engine.metrics.last_skipped

    if output_json:
        _print_json({"products": [p.to_dict() for p in products], "skipped": skipped})
        return 0

    console = Console()
    table = Table(title="Products")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("name", style="magenta")
    table.add_column("description")
    table.add_column("price", justify="right")
    for p in products:
        table.add_row(p.id[:12] + "…", p.name, p.description, f"{p.price:.2f}")
    console.print(table)
    if skipped:
        Console(stderr=True).print(f"{skipped} product entries could not be read and were skipped", style="yellow")
    return 0


def run_basket_create(config: StoreConfig, name: str) -> int:
    try:
        address = _engine(config).create_basket(Basket(name=name))
    except BasketLedgerError as e:
        return _fail(e)
    print(address)
    return 0


def run_basket_add(
    config: StoreConfig,
    basket_addr: str,
    product_addr: str,
    amount: int,
    *,
    timestamp: str | None = None,
    output_json: bool = False,
) -> int:
    try:
        position = Position(amount=amount) if timestamp is None else Position(amount=amount, timestamp=timestamp)
        view = _engine(config).add_product(product_addr, basket_addr, position)
    except BasketLedgerError as e:
        return _fail(e)

    if output_json:
        _print_json(view.to_dict())
    else:
        _print_basket(Console(), view)
    return 0


def run_basket_show(config: StoreConfig, basket_addr: str, *, output_json: bool = False) -> int:
    try:
        view = _engine(config).get_basket(basket_addr)
    except BasketLedgerError as e:
        return _fail(e)

    if output_json:
        _print_json(view.to_dict())
    else:
        _print_basket(Console(), view)
    return 0


def run_basket_list(config: StoreConfig, *, output_json: bool = False) -> int:
    engine = _engine(config)
    baskets = engine.list_baskets()
    skipped = engine.metrics.last_skipped

    if output_json:
        _print_json({"baskets": [b.to_dict() for b in baskets], "skipped": skipped})
        return 0

    console = Console()
    table = Table(title="Baskets")
    table.add_column("basket_id", style="cyan", no_wrap=True)
    table.add_column("name", style="magenta")
    table.add_column("sum", justify="right")
    table.add_column("head", style="dim")
    for b in baskets:
        table.add_row(b.basket_id[:12] + "…", b.name, f"{b.sum:.2f}", b.id[:12] + "…")
    console.print(table)
    if skipped:
        Console(stderr=True).print(f"{skipped} basket entries could not be read and were skipped", style="yellow")
    return 0


def run_store_verify(config: StoreConfig) -> int:
    """Re-hash every stored entry; non-zero exit on any mismatch or unreadable blob."""
    console = Console()
    err = Console(stderr=True)
    engine = _engine(config)

    addresses = engine.substrate.content_addresses()
    bad = [address for address in addresses if not engine.entries.verify(address)]
    for address in bad:
        err.print(f"Integrity mismatch: {address}", style="bold red")

    table = Table(title="Store")
    table.add_column("type", style="cyan")
    table.add_column("entries", justify="right")
    for type_tag in (PRODUCT, BASKET, POSITION):
        table.add_row(type_tag, str(engine.catalog.count(type_tag)))
    console.print(table)
    console.print(
        f"{len(addresses) - len(bad)}/{len(addresses)} entries verified, {engine.substrate.size()} bytes of content"
    )
    return 1 if bad else 0
