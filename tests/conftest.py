"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from basketledger.config import StoreConfig
from basketledger.pos import Basket, BasketEngine, Product
from basketledger.store import FileSubstrate, MemorySubstrate


@pytest.fixture
def substrate() -> MemorySubstrate:
    return MemorySubstrate()


@pytest.fixture
def engine(substrate: MemorySubstrate) -> BasketEngine:
    return BasketEngine(substrate)


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    return tmp_path / ".basketledger"


@pytest.fixture
def file_engine(store_dir: Path) -> BasketEngine:
    return BasketEngine(FileSubstrate(store_dir))


@pytest.fixture
def store_config(store_dir: Path) -> StoreConfig:
    return StoreConfig(store_dir=store_dir)


@pytest.fixture
def product_a() -> Product:
    return Product(name="A", description="first product", price=10.0)


@pytest.fixture
def product_b() -> Product:
    return Product(name="B", description="second product", price=5.0)


@pytest.fixture
def cart() -> Basket:
    return Basket(name="cart", sum=0)
