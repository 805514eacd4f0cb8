"""Shared fixtures: isolated SQLite stores and a small sample inventory."""
from typing import Generator

import pytest

from src.models.tree import Category, Product, create_category, create_root
from src.services.catalog import InventoryCatalog


@pytest.fixture
def db_url(tmp_path) -> str:
    """URL of a SQLite file that does not exist yet."""
    return f"sqlite:///{tmp_path / 'inventory.db'}"


@pytest.fixture
def sample_tree() -> Category:
    """All Products > Electronics (Laptop, Mouse), Hardware (Drill, Power Tools > Saw)."""
    root = create_root("All Products")
    electronics = create_category("Electronics")
    hardware = create_category("Hardware")
    power_tools = create_category("Power Tools")
    root.add_child(electronics)
    root.add_child(hardware)

    electronics.add_child(Product("Laptop", 8, 1200, "A1"))
    electronics.add_child(Product("Mouse", 25, 20, "A2"))
    hardware.add_child(Product("Drill", 4, 90, "C2", threshold_override=6))
    hardware.add_child(power_tools)
    power_tools.add_child(Product("Saw", 2, 150.5))
    return root


@pytest.fixture
def catalog(db_url) -> Generator[InventoryCatalog, None, None]:
    cat = InventoryCatalog(database_url=db_url)
    yield cat
    cat.close()


def snapshot(node):
    """Order-insensitive description of a subtree, for round-trip comparisons."""
    if isinstance(node, Product):
        return (
            "product",
            node.name,
            node.quantity,
            node.price,
            node.location,
            node.alert_threshold_override,
        )
    return ("category", node.name, sorted((snapshot(c) for c in node.children), key=repr))


@pytest.fixture
def tree_snapshot():
    return snapshot
