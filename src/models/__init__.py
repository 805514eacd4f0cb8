"""Catalog data model: the in-memory tree and its database rows."""
from src.models.database import Base, make_engine, with_db, init_db
from src.models.category import CategoryRecord
from src.models.product import ProductRecord
from src.models.tree import (
    InventoryError,
    ValidationError,
    StructuralError,
    NodeKind,
    ItemNode,
    Category,
    Product,
    create_root,
    create_category,
    create_product,
    walk,
    iter_products,
    aggregate_quantity,
    aggregate_value,
)

__all__ = [
    "Base",
    "make_engine",
    "with_db",
    "init_db",
    "CategoryRecord",
    "ProductRecord",
    "InventoryError",
    "ValidationError",
    "StructuralError",
    "NodeKind",
    "ItemNode",
    "Category",
    "Product",
    "create_root",
    "create_category",
    "create_product",
    "walk",
    "iter_products",
    "aggregate_quantity",
    "aggregate_value",
]
