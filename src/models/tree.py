"""Inventory tree - categories own ordered children, products are the leaves.

Category totals are never stored: ``quantity`` and ``value`` walk the
subtree on every read, so they cannot go stale after a descendant changes.
"""
from __future__ import annotations

import enum
import math
import weakref
from typing import Iterator, Optional

from config import LOCATION_PLACEHOLDER, MAX_PRICE, MAX_QUANTITY


class InventoryError(Exception):
    """Base class for all catalog errors."""


class ValidationError(InventoryError, ValueError):
    """Raised when a name, quantity, price or threshold is out of bounds."""


class StructuralError(InventoryError):
    """Raised when an operation would break the shape of the tree."""


class NodeKind(str, enum.Enum):
    CATEGORY = "category"
    PRODUCT = "product"


# ----------------------------------------------------------------------
# Field validation
# ----------------------------------------------------------------------

def validate_name(name) -> str:
    """Return the trimmed name, or raise if it is missing or blank."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name cannot be empty")
    return name.strip()


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"Quantity must be a whole number, got {quantity!r}")
    if quantity < 0:
        raise ValidationError("Quantity cannot be negative")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"Quantity too large (max {MAX_QUANTITY})")
    return quantity


def validate_price(price) -> float:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise ValidationError(f"Price must be a number, got {price!r}")
    if math.isnan(price):
        raise ValidationError("Price must be a number, got NaN")
    if price < 0:
        raise ValidationError("Price cannot be negative")
    if price > MAX_PRICE:
        raise ValidationError(f"Price too large (max {MAX_PRICE:,.0f})")
    return float(price)


def validate_threshold(threshold) -> Optional[int]:
    """``None`` clears the override; anything else must be a non-negative int."""
    if threshold is None:
        return None
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise ValidationError(f"Threshold must be a whole number, got {threshold!r}")
    if threshold < 0:
        raise ValidationError("Threshold cannot be negative")
    return threshold


def normalize_location(location) -> str:
    if location is None or not str(location).strip():
        return LOCATION_PLACEHOLDER
    return str(location).strip()


# ----------------------------------------------------------------------
# Nodes
# ----------------------------------------------------------------------

class ItemNode:
    """Fields shared by categories and products."""

    kind: NodeKind

    def __init__(self, name: str):
        self._name = validate_name(name)
        self._parent_ref: weakref.ref | None = None
        # Change bus of the live catalog this node belongs to, if any
        self._bus = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Optional["Category"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_root(self) -> bool:
        return False

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.PRODUCT

    @property
    def quantity(self) -> int:
        raise NotImplementedError

    @property
    def value(self) -> float:
        raise NotImplementedError

    def rename(self, new_name: str) -> None:
        self._name = validate_name(new_name)

    def get_ancestors(self) -> list["Category"]:
        """Return list from root down to (but not including) self."""
        ancestors = []
        node = self.parent
        while node is not None:
            ancestors.append(node)
            node = node.parent
        ancestors.reverse()
        return ancestors

    def get_path(self) -> str:
        """Return breadcrumb path like 'All Products > Hardware > Drill'."""
        parts = [a.name for a in self.get_ancestors()]
        parts.append(self.name)
        return " > ".join(parts)


class Category(ItemNode):
    kind = NodeKind.CATEGORY

    def __init__(self, name: str, *, root: bool = False):
        super().__init__(name)
        self._children: list[ItemNode] = []
        self._is_root = root

    @property
    def is_root(self) -> bool:
        return self._is_root

    @property
    def children(self) -> tuple[ItemNode, ...]:
        return tuple(self._children)

    @property
    def child_count(self) -> int:
        return len(self._children)

    @property
    def quantity(self) -> int:
        return aggregate_quantity(self)

    @property
    def value(self) -> float:
        return aggregate_value(self)

    def rename(self, new_name: str) -> None:
        if self._is_root:
            raise StructuralError("root is unrenameable")
        super().rename(new_name)

    def child_at(self, index: int) -> ItemNode:
        return self._children[index]

    def add_child(self, child: ItemNode) -> None:
        """Append *child*; it must not already belong to a category."""
        if not isinstance(child, ItemNode):
            raise TypeError(f"Expected a Category or Product, got {type(child).__name__}")
        if child.is_root:
            raise StructuralError("root cannot be placed under another category")
        if any(c is child for c in self._children):
            raise StructuralError(f"{child.name!r} is already in {self.name!r}")
        if child.parent is not None:
            raise StructuralError(
                f"{child.name!r} already belongs to {child.parent.name!r}"
            )
        node: Optional[ItemNode] = self
        while node is not None:
            if node is child:
                raise StructuralError(f"{child.name!r} cannot be placed inside itself")
            node = node.parent

        self._children.append(child)
        child._parent_ref = weakref.ref(self)
        bind_bus(child, self._bus)

    def remove_child(self, child: ItemNode) -> bool:
        """Detach *child* and its whole subtree. Returns False if absent."""
        for i, existing in enumerate(self._children):
            if existing is child:
                del self._children[i]
                child._parent_ref = None
                bind_bus(child, None)
                return True
        return False

    def __repr__(self) -> str:
        return f"<Category name={self.name!r} children={len(self._children)}>"


class Product(ItemNode):
    kind = NodeKind.PRODUCT

    def __init__(
        self,
        name: str,
        quantity: int,
        price: float,
        location: Optional[str] = None,
        threshold_override: Optional[int] = None,
    ):
        # Validate every field before anything is assigned
        quantity = validate_quantity(quantity)
        price = validate_price(price)
        threshold_override = validate_threshold(threshold_override)
        super().__init__(name)
        self._quantity = quantity
        self._price = price
        self._location = normalize_location(location)
        self._threshold_override = threshold_override

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def price(self) -> float:
        return self._price

    @property
    def value(self) -> float:
        return self._price

    @property
    def location(self) -> str:
        return self._location

    @property
    def alert_threshold_override(self) -> Optional[int]:
        return self._threshold_override

    def set_quantity(self, quantity: int) -> None:
        """Change stock level and notify the catalog's listeners."""
        self._quantity = validate_quantity(quantity)
        if self._bus is not None:
            self._bus.notify(self)

    def set_price(self, price: float) -> None:
        self._price = validate_price(price)

    def set_location(self, location: Optional[str]) -> None:
        self._location = normalize_location(location)

    def set_threshold_override(self, threshold: Optional[int]) -> None:
        self._threshold_override = validate_threshold(threshold)

    def add_child(self, child: ItemNode) -> None:
        raise StructuralError("leaf has no children")

    def remove_child(self, child: ItemNode) -> bool:
        raise StructuralError("leaf has no children")

    def child_at(self, index: int) -> ItemNode:
        raise StructuralError("leaf has no children")

    def __repr__(self) -> str:
        return (
            f"<Product name={self.name!r} qty={self._quantity} "
            f"price={self._price} loc={self._location!r}>"
        )


# ----------------------------------------------------------------------
# Construction
# ----------------------------------------------------------------------

def create_root(name: str) -> Category:
    return Category(name, root=True)


def create_category(name: str) -> Category:
    return Category(name)


def create_product(
    name: str,
    quantity: int,
    price: float,
    location: Optional[str] = None,
    threshold_override: Optional[int] = None,
) -> Product:
    return Product(name, quantity, price, location, threshold_override)


# ----------------------------------------------------------------------
# Traversal and aggregation
# ----------------------------------------------------------------------

def walk(node: ItemNode) -> Iterator[ItemNode]:
    """Yield *node* and every descendant, depth-first, in child order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if current.kind is NodeKind.CATEGORY:
            stack.extend(reversed(current._children))


def iter_products(node: ItemNode) -> Iterator[Product]:
    for item in walk(node):
        if item.kind is NodeKind.PRODUCT:
            yield item


def aggregate_quantity(node: ItemNode) -> int:
    """Total units held under *node* (a product's own quantity for a leaf)."""
    return sum(p.quantity for p in iter_products(node))


def aggregate_value(node: ItemNode) -> float:
    """Sum of product prices under *node*."""
    return sum((p.price for p in iter_products(node)), 0.0)


def bind_bus(node: ItemNode, bus) -> None:
    """Point *node* and its subtree at *bus* (``None`` detaches)."""
    for item in walk(node):
        item._bus = bus
