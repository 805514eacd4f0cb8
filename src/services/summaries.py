"""Read-only listings used by table views and exporters."""
from dataclasses import dataclass

from src.models.tree import Category, ItemNode, NodeKind, StructuralError


@dataclass
class ProductRow:
    """A direct product child of a category, as shown in a product table."""
    name: str
    quantity: int
    price: float
    location: str


@dataclass
class CategorySummary:
    """A direct sub-category with its recomputed totals."""
    name: str
    total_quantity: int
    total_value: float


def _require_category(node: ItemNode) -> Category:
    if node.kind is not NodeKind.CATEGORY:
        raise StructuralError("leaf has no children")
    return node


def product_rows(category: ItemNode) -> list[ProductRow]:
    """List the products directly inside *category*, in child order."""
    return [
        ProductRow(
            name=child.name,
            quantity=child.quantity,
            price=child.price,
            location=child.location,
        )
        for child in _require_category(category).children
        if child.kind is NodeKind.PRODUCT
    ]


def category_summaries(category: ItemNode) -> list[CategorySummary]:
    """List the immediate sub-categories of *category* with aggregate totals."""
    return [
        CategorySummary(
            name=child.name,
            total_quantity=child.quantity,
            total_value=child.value,
        )
        for child in _require_category(category).children
        if child.kind is NodeKind.CATEGORY
    ]
