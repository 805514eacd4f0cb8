"""Low-stock alert rules.

Each strategy maps one product's current state to an optional warning
message. Strategies never touch the product, so the catalog can swap the
active one at any time and re-run it over the whole tree.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import (
    DEFAULT_ALERT_THRESHOLD,
    HIGH_ALERT_THRESHOLD,
    REORDER_POINT,
    SAFETY_STOCK,
)
from src.models.tree import ItemNode, Product, ValidationError, iter_products


class AlertStrategy:
    """Common interface: a display name and ``evaluate(product)``."""

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    def evaluate(self, product: Product) -> Optional[str]:
        """Return a warning if *product* needs attention, otherwise None."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.display_name!r}>"


def _check_threshold(value: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{label} must be a non-negative whole number, got {value!r}")
    return value


class FixedThresholdStrategy(AlertStrategy):
    """Warn when quantity is at or below one catalog-wide limit."""

    def __init__(self, threshold: int = DEFAULT_ALERT_THRESHOLD):
        self.threshold = _check_threshold(threshold, "Threshold")

    @property
    def display_name(self) -> str:
        return f"Fixed threshold (<= {self.threshold})"

    def evaluate(self, product: Product) -> Optional[str]:
        if product.quantity <= self.threshold:
            return (
                f"{product.name} is low on stock "
                f"(qty {product.quantity} <= {self.threshold})."
            )
        return None


class ReorderPointStrategy(AlertStrategy):
    """Two-level alert: plan at the reorder point, escalate at safety stock.

    When quantity satisfies both limits the safety-stock message wins.
    """

    def __init__(self, reorder_point: int = REORDER_POINT, safety_stock: int = SAFETY_STOCK):
        self.reorder_point = _check_threshold(reorder_point, "Reorder point")
        self.safety_stock = _check_threshold(safety_stock, "Safety stock")
        if self.reorder_point <= self.safety_stock:
            raise ValidationError(
                f"Reorder point ({reorder_point}) must be above safety stock ({safety_stock})"
            )

    @property
    def display_name(self) -> str:
        return f"Reorder point (R:{self.reorder_point}, S:{self.safety_stock})"

    def evaluate(self, product: Product) -> Optional[str]:
        qty = product.quantity
        if qty <= self.safety_stock:
            return (
                f"{product.name} below safety stock ({qty} <= {self.safety_stock}). "
                "Immediate action required."
            )
        if qty <= self.reorder_point:
            return (
                f"{product.name} reached reorder point ({qty} <= {self.reorder_point}). "
                "Plan replenishment."
            )
        return None


class PerProductThresholdStrategy(AlertStrategy):
    """Use each product's own threshold override, else a shared default."""

    def __init__(self, default_threshold: int = DEFAULT_ALERT_THRESHOLD):
        self.default_threshold = _check_threshold(default_threshold, "Default threshold")

    @property
    def display_name(self) -> str:
        return f"Per-product threshold (default <= {self.default_threshold})"

    def evaluate(self, product: Product) -> Optional[str]:
        override = product.alert_threshold_override
        threshold = override if override is not None else self.default_threshold
        if product.quantity <= threshold:
            suffix = " (product override)" if override is not None else " (default)"
            return f"{product.name} low stock {product.quantity} <= {threshold}{suffix}"
        return None


def builtin_strategies() -> dict[str, AlertStrategy]:
    """Return the preset menu keyed by its short label; the first is the catalog default."""
    return {
        f"Fixed (<={DEFAULT_ALERT_THRESHOLD})": FixedThresholdStrategy(DEFAULT_ALERT_THRESHOLD),
        f"Fixed (<={HIGH_ALERT_THRESHOLD})": FixedThresholdStrategy(HIGH_ALERT_THRESHOLD),
        f"Reorder ({REORDER_POINT}/{SAFETY_STOCK})": ReorderPointStrategy(REORDER_POINT, SAFETY_STOCK),
        f"Per-product (default {DEFAULT_ALERT_THRESHOLD})": PerProductThresholdStrategy(
            DEFAULT_ALERT_THRESHOLD
        ),
    }


@dataclass
class StockWarning:
    """One product flagged by a strategy during a scan."""
    product: Product
    message: str

    @property
    def path(self) -> str:
        return self.product.get_path()


def scan(node: ItemNode, strategy: Optional[AlertStrategy]) -> list[StockWarning]:
    """Evaluate every product under *node* with *strategy*, in tree order."""
    if strategy is None:
        return []
    warnings = []
    for product in iter_products(node):
        message = strategy.evaluate(product)
        if message is not None:
            warnings.append(StockWarning(product=product, message=message))
    return warnings
