"""Services package."""
from src.services.alert_strategies import (
    AlertStrategy,
    FixedThresholdStrategy,
    ReorderPointStrategy,
    PerProductThresholdStrategy,
    StockWarning,
    builtin_strategies,
    scan,
)
from src.services.notifications import ChangeBus, ListenerHandle, ProductListener
from src.services.persistence import InventoryStore, PersistenceError
from src.services.summaries import CategorySummary, ProductRow, category_summaries, product_rows
from src.services.catalog import InventoryCatalog

__all__ = [
    "AlertStrategy",
    "FixedThresholdStrategy",
    "ReorderPointStrategy",
    "PerProductThresholdStrategy",
    "StockWarning",
    "builtin_strategies",
    "scan",
    "ChangeBus",
    "ListenerHandle",
    "ProductListener",
    "InventoryStore",
    "PersistenceError",
    "CategorySummary",
    "ProductRow",
    "category_summaries",
    "product_rows",
    "InventoryCatalog",
]
