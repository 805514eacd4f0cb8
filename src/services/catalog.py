"""Catalog context - the one live inventory tree and everything around it.

Create a single ``InventoryCatalog`` at startup and pass that instance to
every collaborator (views, command line, tests) instead of reaching for a
global. It owns the root category, the active alert strategy, the change
listeners and the store the tree is loaded from and saved to.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from config import DEFAULT_ROOT_NAME
from src.models.tree import (
    Category,
    ItemNode,
    NodeKind,
    Product,
    StructuralError,
    bind_bus,
    create_category,
    create_product,
    create_root,
    validate_name,
    validate_price,
    validate_quantity,
    validate_threshold,
)
from src.services.alert_strategies import AlertStrategy, StockWarning, builtin_strategies
from src.services.alert_strategies import scan as scan_tree
from src.services.notifications import ChangeBus, Listener, ListenerHandle
from src.services.persistence import InventoryStore, PersistenceError
from src.services.summaries import CategorySummary, ProductRow, category_summaries, product_rows

logger = logging.getLogger(__name__)

_UNSET = object()


class InventoryCatalog:
    """Single owner of the inventory tree, alert strategy, listeners and store."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        root_name: str = DEFAULT_ROOT_NAME,
        strategy: Optional[AlertStrategy] = None,
        bus: Optional[ChangeBus] = None,
        autoload: bool = True,
    ):
        self.root_name = validate_name(root_name)
        self.store = InventoryStore(database_url)
        self.bus = bus if bus is not None else ChangeBus()

        self._presets = builtin_strategies()
        self._strategies: dict[str, AlertStrategy] = {
            s.display_name: s for s in self._presets.values()
        }
        self._strategy: Optional[AlertStrategy] = None
        self.set_active_strategy(
            strategy if strategy is not None else next(iter(self._presets.values()))
        )

        self._root = create_root(self.root_name)
        bind_bus(self._root, self.bus)
        if autoload:
            self.load()

    @property
    def root(self) -> Category:
        return self._root

    @property
    def database_url(self) -> str:
        return self.store.database_url

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """Replace the live tree with the stored one.

        Falls back to an empty root when the store is missing, empty or
        unreadable. Returns True if stored data was loaded.
        """
        try:
            self.store.init_schema()
            root = self.store.reconstruct()
        except PersistenceError as e:
            logger.warning("Could not load inventory, starting with an empty catalog: %s", e)
            root = None

        loaded = root is not None
        if root is None:
            root = create_root(self.root_name)
        self._replace_root(root)
        return loaded

    def save(self) -> tuple[int, int]:
        """Write the whole tree to the store; PersistenceError propagates."""
        return self.store.persist(self._root)

    def close(self) -> None:
        self.store.close()

    def _replace_root(self, root: Category) -> None:
        bind_bus(self._root, None)
        self._root = root
        bind_bus(self._root, self.bus)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def _check_owned(self, node: ItemNode) -> None:
        top = node
        while top.parent is not None:
            top = top.parent
        if top is not self._root:
            raise StructuralError(f"{node.name!r} is not part of this catalog")

    def create_category(self, name: str, parent: Optional[Category] = None) -> Category:
        parent = self._root if parent is None else parent
        self._check_owned(parent)
        category = create_category(name)
        parent.add_child(category)
        return category

    def rename_category(self, category: Category, new_name: str) -> None:
        if category.kind is not NodeKind.CATEGORY:
            raise StructuralError(f"{category.name!r} is a product, not a category")
        self._check_owned(category)
        category.rename(new_name)

    def remove_category(self, category: Category) -> None:
        """Remove *category* and everything beneath it."""
        if category.kind is not NodeKind.CATEGORY:
            raise StructuralError(f"{category.name!r} is a product, not a category")
        if category.is_root:
            raise StructuralError("root cannot be removed")
        self._check_owned(category)
        category.parent.remove_child(category)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def create_product(
        self,
        category: Category,
        name: str,
        quantity: int,
        price: float,
        location: Optional[str] = None,
        threshold_override: Optional[int] = None,
    ) -> Product:
        self._check_owned(category)
        product = create_product(name, quantity, price, location, threshold_override)
        category.add_child(product)
        return product

    def update_product(
        self,
        product: Product,
        *,
        name=_UNSET,
        quantity=_UNSET,
        price=_UNSET,
        location=_UNSET,
        threshold_override=_UNSET,
    ) -> None:
        """Edit several product fields at once.

        Every supplied field is validated before any is applied, so a bad
        value leaves the product untouched. Quantity is applied last so
        listeners see the finished edit.
        """
        if product.kind is not NodeKind.PRODUCT:
            raise StructuralError(f"{product.name!r} is a category, not a product")
        self._check_owned(product)
        if name is not _UNSET:
            validate_name(name)
        if quantity is not _UNSET:
            validate_quantity(quantity)
        if price is not _UNSET:
            validate_price(price)
        if threshold_override is not _UNSET:
            validate_threshold(threshold_override)

        if name is not _UNSET:
            product.rename(name)
        if price is not _UNSET:
            product.set_price(price)
        if location is not _UNSET:
            product.set_location(location)
        if threshold_override is not _UNSET:
            product.set_threshold_override(threshold_override)
        if quantity is not _UNSET:
            product.set_quantity(quantity)

    def remove_product(self, product: Product) -> None:
        if product.kind is not NodeKind.PRODUCT:
            raise StructuralError(f"{product.name!r} is a category, not a product")
        self._check_owned(product)
        parent = product.parent
        if parent is not None:
            parent.remove_child(product)

    def copy_product(self, product: Product) -> Product:
        """Add a duplicate of *product* next to it, named '<name> - Copy'."""
        if product.kind is not NodeKind.PRODUCT:
            raise StructuralError(f"{product.name!r} is a category, not a product")
        parent = product.parent
        if parent is None:
            raise StructuralError(f"{product.name!r} is not in a category")
        self._check_owned(product)
        clone = create_product(
            f"{product.name} - Copy",
            product.quantity,
            product.price,
            product.location,
            product.alert_threshold_override,
        )
        parent.add_child(clone)
        return clone

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    @property
    def active_strategy(self) -> Optional[AlertStrategy]:
        return self._strategy

    def available_strategies(self) -> dict[str, AlertStrategy]:
        """Selectable strategies keyed by display name."""
        return dict(self._strategies)

    def preset_labels(self) -> list[str]:
        """Short menu labels of the built-in presets, e.g. "Fixed (<=5)"."""
        return list(self._presets)

    def set_active_strategy(
        self,
        strategy: Union[AlertStrategy, str, None],
        scan: bool = False,
    ) -> list[StockWarning]:
        """Switch the alert rule; with ``scan=True`` re-check the whole tree."""
        if isinstance(strategy, str):
            # Accepts a display name or a preset menu label
            found = self._strategies.get(strategy) or self._presets.get(strategy)
            if found is None:
                raise KeyError(f"Unknown alert strategy {strategy!r}")
            strategy = found
        elif strategy is not None and not isinstance(strategy, AlertStrategy):
            raise TypeError(f"Expected an AlertStrategy, got {type(strategy).__name__}")

        if strategy is not None:
            self._strategies.setdefault(strategy.display_name, strategy)
        self._strategy = strategy
        logger.info(
            "Active alert strategy: %s",
            strategy.display_name if strategy is not None else "none",
        )
        return self.scan_for_warnings() if scan else []

    def evaluate(self, product: Product) -> Optional[str]:
        if self._strategy is None:
            return None
        return self._strategy.evaluate(product)

    def scan_for_warnings(self, node: Optional[ItemNode] = None) -> list[StockWarning]:
        if node is None:
            node = self._root
        else:
            self._check_owned(node)
        return scan_tree(node, self._strategy)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def register_listener(self, listener: Listener) -> ListenerHandle:
        return self.bus.register(listener)

    def unregister_listener(self, handle_or_listener) -> bool:
        return self.bus.unregister(handle_or_listener)

    # ------------------------------------------------------------------
    # Export projections
    # ------------------------------------------------------------------

    def product_rows(self, category: Optional[Category] = None) -> list[ProductRow]:
        return product_rows(self._root if category is None else category)

    def category_summary(self, category: Optional[Category] = None) -> list[CategorySummary]:
        return category_summaries(self._root if category is None else category)
