"""Save and load the inventory tree to two flat SQLite tables.

Saving is wipe-and-replace: both tables are emptied and the whole tree is
re-inserted inside one transaction, so a later load sees either the old
inventory or the new one, never a mix. Loading rebuilds the tree from
``categories.parent_id`` and ``products.category_id``.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Optional

from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import SQLAlchemyError

from config import DATABASE_URL
from src.models.category import CategoryRecord
from src.models.database import init_db, make_engine, session_factory, sqlite_path, with_db
from src.models.product import ProductRecord
from src.models.tree import (
    Category,
    InventoryError,
    NodeKind,
    Product,
    StructuralError,
    ValidationError,
    walk,
)

logger = logging.getLogger(__name__)


class PersistenceError(InventoryError):
    """Raised when the inventory store cannot be read or written."""


def _is_parentless(row: CategoryRecord) -> bool:
    # Older stores mark the root with parent_id 0 instead of NULL
    return row.parent_id is None or row.parent_id == 0


class InventoryStore:
    """Maps a catalog tree to the ``categories`` and ``products`` tables."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or DATABASE_URL
        self._engine: Engine | None = None
        self._schema_ready = False

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = make_engine(self.database_url)
        return self._engine

    def exists(self) -> bool:
        """Whether the backing SQLite file is present (always True for other backends)."""
        db_file = sqlite_path(self.database_url)
        return db_file is None or db_file.exists()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._schema_ready = False

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def init_schema(self) -> None:
        """Create missing tables and add columns newer releases introduced."""
        try:
            init_db(self.engine)
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(
                f"Could not prepare inventory store at {self.database_url}: {e}"
            ) from e
        self._schema_ready = True

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            self.init_schema()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def persist(self, root: Category) -> tuple[int, int]:
        """Replace the stored inventory with *root*'s tree.

        Returns ``(category_count, product_count)`` written.
        """
        if root.kind is not NodeKind.CATEGORY:
            raise StructuralError("Only a category tree can be saved")
        self._ensure_schema()

        session = session_factory(self.engine)()
        try:
            with session.begin():
                session.execute(delete(ProductRecord))
                session.execute(delete(CategoryRecord))
                counts = self._write_tree(session, root)
        except SQLAlchemyError as e:
            logger.error("Inventory save failed, transaction rolled back: %s", e)
            raise PersistenceError(f"Could not save inventory: {e}") from e
        finally:
            session.close()

        logger.info(
            "Inventory saved to %s (%d categories, %d products)",
            self.database_url, counts[0], counts[1],
        )
        return counts

    @staticmethod
    def _write_tree(session, root: Category) -> tuple[int, int]:
        categories = products = 0
        # Each category is flushed before its children so its id is known
        queue: deque[tuple[Category, Optional[int]]] = deque([(root, None)])
        while queue:
            category, parent_id = queue.popleft()
            record = CategoryRecord(name=category.name, parent_id=parent_id)
            session.add(record)
            session.flush()
            categories += 1

            for child in category.children:
                if child.kind is NodeKind.CATEGORY:
                    queue.append((child, record.id))
                else:
                    session.add(ProductRecord(
                        name=child.name,
                        quantity=child.quantity,
                        price=child.price,
                        alert_threshold=child.alert_threshold_override,
                        location=child.location,
                        category_id=record.id,
                    ))
                    products += 1
        session.flush()
        return categories, products

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def reconstruct(self) -> Optional[Category]:
        """Rebuild the stored tree, or return None if the store is missing or empty."""
        if not self.exists():
            logger.info("No inventory store at %s", self.database_url)
            return None
        self._ensure_schema()

        try:
            with with_db(self.engine) as db:
                category_rows = db.execute(
                    select(CategoryRecord).order_by(CategoryRecord.id)
                ).scalars().all()
                product_rows = db.execute(
                    select(ProductRecord).order_by(ProductRecord.id)
                ).scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read inventory: {e}") from e

        if not category_rows:
            logger.info("Inventory store at %s is empty", self.database_url)
            return None
        return self._build_tree(category_rows, product_rows)

    def _build_tree(self, category_rows, product_rows) -> Category:
        # 1. One node per category row; the first row without a parent is the root
        nodes: dict[int, Category] = {}
        root_id: Optional[int] = None
        for row in category_rows:
            is_root = _is_parentless(row) and root_id is None
            try:
                nodes[row.id] = Category(row.name, root=is_root)
            except ValidationError:
                logger.warning("Skipping category row %s with invalid name %r", row.id, row.name)
                continue
            if is_root:
                root_id = row.id

        if root_id is None:
            raise PersistenceError("Inventory store has categories but no root category")
        root = nodes[root_id]

        # 2. Re-link category edges
        for row in category_rows:
            if row.id == root_id or row.id not in nodes:
                continue
            parent = None if _is_parentless(row) else nodes.get(row.parent_id)
            if parent is None:
                continue
            try:
                parent.add_child(nodes[row.id])
            except StructuralError as e:
                logger.warning("Skipping category row %s: %s", row.id, e)

        # 3. Attach products to their category
        for row in product_rows:
            parent = nodes.get(row.category_id)
            if parent is None:
                continue
            try:
                product = Product(
                    row.name,
                    int(row.quantity) if row.quantity is not None else 0,
                    float(row.price) if row.price is not None else 0.0,
                    row.location,
                    row.alert_threshold,
                )
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning("Skipping product row %s: %s", row.id, e)
                continue
            parent.add_child(product)

        kept = sum(1 for _ in walk(root))
        lost = len(category_rows) + len(product_rows) - kept
        if lost:
            logger.warning(
                "Dropped %d orphan or invalid rows while loading %s", lost, self.database_url
            )
        logger.info("Inventory loaded from %s (%d nodes)", self.database_url, kept)
        return root
