"""Tests for schema creation and additive migrations."""

from sqlalchemy import inspect, text
from sqlalchemy.orm import DeclarativeBase

from src.models.database import Base, init_db, make_engine, sqlite_path, with_db
from src.models.category import CategoryRecord
from src.models.product import ProductRecord


def _columns(engine, table: str) -> set[str]:
    return {col["name"] for col in inspect(engine).get_columns(table)}


def test_base_is_declarative_base() -> None:
    assert issubclass(Base, DeclarativeBase)
    assert CategoryRecord.__tablename__ == "categories"
    assert ProductRecord.__tablename__ == "products"


def test_sqlite_path_parsing(tmp_path) -> None:
    assert sqlite_path(f"sqlite:///{tmp_path / 'x.db'}") == tmp_path / "x.db"
    assert sqlite_path("sqlite://") is None
    assert sqlite_path("sqlite:///:memory:") is None


def test_make_engine_creates_missing_folder(tmp_path) -> None:
    target = tmp_path / "nested" / "dir" / "inventory.db"
    engine = make_engine(f"sqlite:///{target}")
    try:
        assert target.parent.is_dir()
    finally:
        engine.dispose()


def test_init_db_creates_tables_with_contract_columns(db_url) -> None:
    engine = make_engine(db_url)
    try:
        init_db(engine)
        assert _columns(engine, "categories") == {"id", "name", "parent_id"}
        assert _columns(engine, "products") == {
            "id", "name", "quantity", "price", "alert_threshold", "location", "category_id",
        }
    finally:
        engine.dispose()


def test_init_db_is_idempotent_and_keeps_rows(db_url) -> None:
    engine = make_engine(db_url)
    try:
        init_db(engine)
        with with_db(engine) as db:
            db.add(CategoryRecord(name="All Products", parent_id=None))
            db.commit()

        init_db(engine)

        with with_db(engine) as db:
            assert db.query(CategoryRecord).count() == 1
    finally:
        engine.dispose()


def test_init_db_adds_columns_missing_from_older_stores(db_url) -> None:
    engine = make_engine(db_url)
    try:
        with engine.begin() as conn:
            conn.execute(text(
                "CREATE TABLE categories (id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "name TEXT NOT NULL, parent_id INTEGER)"
            ))
            conn.execute(text(
                "CREATE TABLE products (id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "name TEXT NOT NULL, quantity INTEGER, price REAL, category_id INTEGER)"
            ))
            conn.execute(text("INSERT INTO categories (name, parent_id) VALUES ('Root', NULL)"))
            conn.execute(text(
                "INSERT INTO products (name, quantity, price, category_id) VALUES ('Old', 3, 1.5, 1)"
            ))

        init_db(engine)

        assert {"location", "alert_threshold"} <= _columns(engine, "products")
        with engine.connect() as conn:
            row = conn.execute(text("SELECT name, location, alert_threshold FROM products")).one()
        assert row == ("Old", None, None)
    finally:
        engine.dispose()


def test_init_db_creates_foreign_key_indexes(db_url) -> None:
    engine = make_engine(db_url)
    try:
        init_db(engine)
        inspector = inspect(engine)
        assert "ix_products_category_id" in {i["name"] for i in inspector.get_indexes("products")}
        assert "ix_categories_parent_id" in {i["name"] for i in inspector.get_indexes("categories")}
    finally:
        engine.dispose()


def test_init_db_indexes_tables_created_without_indexes(db_url) -> None:
    engine = make_engine(db_url)
    try:
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE categories (id INTEGER PRIMARY KEY, name TEXT, parent_id INTEGER)"))
            conn.execute(text(
                "CREATE TABLE products (id INTEGER PRIMARY KEY, name TEXT, quantity INTEGER, "
                "price REAL, category_id INTEGER)"
            ))

        init_db(engine)
        init_db(engine)

        inspector = inspect(engine)
        assert [i["name"] for i in inspector.get_indexes("categories")] == ["ix_categories_parent_id"]
        assert [i["name"] for i in inspector.get_indexes("products")] == ["ix_products_category_id"]
    finally:
        engine.dispose()
