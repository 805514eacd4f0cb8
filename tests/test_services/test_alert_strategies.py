"""Tests for the low-stock alert strategies."""

import pytest

from src.models.tree import Category, ValidationError, create_product
from src.services.alert_strategies import (
    AlertStrategy,
    FixedThresholdStrategy,
    PerProductThresholdStrategy,
    ReorderPointStrategy,
    builtin_strategies,
    scan,
)


def test_fixed_threshold_warns_at_or_below_limit() -> None:
    strategy = FixedThresholdStrategy(5)

    message = strategy.evaluate(create_product("Test", 4, 10.0, "A1"))
    assert message == "Test is low on stock (qty 4 <= 5)."
    assert "low on stock" in strategy.evaluate(create_product("Test", 5, 10.0))
    assert strategy.evaluate(create_product("Test", 6, 10.0)) is None


@pytest.mark.parametrize(
    "quantity, expected",
    [
        (2, "Widget below safety stock (2 <= 3). Immediate action required."),
        (3, "Widget below safety stock (3 <= 3). Immediate action required."),
        (7, "Widget reached reorder point (7 <= 10). Plan replenishment."),
        (10, "Widget reached reorder point (10 <= 10). Plan replenishment."),
        (11, None),
    ],
)
def test_reorder_point_levels(quantity: int, expected) -> None:
    strategy = ReorderPointStrategy(reorder_point=10, safety_stock=3)
    assert strategy.evaluate(create_product("Widget", quantity, 1.0)) == expected


def test_reorder_point_must_exceed_safety_stock() -> None:
    with pytest.raises(ValidationError):
        ReorderPointStrategy(reorder_point=3, safety_stock=3)
    with pytest.raises(ValidationError):
        ReorderPointStrategy(reorder_point=2, safety_stock=5)


def test_negative_thresholds_are_rejected() -> None:
    with pytest.raises(ValidationError):
        FixedThresholdStrategy(-1)
    with pytest.raises(ValidationError):
        PerProductThresholdStrategy(-1)


def test_per_product_uses_default_without_override() -> None:
    strategy = PerProductThresholdStrategy(default_threshold=5)
    message = strategy.evaluate(create_product("Paper", 5, 1.0))
    assert message == "Paper low stock 5 <= 5 (default)"


def test_per_product_prefers_override() -> None:
    strategy = PerProductThresholdStrategy(default_threshold=5)
    gold = create_product("Gold", 6, 500.0, threshold_override=8)

    assert strategy.evaluate(gold) == "Gold low stock 6 <= 8 (product override)"

    gold.set_quantity(9)
    assert strategy.evaluate(gold) is None


def test_per_product_override_of_zero_is_respected() -> None:
    strategy = PerProductThresholdStrategy(default_threshold=5)
    assert strategy.evaluate(create_product("Rare", 1, 1.0, threshold_override=0)) is None


def test_evaluation_does_not_mutate_product() -> None:
    product = create_product("Steady", 1, 2.0, "Q1", threshold_override=3)
    for strategy in builtin_strategies().values():
        first = strategy.evaluate(product)
        assert strategy.evaluate(product) == first
    assert (product.quantity, product.price, product.location) == (1, 2.0, "Q1")
    assert product.alert_threshold_override == 3


def test_display_names() -> None:
    assert FixedThresholdStrategy(5).display_name == "Fixed threshold (<= 5)"
    assert ReorderPointStrategy(10, 3).display_name == "Reorder point (R:10, S:3)"
    assert PerProductThresholdStrategy(5).display_name == "Per-product threshold (default <= 5)"


def test_builtin_strategies_are_keyed_by_menu_label() -> None:
    presets = builtin_strategies()
    assert list(presets) == [
        "Fixed (<=5)",
        "Fixed (<=10)",
        "Reorder (10/3)",
        "Per-product (default 5)",
    ]
    strategies = list(presets.values())
    assert all(isinstance(s, AlertStrategy) for s in strategies)
    assert len({s.display_name for s in strategies}) == 4
    assert strategies[0].display_name == "Fixed threshold (<= 5)"
    assert presets["Reorder (10/3)"].display_name == "Reorder point (R:10, S:3)"


def test_scan_collects_warnings_in_tree_order(sample_tree: Category) -> None:
    warnings = scan(sample_tree, FixedThresholdStrategy(5))

    assert [w.product.name for w in warnings] == ["Drill", "Saw"]
    assert warnings[0].message == "Drill is low on stock (qty 4 <= 5)."
    assert warnings[1].path == "All Products > Hardware > Power Tools > Saw"


def test_scan_with_different_strategy_reports_different_products(sample_tree: Category) -> None:
    warnings = scan(sample_tree, PerProductThresholdStrategy(default_threshold=1))
    assert [w.message for w in warnings] == ["Drill low stock 4 <= 6 (product override)"]


def test_scan_without_strategy_is_empty(sample_tree: Category) -> None:
    assert scan(sample_tree, None) == []
