"""Tests for text rendering of machine state and outcomes."""
from __future__ import annotations

from brewline import (
    Beverage,
    Ingredient,
    IngredientsUnavailable,
    Machine,
    PrepareResult,
    PrepareStatus,
    Recipe,
    ServeOutcome,
    ServeStatus,
)
from brewline.report import render_details, render_low_stock, render_outcome, render_result


def _setup_machine() -> Machine:
    shot = Beverage("shot", Recipe("shot", {"espresso": 1, "milk": 2}, prepare_time_ms=10))
    return Machine(2, {"espresso": 10, "milk": 40}, [shot], description="Cafe")


class TestRenderDetails:
    def test_layout(self) -> None:
        text = render_details(_setup_machine())
        assert text.splitlines() == [
            "Name = Cafe",
            "",
            "Outlets = 2",
            "OUTLET(1)",
            "OUTLET(2)",
            "",
            "Ingredients = 2",
            "INGREDIENT(espresso, 10)",
            "INGREDIENT(milk, 40)",
            "",
            "Beverages = 1",
            "BEVERAGE(shot)",
            "\tRECIPE(shot)",
            "\t\tINGREDIENT(espresso, 1)",
            "\t\tINGREDIENT(milk, 2)",
        ]

    def test_busy_outlet_marked(self) -> None:
        machine = _setup_machine()
        outlet = machine.outlet(2)
        outlet._lock.acquire()
        try:
            text = render_details(machine)
        finally:
            outlet._lock.release()
        assert "OUTLET(2) [busy]" in text
        assert "OUTLET(1) [busy]" not in text


class TestRenderLowStock:
    def test_nothing_low(self) -> None:
        assert render_low_stock([], "Cafe") == "Cafe has enough quantity of each ingredient!"

    def test_lists_low_ingredients(self) -> None:
        text = render_low_stock([Ingredient("milk", 3), Ingredient("sugar", 0)])
        assert text == (
            "Following ingredients are low in quantity\n"
            "\tINGREDIENT(milk, 3)\n"
            "\tINGREDIENT(sugar, 0)"
        )


class TestRenderOutcome:
    def test_dispatched(self) -> None:
        outcome = ServeOutcome(3, "latte", ServeStatus.DISPATCHED)
        assert render_outcome(outcome) == "latte dispatched to OUTLET(3)."

    def test_dropped(self) -> None:
        outcome = ServeOutcome(1, "latte", ServeStatus.DROPPED)
        assert render_outcome(outcome) == "latte at OUTLET(1) dropped: machine busy."

    def test_rejected_uses_error_message(self) -> None:
        error = IngredientsUnavailable("green_tea", 4, ["green_mixture"])
        outcome = ServeOutcome(4, "green_tea", ServeStatus.REJECTED, error=error)
        assert render_outcome(outcome) == (
            "green_tea cannot be prepared at OUTLET(4) because ingredient(s) "
            "(green_mixture) is(are) not available!"
        )


class TestRenderResult:
    def test_prepared(self) -> None:
        result = PrepareResult(2, "latte", PrepareStatus.PREPARED, elapsed=1.234)
        assert render_result(result) == "latte is prepared at OUTLET(2) (1.23s)."

    def test_failure_includes_detail(self) -> None:
        result = PrepareResult(
            1, "latte", PrepareStatus.TIMED_OUT, detail="Cannot prepare latte",
        )
        assert render_result(result) == "latte at OUTLET(1) timed_out: Cannot prepare latte"
