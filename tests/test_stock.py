"""Tests for Ingredient and Stock."""
from __future__ import annotations

import random

import pytest
from brewline import Ingredient, InvalidArgument, Stock


class TestIngredient:
    def test_construction(self) -> None:
        ing = Ingredient("hot_water", 500)
        assert ing.name == "hot_water"
        assert ing.quantity == 500

    def test_negative_quantity_raises(self) -> None:
        with pytest.raises(InvalidArgument, match="must be >= 0"):
            Ingredient("hot_water", -1)

    def test_empty_name_raises(self) -> None:
        with pytest.raises(InvalidArgument, match="non-empty"):
            Ingredient("", 1)

    def test_add(self) -> None:
        ing = Ingredient("hot_milk", 10)
        assert ing.add(5) == 15
        assert ing.quantity == 15

    def test_add_negative_raises_and_keeps_quantity(self) -> None:
        ing = Ingredient("hot_milk", 10)
        with pytest.raises(InvalidArgument, match="negative"):
            ing.add(-1)
        assert ing.quantity == 10

    def test_consume(self) -> None:
        ing = Ingredient("sugar_syrup", 10)
        assert ing.consume(10) == 0

    def test_consume_too_much_raises_and_keeps_quantity(self) -> None:
        ing = Ingredient("sugar_syrup", 10)
        with pytest.raises(InvalidArgument, match="at most 10"):
            ing.consume(11)
        assert ing.quantity == 10

    def test_consume_negative_raises(self) -> None:
        ing = Ingredient("sugar_syrup", 10)
        with pytest.raises(InvalidArgument, match="negative"):
            ing.consume(-3)
        assert ing.quantity == 10

    def test_equality_by_name(self) -> None:
        assert Ingredient("hot_water", 1) == Ingredient("hot_water", 99)
        assert Ingredient("hot_water", 1) != Ingredient("hot_milk", 1)
        assert len({Ingredient("a", 1), Ingredient("a", 2)}) == 1

    def test_str(self) -> None:
        assert str(Ingredient("hot_water", 500)) == "INGREDIENT(hot_water, 500)"


class TestStockQueries:
    def test_lookup_returns_copy(self) -> None:
        stock = Stock({"hot_water": 100})
        found = stock.lookup("hot_water")
        assert found is not None
        found.consume(100)
        assert stock.quantity("hot_water") == 100

    def test_lookup_missing(self) -> None:
        assert Stock().lookup("hot_water") is None

    def test_quantity_unknown_raises(self) -> None:
        with pytest.raises(InvalidArgument, match="not stocked"):
            Stock().quantity("hot_water")

    def test_missing(self) -> None:
        stock = Stock({"hot_water": 100})
        assert stock.missing({"hot_water": 10, "green_mixture": 5}) == ["green_mixture"]

    def test_insufficient_ignores_missing(self) -> None:
        stock = Stock({"hot_water": 100, "hot_milk": 5})
        short = stock.insufficient({"hot_water": 200, "hot_milk": 5, "tea": 1})
        assert short == ["hot_water"]

    def test_below(self) -> None:
        stock = Stock({"hot_water": 49, "hot_milk": 50, "sugar": 0})
        names = sorted(ing.name for ing in stock.below(50))
        assert names == ["hot_water", "sugar"]

    def test_snapshot_and_len(self) -> None:
        stock = Stock({"hot_water": 1, "hot_milk": 2})
        assert stock.snapshot() == {"hot_water": 1, "hot_milk": 2}
        assert len(stock) == 2
        assert "hot_water" in stock
        assert "tea" not in stock
        assert stock.names() == ["hot_water", "hot_milk"]

    def test_iter_yields_copies(self) -> None:
        stock = Stock({"hot_water": 10})
        for ing in stock:
            ing.add(5)
        assert stock.quantity("hot_water") == 10

    def test_negative_initial_quantity_raises(self) -> None:
        with pytest.raises(InvalidArgument):
            Stock({"hot_water": -1})


class TestStockMutations:
    def test_add_and_consume(self) -> None:
        stock = Stock({"hot_water": 100})
        assert stock.add("hot_water", 50) == 150
        assert stock.consume("hot_water", 120) == 30

    def test_add_unknown_raises(self) -> None:
        with pytest.raises(InvalidArgument, match="not stocked"):
            Stock().add("hot_water", 5)

    def test_consume_over_quantity_keeps_stock(self) -> None:
        stock = Stock({"hot_water": 100})
        with pytest.raises(InvalidArgument):
            stock.consume("hot_water", 101)
        assert stock.quantity("hot_water") == 100

    def test_reserve_all(self) -> None:
        stock = Stock({"hot_water": 100, "hot_milk": 50})
        stock.reserve({"hot_water": 60, "hot_milk": 50})
        assert stock.snapshot() == {"hot_water": 40, "hot_milk": 0}

    def test_reserve_is_all_or_nothing(self) -> None:
        stock = Stock({"hot_water": 100, "hot_milk": 10})
        with pytest.raises(InvalidArgument, match="Insufficient"):
            stock.reserve({"hot_water": 60, "hot_milk": 50})
        assert stock.snapshot() == {"hot_water": 100, "hot_milk": 10}

    def test_reserve_unknown_changes_nothing(self) -> None:
        stock = Stock({"hot_water": 100})
        with pytest.raises(InvalidArgument, match="Unknown"):
            stock.reserve({"hot_water": 10, "tea": 1})
        assert stock.quantity("hot_water") == 100

    def test_reserve_negative_changes_nothing(self) -> None:
        stock = Stock({"hot_water": 100, "hot_milk": 10})
        with pytest.raises(InvalidArgument, match="negative"):
            stock.reserve({"hot_water": 10, "hot_milk": -1})
        assert stock.snapshot() == {"hot_water": 100, "hot_milk": 10}

    def test_release_restores(self) -> None:
        stock = Stock({"hot_water": 100})
        stock.reserve({"hot_water": 30})
        stock.release({"hot_water": 30})
        assert stock.quantity("hot_water") == 100


class TestStockNeverNegative:
    def test_random_sequence(self) -> None:
        rng = random.Random(7)
        stock = Stock({"hot_water": 50})
        for _ in range(500):
            amount = rng.randint(-5, 40)
            op = rng.choice([stock.add, stock.consume])
            before = stock.quantity("hot_water")
            try:
                op("hot_water", amount)
            except InvalidArgument:
                assert stock.quantity("hot_water") == before
            assert stock.quantity("hot_water") >= 0
