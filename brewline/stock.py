"""Ingredient counters and the shared stock that holds them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping

from brewline.types import InvalidArgument


@dataclass(eq=False)
class Ingredient:
    """A named, non-negative counter. Equality and hashing use the name only.

    Attributes:
        name: Ingredient identifier.
        quantity: Units currently held.
    """

    name: str
    quantity: int = 0

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgument("Ingredient name must be non-empty")
        if self.quantity < 0:
            raise InvalidArgument(
                f"Ingredient quantity must be >= 0, got {self.quantity}"
            )

    def add(self, amount: int) -> int:
        """Increase the counter. Returns the new quantity."""
        if amount < 0:
            raise InvalidArgument(
                f"Cannot add a negative amount ({amount}) to {self.name}"
            )
        self.quantity += amount
        return self.quantity

    def consume(self, amount: int) -> int:
        """Decrease the counter. Returns the new quantity.

        Leaves the quantity untouched when *amount* is negative or larger
        than what is held.
        """
        if amount < 0:
            raise InvalidArgument(
                f"Cannot consume a negative amount ({amount}) of {self.name}"
            )
        if amount > self.quantity:
            raise InvalidArgument(
                f"You can consume at most {self.quantity} of {self.name}, "
                f"requested {amount}"
            )
        self.quantity -= amount
        return self.quantity

    def copy(self) -> Ingredient:
        return Ingredient(self.name, self.quantity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ingredient):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return f"INGREDIENT({self.name}, {self.quantity})"


class Stock:
    """Mapping of ingredient name -> Ingredient.

    The stock performs bound checks but no locking. Every caller that mutates
    a stock shared between threads must serialize access itself; the machine
    does so through its admission lock.
    """

    def __init__(self, quantities: Mapping[str, int] | None = None) -> None:
        self._items: dict[str, Ingredient] = {}
        for name, quantity in (quantities or {}).items():
            self._items[name] = Ingredient(name, quantity)

    # --- Queries ---

    def lookup(self, name: str) -> Ingredient | None:
        """Return a detached copy of the named ingredient, or None."""
        ingredient = self._items.get(name)
        if ingredient is None:
            return None
        return ingredient.copy()

    def quantity(self, name: str) -> int:
        """Current quantity. Raises InvalidArgument for unknown names."""
        return self._require(name).quantity

    def names(self) -> list[str]:
        return list(self._items)

    def missing(self, requirements: Mapping[str, int]) -> list[str]:
        """Names in *requirements* that the stock does not carry at all."""
        return [name for name in requirements if name not in self._items]

    def insufficient(self, requirements: Mapping[str, int]) -> list[str]:
        """Names in *requirements* whose stocked quantity is too small.

        Names absent from the stock are not reported here; use ``missing``.
        """
        short: list[str] = []
        for name, needed in requirements.items():
            ingredient = self._items.get(name)
            if ingredient is not None and needed > ingredient.quantity:
                short.append(name)
        return short

    def below(self, threshold: int) -> list[Ingredient]:
        """Copies of every ingredient whose quantity is under *threshold*."""
        return [
            ingredient.copy()
            for ingredient in self._items.values()
            if ingredient.quantity < threshold
        ]

    def snapshot(self) -> dict[str, int]:
        return {name: ing.quantity for name, ing in self._items.items()}

    # --- Mutations ---

    def add(self, name: str, amount: int) -> int:
        """Add to a known ingredient. Returns the new quantity."""
        return self._require(name).add(amount)

    def consume(self, name: str, amount: int) -> int:
        """Take from a known ingredient. Returns the new quantity."""
        return self._require(name).consume(amount)

    def reserve(self, requirements: Mapping[str, int]) -> None:
        """Consume every requirement, or nothing at all."""
        for name, needed in requirements.items():
            if needed < 0:
                raise InvalidArgument(
                    f"Cannot consume a negative amount ({needed}) of {name}"
                )
        absent = self.missing(requirements)
        if absent:
            raise InvalidArgument(f"Unknown ingredient(s): {', '.join(absent)}")
        short = self.insufficient(requirements)
        if short:
            raise InvalidArgument(f"Insufficient ingredient(s): {', '.join(short)}")
        for name, needed in requirements.items():
            self._items[name].consume(needed)

    def release(self, requirements: Mapping[str, int]) -> None:
        """Return previously reserved quantities to the stock."""
        absent = self.missing(requirements)
        if absent:
            raise InvalidArgument(f"Unknown ingredient(s): {', '.join(absent)}")
        for name, amount in requirements.items():
            self._items[name].add(amount)

    # --- Private helpers ---

    def _require(self, name: str) -> Ingredient:
        ingredient = self._items.get(name)
        if ingredient is None:
            raise InvalidArgument(f"Ingredient '{name}' is not stocked")
        return ingredient

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[Ingredient]:
        return iter([ingredient.copy() for ingredient in self._items.values()])

    def __len__(self) -> int:
        return len(self._items)
