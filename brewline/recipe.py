"""Recipe and Beverage value objects."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from brewline.types import InvalidArgument

DEFAULT_PREPARE_TIME_MS = 5000


@dataclass(frozen=True)
class Recipe:
    """Immutable beverage recipe.

    Attributes:
        name: Name of the beverage this recipe makes.
        ingredients: Required quantities (ingredient_name -> quantity).
        prepare_time_ms: How long an outlet is occupied while preparing.
    """

    name: str
    ingredients: Mapping[str, int] = field(default_factory=dict)
    prepare_time_ms: int = DEFAULT_PREPARE_TIME_MS

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidArgument("Recipe name must be non-empty")
        if self.prepare_time_ms < 0:
            raise InvalidArgument(
                f"prepare_time_ms must be >= 0, got {self.prepare_time_ms}"
            )
        for ingredient, quantity in self.ingredients.items():
            if quantity < 0:
                raise InvalidArgument(
                    f"{self.name} requires a negative amount of {ingredient}"
                )
        # Read-only copy: neither the caller nor a catalog reader can edit it.
        object.__setattr__(
            self, "ingredients", MappingProxyType(dict(self.ingredients)),
        )

    def __hash__(self) -> int:
        return hash(
            (self.name, frozenset(self.ingredients.items()), self.prepare_time_ms)
        )

    @property
    def prepare_seconds(self) -> float:
        return self.prepare_time_ms / 1000

    def requires(self, ingredient: str) -> int:
        """Quantity of *ingredient* this recipe needs (0 if unused)."""
        return self.ingredients.get(ingredient, 0)

    def __str__(self) -> str:
        lines = [f"RECIPE({self.name})"]
        for ingredient, quantity in self.ingredients.items():
            lines.append(f"\t\tINGREDIENT({ingredient}, {quantity})")
        return "\n".join(lines)


class Beverage:
    """A named beverage bound to its recipe.

    A beverage without a recipe cannot be prepared; reading ``recipe`` on
    one raises InvalidArgument.
    """

    __slots__ = ("_name", "_recipe")

    def __init__(self, name: str, recipe: Recipe | None) -> None:
        if not name:
            raise InvalidArgument("Beverage name must be non-empty")
        self._name = name
        self._recipe = recipe

    @property
    def name(self) -> str:
        return self._name

    @property
    def recipe(self) -> Recipe:
        if self._recipe is None:
            raise InvalidArgument(f"BEVERAGE({self._name}) doesn't have any recipe!")
        return self._recipe

    @property
    def has_recipe(self) -> bool:
        return self._recipe is not None

    @property
    def prepare_time_ms(self) -> int:
        return self.recipe.prepare_time_ms

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Beverage):
            return NotImplemented
        return self._name == other._name and self._recipe == other._recipe

    def __hash__(self) -> int:
        return hash(self._name)

    def __repr__(self) -> str:
        return f"Beverage({self._name!r}, {self._recipe!r})"

    def __str__(self) -> str:
        if self._recipe is None:
            return f"BEVERAGE({self._name})"
        return f"BEVERAGE({self._name})\n\t{self._recipe}"
