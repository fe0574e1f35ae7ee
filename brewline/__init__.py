"""brewline - A shared-stock beverage dispenser with bounded outlet locking."""
from brewline.config import DispenserConfig
from brewline.loader import load_machine, load_machine_file, read_payload
from brewline.machine import Machine
from brewline.outlet import Outlet
from brewline.recipe import Beverage, Recipe
from brewline.stock import Ingredient, Stock
from brewline.types import (
    BrewlineError,
    IngredientsError,
    IngredientsInsufficient,
    IngredientsUnavailable,
    InvalidArgument,
    InvalidConfiguration,
    LifecycleError,
    OutletId,
    OutletTimeout,
    PreparationCancelled,
    PrepareResult,
    PrepareStatus,
    ServeOutcome,
    ServeStatus,
)

__all__ = [
    "Beverage",
    "BrewlineError",
    "DispenserConfig",
    "Ingredient",
    "IngredientsError",
    "IngredientsInsufficient",
    "IngredientsUnavailable",
    "InvalidArgument",
    "InvalidConfiguration",
    "LifecycleError",
    "Machine",
    "Outlet",
    "OutletId",
    "OutletTimeout",
    "PreparationCancelled",
    "PrepareResult",
    "PrepareStatus",
    "Recipe",
    "ServeOutcome",
    "ServeStatus",
    "Stock",
    "load_machine",
    "load_machine_file",
    "read_payload",
]
