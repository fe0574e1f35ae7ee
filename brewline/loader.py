"""Build a Machine from a JSON configuration payload.

Recognized structure::

    {
      "machine": {
        "outlets": {"count_n": 3},
        "total_items_quantity": {"hot_water": 500, ...},
        "beverages": {"hot_tea": {"hot_water": 200, ...}, ...}
      }
    }
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from brewline.config import DispenserConfig
from brewline.machine import Machine
from brewline.recipe import Beverage, Recipe
from brewline.types import InvalidArgument, InvalidConfiguration

logger = logging.getLogger(__name__)


def read_payload(path: str | Path) -> dict[str, Any]:
    """Read and parse a JSON configuration file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise InvalidConfiguration(f"Input JSON file not found: {path}") from exc
    except OSError as exc:
        raise InvalidConfiguration(f"Error while loading {path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidConfiguration(f"Error while parsing {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"{path} must contain a JSON object")
    return data


def load_machine(
    payload: Mapping[str, Any],
    *,
    description: str = "",
    config: DispenserConfig | None = None,
) -> Machine:
    """Validate *payload* and build a machine from it.

    Every recipe gets ``config.prepare_time_ms`` as its preparation time.
    Raises InvalidConfiguration for any missing or malformed section.
    """
    config = config if config is not None else DispenserConfig()
    if not isinstance(payload, Mapping):
        raise InvalidConfiguration("Configuration payload must be a mapping")

    data = _section(payload, "machine", "configuration")
    outlets = _section(data, "outlets", "machine")
    count = _integer(outlets.get("count_n"), "machine.outlets.count_n")
    if count < 1:
        raise InvalidConfiguration(
            f"machine.outlets.count_n must be >= 1, got {count}"
        )

    totals = _section(data, "total_items_quantity", "machine")
    quantities = {
        name: _quantity(value, f"machine.total_items_quantity.{name}")
        for name, value in totals.items()
    }

    beverages: list[Beverage] = []
    for name, recipe_obj in _section(data, "beverages", "machine").items():
        where = f"machine.beverages.{name}"
        if not isinstance(recipe_obj, Mapping):
            raise InvalidConfiguration(f"{where} must be an object of quantities")
        ingredients = {
            ingredient: _quantity(value, f"{where}.{ingredient}")
            for ingredient, value in recipe_obj.items()
        }
        try:
            recipe = Recipe(
                name=name,
                ingredients=ingredients,
                prepare_time_ms=config.prepare_time_ms,
            )
            beverages.append(Beverage(name, recipe))
        except InvalidArgument as exc:
            raise InvalidConfiguration(f"{where}: {exc}") from exc

    try:
        machine = Machine(
            count, quantities, beverages, description=description, config=config,
        )
    except InvalidArgument as exc:
        raise InvalidConfiguration(str(exc)) from exc
    logger.debug(
        "Loaded %s: %d outlet(s), %d ingredient(s), %d beverage(s).",
        machine.description, count, len(quantities), len(beverages),
    )
    return machine


def load_machine_file(
    path: str | Path,
    *,
    description: str = "",
    config: DispenserConfig | None = None,
) -> Machine:
    """Read a JSON file and build a machine from it."""
    return load_machine(read_payload(path), description=description, config=config)


def _section(parent: Mapping[str, Any], key: str, where: str) -> Mapping[str, Any]:
    value = parent.get(key)
    if value is None:
        raise InvalidConfiguration(f"Missing '{key}' section in {where}")
    if not isinstance(value, Mapping):
        raise InvalidConfiguration(f"'{key}' section in {where} must be an object")
    return value


def _integer(value: Any, where: str) -> int:
    # bool is an int subclass; true/false are not counts.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(f"{where} must be an integer, got {value!r}")
    return value


def _quantity(value: Any, where: str) -> int:
    quantity = _integer(value, where)
    if quantity < 0:
        raise InvalidConfiguration(f"{where} must be >= 0, got {quantity}")
    return quantity
