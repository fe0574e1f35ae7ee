"""Text rendering of machine state. Functions here return strings only."""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from brewline.stock import Ingredient
from brewline.types import PrepareResult, ServeOutcome, ServeStatus

if TYPE_CHECKING:
    from brewline.machine import Machine


def render_details(machine: Machine) -> str:
    """Name, outlets, ingredients and beverages of a machine."""
    lines = [f"Name = {machine.description}", ""]

    lines.append(f"Outlets = {machine.n_outlets}")
    for outlet in machine.outlets():
        status = " [busy]" if outlet.busy else ""
        lines.append(f"{outlet}{status}")
    lines.append("")

    ingredients = machine.ingredients()
    lines.append(f"Ingredients = {len(ingredients)}")
    lines.extend(str(ingredient) for ingredient in ingredients)
    lines.append("")

    beverages = machine.beverages()
    lines.append(f"Beverages = {len(beverages)}")
    lines.extend(str(beverage) for beverage in beverages)
    return "\n".join(lines)


def render_low_stock(
    ingredients: Iterable[Ingredient], description: str = "Machine",
) -> str:
    low = list(ingredients)
    if not low:
        return f"{description} has enough quantity of each ingredient!"
    lines = ["Following ingredients are low in quantity"]
    lines.extend(f"\t{ingredient}" for ingredient in low)
    return "\n".join(lines)


def render_outcome(outcome: ServeOutcome) -> str:
    """One line describing what a serve call did."""
    where = f"OUTLET({outcome.outlet_id})"
    if outcome.status is ServeStatus.DISPATCHED:
        return f"{outcome.beverage} dispatched to {where}."
    if outcome.status is ServeStatus.DROPPED:
        return f"{outcome.beverage} at {where} dropped: machine busy."
    return str(outcome.error)


def render_result(result: PrepareResult) -> str:
    where = f"OUTLET({result.outlet_id})"
    if result.prepared:
        return f"{result.beverage} is prepared at {where} ({result.elapsed:.2f}s)."
    return f"{result.beverage} at {where} {result.status.value}: {result.detail}"
