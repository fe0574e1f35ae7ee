"""Shared error types and result records for the dispenser."""
from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

OutletId = int


class BrewlineError(Exception):
    """Base class for all dispenser errors."""


class InvalidConfiguration(BrewlineError):
    """Raised when a configuration payload is malformed or incomplete."""


class InvalidArgument(BrewlineError, ValueError):
    """Raised on bad quantities, unknown outlets, beverages or ingredients."""


class LifecycleError(BrewlineError, RuntimeError):
    """Raised when an operation does not fit the machine's on/off state."""


class IngredientsError(BrewlineError):
    """Per-request validation failure. The machine stays healthy."""

    reason = "not usable"

    def __init__(
        self, beverage: str, outlet_id: OutletId, ingredients: Iterable[str],
    ) -> None:
        self.beverage = beverage
        self.outlet_id = outlet_id
        self.ingredients: list[str] = sorted(ingredients)
        super().__init__(
            f"{beverage} cannot be prepared at OUTLET({outlet_id}) because "
            f"ingredient(s) ({', '.join(self.ingredients)}) is(are) {self.reason}!"
        )


class IngredientsUnavailable(IngredientsError):
    reason = "not available"


class IngredientsInsufficient(IngredientsError):
    reason = "not sufficient"


class OutletTimeout(BrewlineError):
    """Raised when an outlet lock is not acquired within its bound."""

    def __init__(self, outlet_id: OutletId, beverage: str, timeout: float) -> None:
        self.outlet_id = outlet_id
        self.beverage = beverage
        self.timeout = timeout
        super().__init__(
            f"Cannot prepare {beverage} in OUTLET({outlet_id}) right now "
            f"(waited {timeout:.3f}s). Please try again later."
        )


class PreparationCancelled(BrewlineError):
    """Raised inside a preparation task when shutdown forces cancellation."""

    def __init__(self, outlet_id: OutletId, beverage: str) -> None:
        self.outlet_id = outlet_id
        self.beverage = beverage
        super().__init__(
            f"Preparation of {beverage} at OUTLET({outlet_id}) was cancelled"
        )


class ServeStatus(Enum):
    DISPATCHED = "dispatched"
    DROPPED = "dropped"
    REJECTED = "rejected"


class PrepareStatus(Enum):
    PREPARED = "prepared"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class PrepareResult:
    """Final state of one preparation task.

    Attributes:
        outlet_id: Outlet the task ran on.
        beverage: Beverage name.
        status: How the task ended.
        elapsed: Seconds the outlet was held (0.0 if never acquired).
        detail: Human-readable message for non-PREPARED outcomes.
    """

    outlet_id: OutletId
    beverage: str
    status: PrepareStatus
    elapsed: float = 0.0
    detail: str = ""

    @property
    def prepared(self) -> bool:
        return self.status is PrepareStatus.PREPARED


@dataclass(frozen=True)
class ServeOutcome:
    """What a single ``Machine.serve`` call did.

    Attributes:
        outlet_id: Requested outlet.
        beverage: Requested beverage name.
        status: DISPATCHED, DROPPED (admission busy) or REJECTED (ingredients).
        error: The ingredients error for REJECTED outcomes.
        future: Resolves to a PrepareResult for DISPATCHED outcomes.
    """

    outlet_id: OutletId
    beverage: str
    status: ServeStatus
    error: IngredientsError | None = None
    future: Future[PrepareResult] | None = None

    @property
    def accepted(self) -> bool:
        return self.status is ServeStatus.DISPATCHED
