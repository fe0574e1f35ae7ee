"""Machine - admission control, stock reservation and dispatch to outlets.

A single admission lock serializes every read-validate-reserve sequence on
the shared ingredient stock. Once a reservation succeeds the lock is released
and the preparation is handed to a worker pool, where the target outlet's own
lock bounds how long the request may wait.
"""
from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Iterable, Mapping

from brewline.config import DispenserConfig
from brewline.outlet import Outlet
from brewline.recipe import Beverage
from brewline.stock import Ingredient, Stock
from brewline.types import (
    IngredientsError,
    IngredientsInsufficient,
    IngredientsUnavailable,
    InvalidArgument,
    LifecycleError,
    OutletId,
    OutletTimeout,
    PreparationCancelled,
    PrepareResult,
    PrepareStatus,
    ServeOutcome,
    ServeStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Beverage Machine"

# Callback signatures.
DispatchFn = Callable[[OutletId, str], None]
RejectFn = Callable[[OutletId, str, IngredientsError], None]
PreparedFn = Callable[[OutletId, str, float], None]
ErrorFn = Callable[[OutletId, str, str, str], None]


class Machine:
    """A pool of outlets drawing from one shared ingredient stock.

    The machine is the only owner of its stock. ``serve`` validates and
    reserves ingredients under the admission lock, then submits the
    preparation to a pool of ``workers_per_outlet * n_outlets`` threads.

    The admission lock is taken without blocking: a ``serve`` or
    ``show_low_quantity_ingredients`` call that finds it held is dropped
    rather than queued.
    """

    def __init__(
        self,
        n_outlets: int,
        quantities: Mapping[str, int],
        beverages: Iterable[Beverage],
        *,
        description: str = "",
        config: DispenserConfig | None = None,
    ) -> None:
        if n_outlets < 1:
            raise InvalidArgument(f"n_outlets must be >= 1, got {n_outlets}")
        self.config: DispenserConfig = config if config is not None else DispenserConfig()
        self._description = description or DEFAULT_DESCRIPTION

        # Outlet ids are scoped to this machine: 1..n in creation order.
        ids = itertools.count(1)
        self._outlets: dict[OutletId, Outlet] = {}
        for _ in range(n_outlets):
            outlet = Outlet(next(ids))
            self._outlets[outlet.id] = outlet

        self._stock = Stock(quantities)

        self._beverages: dict[str, Beverage] = {}
        for beverage in beverages:
            if beverage.name in self._beverages:
                raise InvalidArgument(f"Duplicate beverage '{beverage.name}'")
            self._beverages[beverage.name] = beverage

        self._admission = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._cancel = threading.Event()
        self._inflight: dict[Future[PrepareResult], Beverage] = {}
        self._inflight_lock = threading.Lock()

        # Observable callbacks
        self._on_dispatch: list[DispatchFn] = []
        self._on_reject: list[RejectFn] = []
        self._on_prepared: list[PreparedFn] = []
        self._on_error: list[ErrorFn] = []

    # --- Read-only accessors ---

    @property
    def description(self) -> str:
        return self._description

    @property
    def n_outlets(self) -> int:
        return len(self._outlets)

    @property
    def is_running(self) -> bool:
        return self._executor is not None

    def outlets(self) -> list[Outlet]:
        return [self._outlets[oid] for oid in sorted(self._outlets)]

    def outlet(self, outlet_no: int) -> Outlet:
        """Look up an outlet by number. Raises InvalidArgument if unknown."""
        outlet = self._outlets.get(outlet_no)
        if outlet is None:
            raise InvalidArgument(
                f"Choose a valid outlet among the {self.n_outlets} available "
                f"for this {self._description}! Got {outlet_no!r}."
            )
        return outlet

    def beverages(self) -> list[Beverage]:
        return list(self._beverages.values())

    def beverage(self, name: str) -> Beverage:
        """Look up a beverage by name. Raises InvalidArgument if unknown."""
        beverage = self._beverages.get(name)
        if beverage is None:
            raise InvalidArgument(
                f"{name!r} is not being served by this {self._description}! "
                "Enter a valid beverage!"
            )
        return beverage

    def ingredients(self) -> list[Ingredient]:
        """Detached copies of every stocked ingredient."""
        return list(self._stock)

    def quantity(self, name: str) -> int:
        return self._stock.quantity(name)

    def snapshot(self) -> dict[str, Any]:
        """JSON-compatible view of the machine for reporting."""
        return {
            "description": self._description,
            "running": self.is_running,
            "outlets": [
                {"id": outlet.id, "busy": outlet.busy} for outlet in self.outlets()
            ],
            "ingredients": self._stock.snapshot(),
            "beverages": {
                beverage.name: {
                    "ingredients": dict(beverage.recipe.ingredients),
                    "prepare_time_ms": beverage.recipe.prepare_time_ms,
                }
                for beverage in self._beverages.values()
                if beverage.has_recipe
            },
        }

    # --- Callback registration ---

    def on_dispatch(self, cb: DispatchFn) -> None:
        """Register callback fired after a reservation is handed to the pool.

        Signature: (outlet_id, beverage_name) -> None.
        """
        self._on_dispatch.append(cb)

    def on_reject(self, cb: RejectFn) -> None:
        """Register callback fired when ingredient validation fails.

        Signature: (outlet_id, beverage_name, error) -> None.
        """
        self._on_reject.append(cb)

    def on_prepared(self, cb: PreparedFn) -> None:
        """Register callback fired from a worker when a beverage is ready.

        Signature: (outlet_id, beverage_name, elapsed_seconds) -> None.
        """
        self._on_prepared.append(cb)

    def on_error(self, cb: ErrorFn) -> None:
        """Register callback fired from a worker when a preparation fails.

        Signature: (outlet_id, beverage_name, error_type, message) -> None.
        ``error_type`` is one of "timeout", "cancelled" or "task_error".
        """
        self._on_error.append(cb)

    # --- Lifecycle ---

    def start(self) -> None:
        """Turn the machine on. Raises LifecycleError if already running."""
        if self.is_running:
            raise LifecycleError(
                f"{self._description} is already turned on and running!"
            )
        self._cancel = threading.Event()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.workers_per_outlet * self.n_outlets,
            thread_name_prefix="brewline-outlet",
        )
        logger.info("Turned on %s!", self._description)

    def close(self) -> None:
        """Turn the machine off.

        Lets queued and running preparations finish for one grace period,
        then cancels whatever is left and waits one more grace period.
        Raises LifecycleError if the machine is not running, or if work is
        still outstanding after both grace periods.
        """
        if not self.is_running:
            raise LifecycleError(f"{self._description} is already turned off!")
        executor = self._executor
        assert executor is not None
        # New serve calls fail from here on.
        self._executor = None
        executor.shutdown(wait=False)

        grace = self.config.shutdown_grace
        _done, pending = wait(self._inflight_futures(), timeout=grace)
        if pending:
            logger.warning(
                "%d preparation(s) still running after %.1fs, cancelling.",
                len(pending), grace,
            )
            self._cancel.set()
            executor.shutdown(wait=False, cancel_futures=True)
            _done, pending = wait(pending, timeout=grace)
            if pending:
                raise LifecycleError(
                    f"Unable to turn off {self._description} after "
                    f"{2 * grace:.1f} seconds!"
                )
        logger.info("Turned off %s!", self._description)

    def __enter__(self) -> Machine:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.is_running:
            self.close()

    # --- Serving ---

    def serve(self, outlet_no: int, beverage_name: str) -> ServeOutcome:
        """Reserve ingredients for a beverage and dispatch it to an outlet.

        Raises LifecycleError when the machine is off and InvalidArgument for
        an unknown outlet or beverage; neither has side effects. Ingredient
        shortages are reported through the returned outcome (REJECTED) and
        leave the stock untouched. A call that finds the admission lock held
        returns a DROPPED outcome.
        """
        if not self.is_running:
            raise LifecycleError(
                f"{self._description} is not turned on! "
                f"Cannot serve {beverage_name}!"
            )
        outlet = self.outlet(outlet_no)
        beverage = self.beverage(beverage_name)
        recipe = beverage.recipe

        if not self._admission.acquire(blocking=False):
            logger.info(
                "%s is busy, dropping %s at %s.",
                self._description, beverage.name, outlet,
            )
            return ServeOutcome(outlet.id, beverage.name, ServeStatus.DROPPED)

        error: IngredientsError | None = None
        try:
            missing = self._stock.missing(recipe.ingredients)
            if missing:
                error = IngredientsUnavailable(beverage.name, outlet.id, missing)
            else:
                short = self._stock.insufficient(recipe.ingredients)
                if short:
                    error = IngredientsInsufficient(beverage.name, outlet.id, short)
                else:
                    self._stock.reserve(recipe.ingredients)
        finally:
            self._admission.release()

        if error is not None:
            logger.warning("%s", error)
            self._fire_on_reject(outlet.id, beverage.name, error)
            return ServeOutcome(
                outlet.id, beverage.name, ServeStatus.REJECTED, error=error,
            )

        future = self._dispatch(outlet, beverage)
        self._fire_on_dispatch(outlet.id, beverage.name)
        return ServeOutcome(
            outlet.id, beverage.name, ServeStatus.DISPATCHED, future=future,
        )

    def add_ingredient(self, ingredient: str | Ingredient, quantity: int) -> int:
        """Top up a stocked ingredient. Returns its new quantity.

        Takes the admission lock in blocking mode so a top-up never
        interleaves with a reservation.
        """
        if isinstance(ingredient, Ingredient):
            name = ingredient.name
        elif isinstance(ingredient, str):
            name = ingredient
        else:
            raise InvalidArgument(
                "Ingredient is not defined! Cannot add quantity to it!"
            )
        with self._admission:
            new_quantity = self._stock.add(name, quantity)
        logger.info("Added %d to %s!", quantity, name)
        return new_quantity

    def show_low_quantity_ingredients(self) -> list[Ingredient] | None:
        """Ingredients below the configured threshold.

        Returns None, without looking at the stock, when the admission lock
        is held by someone else.
        """
        if not self._admission.acquire(blocking=False):
            logger.info(
                "%s is busy, skipping low quantity report.", self._description,
            )
            return None
        try:
            return self._stock.below(self.config.low_stock_threshold)
        finally:
            self._admission.release()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _dispatch(self, outlet: Outlet, beverage: Beverage) -> Future[PrepareResult]:
        """Submit a preparation task. Refunds the reservation if it cannot."""
        executor = self._executor
        future: Future[PrepareResult] | None = None
        # Submit and record under one lock so close() never misses a task.
        with self._inflight_lock:
            if executor is not None:
                try:
                    future = executor.submit(
                        self._prepare, outlet, beverage, self._cancel,
                    )
                except RuntimeError:
                    # Executor shut down between the running check and here.
                    future = None
                else:
                    self._inflight[future] = beverage

        if future is None:
            self._refund(beverage)
            raise LifecycleError(
                f"{self._description} was turned off before {beverage.name} "
                f"could be dispatched to {outlet}!"
            )
        future.add_done_callback(self._forget)
        logger.debug("Dispatched %s to %s.", beverage.name, outlet)
        return future

    def _prepare(
        self, outlet: Outlet, beverage: Beverage, cancel: threading.Event,
    ) -> PrepareResult:
        """Worker body. Every failure is reported here, never raised."""
        try:
            result = outlet.prepare(beverage, cancel)
        except OutletTimeout as exc:
            logger.warning("%s", exc)
            self._after_failed_preparation(beverage)
            self._fire_on_error(outlet.id, beverage.name, "timeout", str(exc))
            return PrepareResult(
                outlet.id, beverage.name, PrepareStatus.TIMED_OUT, detail=str(exc),
            )
        except PreparationCancelled as exc:
            logger.warning("%s", exc)
            self._after_failed_preparation(beverage)
            self._fire_on_error(outlet.id, beverage.name, "cancelled", str(exc))
            return PrepareResult(
                outlet.id, beverage.name, PrepareStatus.CANCELLED, detail=str(exc),
            )
        except Exception as exc:
            logger.exception("Failed to prepare %s at %s", beverage.name, outlet)
            self._after_failed_preparation(beverage)
            self._fire_on_error(outlet.id, beverage.name, "task_error", str(exc))
            return PrepareResult(
                outlet.id, beverage.name, PrepareStatus.FAILED, detail=str(exc),
            )

        self._fire_on_prepared(outlet.id, beverage.name, result.elapsed)
        return result

    def _after_failed_preparation(self, beverage: Beverage) -> None:
        if self.config.rollback_on_timeout:
            self._refund(beverage)
        else:
            logger.info(
                "Ingredients reserved for %s stay consumed.", beverage.name,
            )

    def _refund(self, beverage: Beverage) -> None:
        """Return a reservation to the stock. Blocks for the admission lock."""
        with self._admission:
            self._stock.release(beverage.recipe.ingredients)
        logger.info("Returned ingredients reserved for %s to stock.", beverage.name)

    def _forget(self, future: Future[PrepareResult]) -> None:
        with self._inflight_lock:
            beverage = self._inflight.pop(future, None)
        # Cancelled before a worker picked it up: _prepare never ran.
        if future.cancelled() and beverage is not None:
            self._after_failed_preparation(beverage)

    def _inflight_futures(self) -> list[Future[PrepareResult]]:
        with self._inflight_lock:
            return list(self._inflight)

    def _fire_on_dispatch(self, outlet_id: OutletId, beverage: str) -> None:
        """Fire on_dispatch callbacks with error isolation."""
        for cb in self._on_dispatch:
            try:
                cb(outlet_id, beverage)
            except Exception:
                logger.exception("on_dispatch callback error")

    def _fire_on_reject(
        self, outlet_id: OutletId, beverage: str, error: IngredientsError,
    ) -> None:
        """Fire on_reject callbacks with error isolation."""
        for cb in self._on_reject:
            try:
                cb(outlet_id, beverage, error)
            except Exception:
                logger.exception("on_reject callback error")

    def _fire_on_prepared(
        self, outlet_id: OutletId, beverage: str, elapsed: float,
    ) -> None:
        """Fire on_prepared callbacks with error isolation."""
        for cb in self._on_prepared:
            try:
                cb(outlet_id, beverage, elapsed)
            except Exception:
                logger.exception("on_prepared callback error")

    def _fire_on_error(
        self, outlet_id: OutletId, beverage: str, error_type: str, message: str,
    ) -> None:
        """Fire on_error callbacks with error isolation."""
        for cb in self._on_error:
            try:
                cb(outlet_id, beverage, error_type, message)
            except Exception:
                logger.exception("on_error callback error")
