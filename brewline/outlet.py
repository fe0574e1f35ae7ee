"""Outlet - one unit of dispensing capacity with bounded exclusive use."""
from __future__ import annotations

import logging
import threading
import time

from brewline.recipe import Beverage
from brewline.types import (
    OutletId,
    OutletTimeout,
    PreparationCancelled,
    PrepareResult,
    PrepareStatus,
)

logger = logging.getLogger(__name__)


class Outlet:
    """A dispensing slot guarded by its own lock.

    The outlet never touches the ingredient stock. By the time ``prepare``
    runs, the machine has already reserved the recipe's ingredients; the
    outlet only serializes the physical preparation.
    """

    def __init__(self, outlet_id: OutletId) -> None:
        self._id = outlet_id
        self._lock = threading.Lock()

    @property
    def id(self) -> OutletId:
        return self._id

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def prepare(
        self, beverage: Beverage, cancel: threading.Event | None = None,
    ) -> PrepareResult:
        """Occupy the outlet for the recipe's preparation time.

        Waits at most twice the preparation time for the outlet to free up.
        Raises OutletTimeout when that bound passes, and PreparationCancelled
        when *cancel* is set during the preparation delay.
        """
        duration = beverage.recipe.prepare_seconds
        timeout = 2 * duration

        if self._lock.locked():
            logger.info("Somebody already preparing a beverage at %s.", self)

        if not self._lock.acquire(timeout=timeout):
            raise OutletTimeout(self._id, beverage.name, timeout)

        started = time.monotonic()
        try:
            logger.info(
                "Preparing %s at %s (ETA = %.1f seconds).",
                beverage.name, self, duration,
            )
            if cancel is None:
                time.sleep(duration)
            elif cancel.wait(duration):
                raise PreparationCancelled(self._id, beverage.name)
        finally:
            self._lock.release()

        elapsed = time.monotonic() - started
        logger.info("Prepared %s at %s.", beverage.name, self)
        return PrepareResult(
            outlet_id=self._id,
            beverage=beverage.name,
            status=PrepareStatus.PREPARED,
            elapsed=elapsed,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outlet):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Outlet({self._id})"

    def __str__(self) -> str:
        return f"OUTLET({self._id})"
