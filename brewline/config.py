"""Dispenser configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass

from brewline.types import InvalidArgument

@dataclass(frozen=True)
class DispenserConfig:
    """Immutable tuning knobs for a machine.

    Attributes:
        low_stock_threshold: Ingredients strictly below this are reported as low.
        prepare_time_ms: Preparation duration the loader assigns to every recipe.
        workers_per_outlet: Worker pool capacity is this times the outlet count.
        shutdown_grace: Seconds per grace period when closing the machine.
        rollback_on_timeout: Refund reserved ingredients when a preparation
            times out, is cancelled or fails instead of keeping them consumed.
    """

    low_stock_threshold: int = 50
    prepare_time_ms: int = 5000
    workers_per_outlet: int = 2
    shutdown_grace: float = 60.0
    rollback_on_timeout: bool = False

    def __post_init__(self) -> None:
        if self.low_stock_threshold < 0:
            raise InvalidArgument(
                f"low_stock_threshold must be >= 0, got {self.low_stock_threshold}"
            )
        if self.prepare_time_ms < 0:
            raise InvalidArgument(
                f"prepare_time_ms must be >= 0, got {self.prepare_time_ms}"
            )
        if self.workers_per_outlet < 1:
            raise InvalidArgument(
                f"workers_per_outlet must be >= 1, got {self.workers_per_outlet}"
            )
        if self.shutdown_grace <= 0:
            raise InvalidArgument(
                f"shutdown_grace must be > 0, got {self.shutdown_grace}"
            )
