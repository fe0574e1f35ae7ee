"""Rush hour -- many callers serving at once.

Demonstrates:
- Concurrent serve() calls from plain threads
- Calls that hit the held admission lock are dropped, not queued
- No ingredient is ever consumed twice: consumed == dispatched * recipe
- Requests stuck too long behind a busy outlet time out (stock stays consumed)
- Observer callbacks for completion and outlet errors

Run: python -m examples.rush_hour
"""

import threading
from collections import Counter

from brewline import Beverage, DispenserConfig, Machine, Recipe, ServeStatus


def main() -> None:
    print("=== Rush Hour ===\n")

    latte = Beverage(
        "latte",
        Recipe("latte", {"espresso": 1, "milk": 3}, prepare_time_ms=50),
    )
    machine = Machine(
        3,
        {"espresso": 20, "milk": 45},
        [latte],
        description="Cafe",
        config=DispenserConfig(shutdown_grace=5.0),
    )

    prepared: list[int] = []
    timed_out: list[int] = []
    machine.on_prepared(lambda outlet_id, beverage, elapsed: prepared.append(outlet_id))
    machine.on_error(
        lambda outlet_id, beverage, error_type, message: timed_out.append(outlet_id)
    )

    statuses: Counter[ServeStatus] = Counter()
    statuses_lock = threading.Lock()
    barrier = threading.Barrier(24)

    def customer(n: int) -> None:
        barrier.wait()
        outcome = machine.serve(n % machine.n_outlets + 1, "latte")
        with statuses_lock:
            statuses[outcome.status] += 1

    with machine:
        threads = [threading.Thread(target=customer, args=(i,)) for i in range(24)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    dispatched = statuses[ServeStatus.DISPATCHED]
    print(f"  dispatched={dispatched}  dropped={statuses[ServeStatus.DROPPED]}"
          f"  rejected={statuses[ServeStatus.REJECTED]}")
    print(f"  espresso left: {machine.quantity('espresso')} (expected {20 - dispatched})")
    print(f"  milk left:     {machine.quantity('milk')} (expected {45 - 3 * dispatched})")
    print(f"  prepared per outlet: {dict(Counter(prepared))}")
    print(f"  timed out per outlet: {dict(Counter(timed_out))}")


if __name__ == "__main__":
    main()
