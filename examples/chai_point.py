"""Chai Point -- the classic four-outlet walkthrough.

Demonstrates:
- Loading a machine from a JSON configuration file
- Serving on an outlet that is still busy (the request waits, bounded)
- A request rejected because an earlier one already consumed the stock
- A request rejected because an ingredient is not stocked at all
- An invalid outlet number failing fast
- Listing low-stock ingredients and shutting down

Run: python -m examples.chai_point
"""

import logging
import time
from pathlib import Path

from brewline import DispenserConfig, InvalidArgument, load_machine_file
from brewline.report import render_details, render_low_stock, render_outcome

CONFIG = Path(__file__).with_name("chai_point.json")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="  %(message)s")
    print("=== Chai Point ===\n")

    # Shorter than the real 5s so the demo finishes quickly.
    config = DispenserConfig(prepare_time_ms=1000, shutdown_grace=10.0)
    machine = load_machine_file(CONFIG, description="Chai Point", config=config)

    machine.start()
    print(render_details(machine))
    print()

    requests = [
        (1, "hot_tea"),
        # Outlet 1 is still busy: this one waits for it.
        (1, "hot_coffee"),
        # Not enough hot_milk left after the previous coffee.
        (2, "hot_coffee"),
        # green_mixture is not stocked.
        (3, "green_tea"),
        (4, "black_tea"),
        # Only four outlets.
        (5, "hot_coffee"),
    ]
    for outlet_no, beverage in requests:
        try:
            print(render_outcome(machine.serve(outlet_no, beverage)))
        except InvalidArgument as exc:
            print(exc)
        time.sleep(0.1)
        print()

    low = machine.show_low_quantity_ingredients()
    if low is not None:
        print(render_low_stock(low, machine.description))
        print()

    machine.close()
    print()
    print(render_details(machine))


if __name__ == "__main__":
    main()
