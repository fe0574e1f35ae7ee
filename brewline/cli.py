"""Command-line demo: load a machine, serve a sequence, report, shut down.

Run: brewline examples/chai_point.json --serve 1:hot_tea --serve 2:hot_coffee
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Sequence

from brewline.config import DispenserConfig
from brewline.loader import load_machine_file
from brewline.machine import Machine
from brewline.report import render_details, render_low_stock, render_outcome, render_result
from brewline.types import (
    InvalidArgument,
    InvalidConfiguration,
    LifecycleError,
    ServeOutcome,
)


def parse_serve(text: str) -> tuple[int, str]:
    """Parse ``OUTLET:BEVERAGE`` into (outlet_no, beverage_name)."""
    outlet, sep, beverage = text.partition(":")
    if not sep or not beverage:
        raise argparse.ArgumentTypeError(
            f"expected OUTLET:BEVERAGE, got {text!r}"
        )
    try:
        outlet_no = int(outlet)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"outlet must be an integer, got {outlet!r}"
        ) from None
    return outlet_no, beverage


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="brewline",
        description="Run a beverage machine from a JSON configuration file",
    )
    p.add_argument("config", metavar="CONFIG", help="Path to the JSON configuration")
    p.add_argument("--serve", action="append", type=parse_serve, default=[],
                   metavar="OUTLET:BEVERAGE",
                   help="Serve request; repeatable (default: every beverage, round-robin)")
    p.add_argument("--name", default="Chai Point", help="Machine name (default: Chai Point)")
    p.add_argument("--pause-ms", type=int, default=100,
                   help="Pause between serve calls in ms (default: 100)")
    p.add_argument("--prepare-ms", type=int, default=None,
                   help="Preparation time per beverage in ms (default: 5000)")
    p.add_argument("--threshold", type=int, default=None,
                   help="Low stock threshold (default: 50)")
    p.add_argument("--rollback-on-timeout", action="store_true",
                   help="Return reserved ingredients when an outlet times out")
    p.add_argument("-q", "--quiet", action="store_true",
                   help="Only print warnings and the final report")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> DispenserConfig:
    defaults = DispenserConfig()
    return DispenserConfig(
        low_stock_threshold=(
            args.threshold if args.threshold is not None else defaults.low_stock_threshold
        ),
        prepare_time_ms=(
            args.prepare_ms if args.prepare_ms is not None else defaults.prepare_time_ms
        ),
        rollback_on_timeout=args.rollback_on_timeout,
    )


def default_requests(machine: Machine) -> list[tuple[int, str]]:
    """Every catalog beverage, assigned to outlets round-robin."""
    return [
        (i % machine.n_outlets + 1, beverage.name)
        for i, beverage in enumerate(machine.beverages())
    ]


def run(
    machine: Machine, requests: Sequence[tuple[int, str]], pause: float,
) -> list[ServeOutcome]:
    """Serve *requests* in order. Per-request errors are printed, not raised."""
    outcomes: list[ServeOutcome] = []
    for outlet_no, beverage in requests:
        try:
            outcome = machine.serve(outlet_no, beverage)
        except InvalidArgument as exc:
            print(exc)
        else:
            print(render_outcome(outcome))
            outcomes.append(outcome)
        if pause > 0:
            time.sleep(pause)
        print()

    low = machine.show_low_quantity_ingredients()
    if low is not None:
        print(render_low_stock(low, machine.description))
        print()
    return outcomes


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(message)s",
    )

    try:
        config = build_config(args)
        machine = load_machine_file(args.config, description=args.name, config=config)
    except (InvalidConfiguration, InvalidArgument) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    requests = args.serve or default_requests(machine)

    try:
        machine.start()
        try:
            print()
            print(render_details(machine))
            print()
            outcomes = run(machine, requests, args.pause_ms / 1000)
        finally:
            # Shut the pool down on any exit, including KeyboardInterrupt.
            machine.close()
    except LifecycleError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for outcome in outcomes:
        if outcome.future is not None and not outcome.future.cancelled():
            print(render_result(outcome.future.result()))
    print()
    print(render_details(machine))
    return 0


if __name__ == "__main__":
    sys.exit(main())
