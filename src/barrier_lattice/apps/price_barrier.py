#!/usr/bin/env python
"""Price one FX single-barrier option on an implied trinomial tree.

Market data is flat: one spot, one zero rate per currency and one implied
volatility. The tree price is logged next to the closed-form reference and,
optionally, a step-count convergence table.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from barrier_lattice.apps._cli import (
    add_dry_run_arg,
    add_print_config_arg,
    collect_logging_overrides,
    log_dry_run,
    print_config,
)
from barrier_lattice.cli import (
    DEFAULT_LOGGING,
    add_config_arg,
    add_logging_args,
    build_config,
    setup_logging_from_config,
)
from barrier_lattice.engines import (
    DEFAULT_STEP_COUNTS,
    BlackBarrierPricer,
    ImpliedTreeBarrierPricer,
    convergence_table,
)
from barrier_lattice.errors import ArgumentError
from barrier_lattice.market import (
    FlatDiscountFactors,
    FlatVolatilitySurface,
    FxVolatilityProvider,
    RatesProvider,
)
from barrier_lattice.products import Barrier, FxSingleBarrierOption, FxVanillaOption
from barrier_lattice.tree.lattice import (
    CoxRossRubinsteinLattice,
    LatticeSpecification,
    TrigeorgisLattice,
)
from barrier_lattice.types import CurrencyAmount, CurrencyPair

LATTICES: dict[str, type] = {
    "crr": CoxRossRubinsteinLattice,
    "trigeorgis": TrigeorgisLattice,
}

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": DEFAULT_LOGGING,
    "dry_run": False,
    "valuation_date": "2024-01-02",
    "market": {
        "currency_pair": "EUR/USD",
        "spot": 1.10,
        "rates": {"EUR": 0.03, "USD": 0.05},
        "volatility": 0.10,
    },
    "option": {
        "put_call": "call",
        "strike": 1.10,
        "expiry": "2024-07-02",
        "notional": 1_000_000.0,
        "long_short": "long",
        "barrier": {"direction": "up", "knock_type": "knock_out", "level": 1.20},
        "rebate": None,
    },
    "tree": {"steps": 101, "lattice": "crr", "local_volatility": True},
    "convergence": {"enabled": False, "step_counts": list(DEFAULT_STEP_COUNTS)},
}


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Price an FX single-barrier option on an implied trinomial tree."
    )
    add_config_arg(parser)
    add_logging_args(parser)
    add_print_config_arg(parser)
    add_dry_run_arg(parser)

    parser.add_argument("--valuation-date", type=str, default=None)
    parser.add_argument("--spot", type=float, default=None)
    parser.add_argument("--volatility", type=float, default=None)
    parser.add_argument("--strike", type=float, default=None)
    parser.add_argument("--expiry", type=str, default=None)
    parser.add_argument("--put-call", choices=["call", "put"], default=None)
    parser.add_argument("--barrier", type=float, default=None, help="Barrier level.")
    parser.add_argument("--direction", choices=["up", "down"], default=None)
    parser.add_argument("--knock-type", choices=["knock_in", "knock_out"], default=None)
    parser.add_argument("--steps", type=int, default=None)
    parser.add_argument("--lattice", choices=sorted(LATTICES), default=None)
    parser.add_argument(
        "--convergence",
        action="store_true",
        help="Also log tree prices over several step counts.",
    )
    return parser.parse_args(argv)


def _build_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    market: dict[str, Any] = {}
    option: dict[str, Any] = {}
    barrier: dict[str, Any] = {}
    tree: dict[str, Any] = {}

    if args.valuation_date is not None:
        overrides["valuation_date"] = args.valuation_date
    if args.spot is not None:
        market["spot"] = args.spot
    if args.volatility is not None:
        market["volatility"] = args.volatility
    if args.strike is not None:
        option["strike"] = args.strike
    if args.expiry is not None:
        option["expiry"] = args.expiry
    if args.put_call is not None:
        option["put_call"] = args.put_call
    if args.barrier is not None:
        barrier["level"] = args.barrier
    if args.direction is not None:
        barrier["direction"] = args.direction
    if args.knock_type is not None:
        barrier["knock_type"] = args.knock_type
    if args.steps is not None:
        tree["steps"] = args.steps
    if args.lattice is not None:
        tree["lattice"] = args.lattice

    if barrier:
        option["barrier"] = barrier
    if market:
        overrides["market"] = market
    if option:
        overrides["option"] = option
    if tree:
        overrides["tree"] = tree
    if args.convergence:
        overrides["convergence"] = {"enabled": True}
    if args.dry_run:
        overrides["dry_run"] = True

    logging_overrides = collect_logging_overrides(args)
    if logging_overrides:
        overrides["logging"] = logging_overrides
    return overrides


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def build_lattice(name: str) -> LatticeSpecification:
    try:
        return LATTICES[str(name).lower()]()
    except KeyError as e:
        raise ArgumentError(f"Unknown lattice {name!r}. Available: {sorted(LATTICES)}") from e


def build_market(
    config: Mapping[str, Any],
) -> tuple[RatesProvider, FxVolatilityProvider]:
    """Flat rates and volatility providers from the `market` config section."""
    valuation_date = _as_date(config["valuation_date"])
    market = config["market"]
    pair = CurrencyPair.parse(market["currency_pair"])
    rates = RatesProvider(
        valuation_date=valuation_date,
        fx_rates={pair: float(market["spot"])},
        curves={ccy: FlatDiscountFactors(float(r)) for ccy, r in market["rates"].items()},
    )
    volatilities = FxVolatilityProvider(
        valuation_date=valuation_date,
        currency_pair=pair,
        surface=FlatVolatilitySurface(float(market["volatility"])),
    )
    return rates, volatilities


def build_option(config: Mapping[str, Any]) -> FxSingleBarrierOption:
    """Barrier option from the `option` config section."""
    opt = config["option"]
    underlying = FxVanillaOption.of(
        currency_pair=config["market"]["currency_pair"],
        put_call=opt["put_call"],
        strike=float(opt["strike"]),
        expiry=_as_date(opt["expiry"]),
        notional=float(opt["notional"]),
        long_short=opt["long_short"],
    )
    barrier_cfg = opt["barrier"]
    barrier = Barrier.of(barrier_cfg["direction"], barrier_cfg["knock_type"], barrier_cfg["level"])
    rebate_cfg = opt.get("rebate")
    rebate = None
    if rebate_cfg:
        rebate = CurrencyAmount(str(rebate_cfg["currency"]), float(rebate_cfg["amount"]))
    return FxSingleBarrierOption.of(underlying, barrier, rebate)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    config = build_config(DEFAULT_CONFIG, args.config, _build_overrides(args))
    if args.print_config:
        print_config(config)
        return

    setup_logging_from_config(config.get("logging"))
    logger = logging.getLogger(__name__)

    rates, volatilities = build_market(config)
    option = build_option(config)
    tree_cfg = config["tree"]
    pricer = ImpliedTreeBarrierPricer(
        steps=int(tree_cfg["steps"]),
        lattice=build_lattice(tree_cfg["lattice"]),
        local_volatility=bool(tree_cfg.get("local_volatility", True)),
    )

    logger.info("Valuation:  %s", rates.valuation_date)
    underlying = option.underlying
    logger.info(
        "Option:     %s %s K=%s exp=%s",
        underlying.currency_pair,
        underlying.put_call,
        underlying.strike,
        underlying.expiry,
    )
    logger.info(
        "Barrier:    %s %s H=%s",
        option.barrier.direction,
        option.barrier.knock_type,
        option.barrier.level,
    )
    logger.info("Tree:       %s", pricer)

    if config.get("dry_run"):
        log_dry_run(
            logger,
            {
                "action": "price_barrier",
                "valuation_date": rates.valuation_date,
                "option": config["option"],
                "market": config["market"],
                "tree": tree_cfg,
                "convergence": config["convergence"],
            },
        )
        return

    pv = pricer.present_value(option, rates, volatilities)
    reference = BlackBarrierPricer().price(option, rates, volatilities)
    logger.info("Tree PV:    %s %.2f", pv.currency, pv.amount)
    logger.info(
        "Per unit:   tree %.8f closed form %.8f",
        pv.amount / option.underlying.notional,
        reference,
    )

    conv_cfg = config["convergence"]
    if conv_cfg.get("enabled"):
        table = convergence_table(
            option,
            rates,
            volatilities,
            step_counts=conv_cfg.get("step_counts") or DEFAULT_STEP_COUNTS,
            pricer=pricer,
        )
        logger.info("Convergence:\n%s", table.to_string())


if __name__ == "__main__":
    main()
