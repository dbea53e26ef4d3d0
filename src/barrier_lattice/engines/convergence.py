"""Step-count convergence report of the tree pricer against a closed form."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

import pandas as pd

from barrier_lattice.engines.barrier_pricer import ImpliedTreeBarrierPricer
from barrier_lattice.engines.base import PriceModel
from barrier_lattice.engines.black_barrier_pricer import BlackBarrierPricer
from barrier_lattice.market import FxVolatilityProvider, RatesProvider
from barrier_lattice.products import FxSingleBarrierOption

logger = logging.getLogger(__name__)

DEFAULT_STEP_COUNTS = (11, 21, 41, 61, 81, 101, 121, 151)


def convergence_table(
    option: FxSingleBarrierOption,
    rates: RatesProvider,
    volatilities: FxVolatilityProvider,
    step_counts: Iterable[int] = DEFAULT_STEP_COUNTS,
    pricer: ImpliedTreeBarrierPricer | None = None,
    reference: PriceModel | None = None,
) -> pd.DataFrame:
    """Tree prices for several step counts next to a reference price.

    Returns a frame indexed by `steps` with columns `tree_price`,
    `reference_price`, `error` (tree minus reference) and `abs_error`.
    """
    base = pricer if pricer is not None else ImpliedTreeBarrierPricer()
    reference = reference if reference is not None else BlackBarrierPricer()
    reference_price = reference.price(option, rates, volatilities)

    rows = []
    for steps in step_counts:
        tree_price = replace(base, steps=int(steps)).price(option, rates, volatilities)
        rows.append({"steps": int(steps), "tree_price": tree_price})
        logger.debug("steps=%d tree price %.10f", steps, tree_price)

    out = pd.DataFrame(rows).set_index("steps")
    out["reference_price"] = reference_price
    out["error"] = out["tree_price"] - out["reference_price"]
    out["abs_error"] = out["error"].abs()
    return out
