"""Backward induction over a recombining trinomial tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from barrier_lattice.errors import ArgumentError
from barrier_lattice.tree.data import RecombiningTrinomialTreeData
from barrier_lattice.tree.lattice import LatticeSpecification, build_uniform_tree
from barrier_lattice.tree.option_functions import (
    KnockoutOptionFunction,
    OptionFunction,
    VanillaOptionFunction,
    intrinsic_value,
)

logger = logging.getLogger(__name__)

# Allowed mismatch between a payoff expiry and the tree horizon.
HORIZON_TOLERANCE = 1e-12


def _unsupported(function: object) -> TypeError:
    return TypeError(f"Unsupported option function: {type(function).__name__}")


def check_alignment(function: OptionFunction, data: RecombiningTrinomialTreeData) -> None:
    """Raise unless the payoff fits the tree.

    The payoff expiry must equal the tree horizon and a knock-out must carry
    one rebate per layer.

    Raises:
        ArgumentError: On a horizon or rebate-length mismatch.
    """
    if not isinstance(function, (VanillaOptionFunction, KnockoutOptionFunction)):
        raise _unsupported(function)
    if abs(function.time_to_expiry - data.time_to_expiry) > HORIZON_TOLERANCE:
        raise ArgumentError(
            f"Option expiry {function.time_to_expiry} differs from tree horizon "
            f"{data.time_to_expiry}"
        )
    if isinstance(function, KnockoutOptionFunction) and function.step_count != data.step_count:
        raise ArgumentError(
            f"rebate has {function.step_count + 1} values but the tree has "
            f"{data.step_count + 1} layers"
        )


def discounted_expectation(
    discount_factor: float, probabilities: np.ndarray, child_values: np.ndarray
) -> np.ndarray:
    """`df * (down * v[j] + middle * v[j + 1] + up * v[j + 2])` for every parent `j`."""
    v = np.asarray(child_values, dtype=float)
    p = np.asarray(probabilities, dtype=float)
    return discount_factor * (p[:, 0] * v[:-2] + p[:, 1] * v[1:-1] + p[:, 2] * v[2:])


def payoff_at_expiry(
    function: OptionFunction, state_values: np.ndarray, layer: int
) -> np.ndarray:
    """Values at the last layer.

    Raises:
        ArgumentError: For a knock-out whose barrier lies outside the layer.
        TypeError: For an unknown payoff function.
    """
    if isinstance(function, VanillaOptionFunction):
        return intrinsic_value(state_values, function.strike, function.sign)
    if isinstance(function, KnockoutOptionFunction):
        function.check_covered(state_values)
        raw = intrinsic_value(state_values, function.strike, function.sign)
        return function.apply_barrier(raw, state_values, layer)
    raise _unsupported(function)


def next_layer_values(
    function: OptionFunction,
    discount_factor: float,
    probabilities: np.ndarray,
    state_values: np.ndarray,
    child_values: np.ndarray,
    layer: int,
) -> np.ndarray:
    """Values at `layer` from the values of layer `layer + 1`."""
    if isinstance(function, VanillaOptionFunction):
        return discounted_expectation(discount_factor, probabilities, child_values)
    if isinstance(function, KnockoutOptionFunction):
        raw = discounted_expectation(discount_factor, probabilities, child_values)
        return function.apply_barrier(raw, state_values, layer)
    raise _unsupported(function)


def option_values(
    function: OptionFunction, data: RecombiningTrinomialTreeData
) -> list[np.ndarray]:
    """Node values of every layer, index 0 being the valuation date."""
    check_alignment(function, data)
    n = data.step_count
    values = payoff_at_expiry(function, data.state_value(n), n)
    layers = [values]
    for layer in range(n - 1, -1, -1):
        values = next_layer_values(
            function,
            data.discount_factor(layer + 1),
            data.transition_probability(layer + 1),
            data.state_value(layer),
            values,
            layer,
        )
        layers.append(values)
    layers.reverse()
    return layers


@dataclass(frozen=True)
class TrinomialTree:
    """Stateless pricer of payoff functions on a calibrated tree."""

    def price(self, function: OptionFunction, data: RecombiningTrinomialTreeData) -> float:
        check_alignment(function, data)
        n = data.step_count
        values = payoff_at_expiry(function, data.state_value(n), n)
        for layer in range(n - 1, -1, -1):
            values = next_layer_values(
                function,
                data.discount_factor(layer + 1),
                data.transition_probability(layer + 1),
                data.state_value(layer),
                values,
                layer,
            )
        price = float(values[0])
        logger.debug("Tree price %s steps=%d -> %.10f", type(function).__name__, n, price)
        return price


def price_uniform(
    function: OptionFunction,
    lattice: LatticeSpecification,
    spot: float,
    volatility: float,
    rate: float,
    dividend: float,
    steps: int,
) -> float:
    """Price on a constant-volatility tree spanning the function's expiry."""
    data = build_uniform_tree(
        lattice,
        spot=spot,
        volatility=volatility,
        rate=rate,
        dividend=dividend,
        time_to_expiry=function.time_to_expiry,
        steps=steps,
    )
    return TrinomialTree().price(function, data)
