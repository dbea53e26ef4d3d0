"""Lattice specifications for uniform-volatility trinomial trees.

A specification maps (volatility, rates, dt) to the node spacing and the
(down, middle, up) transition probabilities of one time layer. Specifications
are small immutable values passed explicitly to the calibrator and to
`build_uniform_tree`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from barrier_lattice.errors import ArgumentError
from barrier_lattice.tree.data import MIN_STEPS, RecombiningTrinomialTreeData


@runtime_checkable
class LatticeSpecification(Protocol):
    """Node spacing and branching probabilities for one trinomial step."""

    def space_step(self, volatility: float, dt: float) -> float:
        """Distance between adjacent nodes in log space."""

    def factors(self, volatility: float, dt: float) -> tuple[float, float, float]:
        """Return (down, middle, up) multipliers."""

    def probabilities(
        self, volatility: float, rate: float, dividend: float, dt: float
    ) -> tuple[float, float, float]:
        """Return (down, middle, up) probabilities."""


def lattice_factors(
    lattice: LatticeSpecification, volatility: float, dt: float
) -> tuple[float, float, float]:
    """Return the (down, middle, up) multipliers of a specification."""
    dx = lattice.space_step(volatility, dt)
    return float(np.exp(-dx)), 1.0, float(np.exp(dx))


def _check_inputs(volatility: float, dt: float) -> None:
    if not volatility > 0:
        raise ArgumentError("volatility must be > 0")
    if not dt > 0:
        raise ArgumentError("dt must be > 0")


def _checked(down: float, middle: float, up: float) -> tuple[float, float, float]:
    probs = (float(down), float(middle), float(up))
    if any(not 0.0 <= p <= 1.0 for p in probs):
        raise ArgumentError(
            f"Invalid trinomial probabilities {probs}; increase steps or check inputs."
        )
    return probs


@dataclass(frozen=True)
class CoxRossRubinsteinLattice:
    """Trinomial CRR lattice built from two binomial half steps.

    dx = σ sqrt(2 dt) and the middle node keeps the parent level.
    """

    def space_step(self, volatility: float, dt: float) -> float:
        _check_inputs(volatility, dt)
        return float(volatility * np.sqrt(2.0 * dt))

    def factors(self, volatility: float, dt: float) -> tuple[float, float, float]:
        return lattice_factors(self, volatility, dt)

    def probabilities(
        self, volatility: float, rate: float, dividend: float, dt: float
    ) -> tuple[float, float, float]:
        _check_inputs(volatility, dt)
        half = np.exp(0.5 * (rate - dividend) * dt)
        up_half = np.exp(volatility * np.sqrt(0.5 * dt))
        down_half = 1.0 / up_half
        up = ((half - down_half) / (up_half - down_half)) ** 2
        down = ((up_half - half) / (up_half - down_half)) ** 2
        return _checked(down, 1.0 - up - down, up)


@dataclass(frozen=True)
class TrigeorgisLattice:
    """Log-space trinomial lattice with dx = σ sqrt(3 dt)."""

    def space_step(self, volatility: float, dt: float) -> float:
        _check_inputs(volatility, dt)
        return float(volatility * np.sqrt(3.0 * dt))

    def factors(self, volatility: float, dt: float) -> tuple[float, float, float]:
        return lattice_factors(self, volatility, dt)

    def probabilities(
        self, volatility: float, rate: float, dividend: float, dt: float
    ) -> tuple[float, float, float]:
        _check_inputs(volatility, dt)
        dx = self.space_step(volatility, dt)
        nu = rate - dividend - 0.5 * volatility**2
        second = (volatility**2 * dt + nu**2 * dt**2) / dx**2
        drift = nu * dt / dx
        up = 0.5 * (second + drift)
        down = 0.5 * (second - drift)
        return _checked(down, 1.0 - second, up)


def build_uniform_tree(
    lattice: LatticeSpecification,
    spot: float,
    volatility: float,
    rate: float,
    dividend: float,
    time_to_expiry: float,
    steps: int,
) -> RecombiningTrinomialTreeData:
    """Build a constant-volatility tree from a lattice specification.

    Node `j` of layer `i` sits at `spot * exp((j - i) dx)`; every layer uses
    the same probabilities and the discount factor `exp(-rate dt)`.
    """
    if steps < MIN_STEPS:
        raise ArgumentError(f"number of steps must be >= {MIN_STEPS}, got {steps}")
    if not spot > 0:
        raise ArgumentError("spot must be > 0")
    if not time_to_expiry > 0:
        raise ArgumentError("time_to_expiry must be > 0")

    dt = time_to_expiry / steps
    dx = lattice.space_step(volatility, dt)
    row = np.array(lattice.probabilities(volatility, rate, dividend, dt))
    df = float(np.exp(-rate * dt))

    state_values = [spot * np.exp(dx * np.arange(-i, i + 1)) for i in range(steps + 1)]
    probabilities = [np.tile(row, (2 * i - 1, 1)) for i in range(1, steps + 1)]
    return RecombiningTrinomialTreeData.of(
        state_values=state_values,
        transition_probabilities=probabilities,
        discount_factors=[df] * steps,
        time_to_expiry=time_to_expiry,
    )
