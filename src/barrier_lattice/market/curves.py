"""Discount-factor curves consumed by the tree calibrator and pricers.

Only the "discount factor / zero rate at time t" capability is needed by the
tree code, so curves are modelled as a small protocol plus two concrete
implementations: a flat continuously-compounded rate and a zero-rate curve
linearly interpolated between pillars (flat extrapolation).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np

from barrier_lattice.errors import ArgumentError


@runtime_checkable
class DiscountFactors(Protocol):
    """Zero-rate / discount-factor provider on a year-fraction axis."""

    def zero_rate(self, t: float) -> float:
        """Continuously-compounded zero rate for maturity `t`."""

    def discount_factor(self, t: float) -> float:
        """Present value of one unit paid at `t`."""


@dataclass(frozen=True)
class FlatDiscountFactors:
    """Constant continuously-compounded rate."""

    rate: float = 0.0

    def __post_init__(self) -> None:
        if not np.isfinite(self.rate):
            raise ArgumentError("rate must be finite")

    def zero_rate(self, t: float) -> float:
        return float(self.rate)

    def discount_factor(self, t: float) -> float:
        return float(np.exp(-self.rate * max(t, 0.0)))

    def shifted(self, shift: float) -> FlatDiscountFactors:
        return FlatDiscountFactors(self.rate + shift)


@dataclass(frozen=True)
class ZeroRateDiscountFactors:
    """Zero rates linearly interpolated in time, flat outside the pillars."""

    times: tuple[float, ...]
    rates: tuple[float, ...]
    _times: np.ndarray = field(init=False, repr=False, compare=False)
    _rates: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        times = np.asarray(self.times, dtype=float)
        rates = np.asarray(self.rates, dtype=float)
        if times.ndim != 1 or times.size == 0:
            raise ArgumentError("times must be a non-empty 1-D sequence")
        if times.shape != rates.shape:
            raise ArgumentError("times and rates must have the same length")
        if np.any(np.diff(times) <= 0):
            raise ArgumentError("times must be strictly increasing")
        if not np.all(np.isfinite(rates)):
            raise ArgumentError("rates must be finite")

        object.__setattr__(self, "times", tuple(times.tolist()))
        object.__setattr__(self, "rates", tuple(rates.tolist()))
        object.__setattr__(self, "_times", times)
        object.__setattr__(self, "_rates", rates)

    def zero_rate(self, t: float) -> float:
        return float(np.interp(t, self._times, self._rates))

    def discount_factor(self, t: float) -> float:
        if t <= 0:
            return 1.0
        return float(np.exp(-self.zero_rate(t) * t))

    def shifted(self, shift: float) -> ZeroRateDiscountFactors:
        return ZeroRateDiscountFactors(
            self.times, tuple(r + shift for r in self.rates)
        )
