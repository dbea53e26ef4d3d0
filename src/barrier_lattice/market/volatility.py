"""Implied-volatility surfaces and their local-volatility view.

The tree calibrator only needs `(time, level) -> vol`; FX providers add the
currency pair and forward to the lookup. Surfaces here are deterministic and
defined over the whole lattice span.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import numpy as np
from scipy.interpolate import PchipInterpolator

from barrier_lattice.errors import ArgumentError


@runtime_checkable
class VolatilitySurface(Protocol):
    """Black implied volatility as a function of expiry, strike and forward."""

    def volatility(self, t: float, strike: float, forward: float) -> float:
        """Return the annualized implied volatility in decimals."""


@dataclass(frozen=True)
class FlatVolatilitySurface:
    """Same implied volatility for every expiry and strike."""

    vol: float

    def __post_init__(self) -> None:
        if not self.vol > 0:
            raise ArgumentError("vol must be > 0")

    def volatility(self, t: float, strike: float, forward: float) -> float:
        return float(self.vol)

    def shifted(self, shift: float) -> FlatVolatilitySurface:
        return FlatVolatilitySurface(self.vol + shift)


@dataclass(frozen=True)
class SsviVolatilitySurface:
    """SSVI implied-volatility surface.

    w(k, T) = θ(T)/2 (1 + ρ φ(θ) k + sqrt((φ(θ) k + ρ)^2 + 1 - ρ²)),
    φ(θ) = η θ^{-γ}, k = log(K / F).

    θ(T) is the ATM total variance, interpolated with a monotone PCHIP through
    the `(t_grid, theta_grid)` knots. Below the first knot the ATM volatility
    is held constant.
    """

    rho: float
    eta: float
    gamma: float
    t_grid: tuple[float, ...]
    theta_grid: tuple[float, ...]
    vol_shift: float = 0.0
    _theta_interp: PchipInterpolator = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not -1.0 < self.rho < 1.0:
            raise ArgumentError("rho must lie in (-1, 1)")
        if self.eta <= 0:
            raise ArgumentError("eta must be > 0")
        if not 0.0 < self.gamma < 1.0:
            raise ArgumentError("gamma must lie in (0, 1)")

        t_grid = np.asarray(self.t_grid, dtype=float)
        theta_grid = np.asarray(self.theta_grid, dtype=float)
        if t_grid.ndim != 1 or t_grid.size < 2:
            raise ArgumentError("t_grid needs at least two knots")
        if t_grid.shape != theta_grid.shape:
            raise ArgumentError("t_grid and theta_grid must have the same length")
        if t_grid[0] <= 0 or np.any(np.diff(t_grid) <= 0):
            raise ArgumentError("t_grid must be positive and strictly increasing")
        if np.any(theta_grid <= 0):
            raise ArgumentError("theta_grid must be positive")

        # Calendar no-arbitrage: total ATM variance must not decrease.
        theta_grid = np.maximum.accumulate(theta_grid)
        object.__setattr__(
            self,
            "_theta_interp",
            PchipInterpolator(t_grid, theta_grid, extrapolate=True),
        )

    @staticmethod
    def _phi(theta, eta, gamma):
        return eta * theta ** (-gamma)

    def theta(self, t: float) -> float:
        """ATM total implied variance at expiry `t`."""
        t0 = self.t_grid[0]
        if t < t0:
            return float(self._theta_interp(t0)) * max(t, 0.0) / t0
        return float(self._theta_interp(t))

    def total_variance(self, t: float, k: float) -> float:
        theta = self.theta(t)
        if theta <= 0:
            return 0.0
        phi = self._phi(theta, self.eta, self.gamma)
        return float(
            0.5
            * theta
            * (
                1
                + self.rho * phi * k
                + np.sqrt((phi * k + self.rho) ** 2 + 1 - self.rho**2)
            )
        )

    def volatility(self, t: float, strike: float, forward: float) -> float:
        if strike <= 0 or forward <= 0:
            raise ArgumentError("strike and forward must be > 0")
        t_eff = max(t, 1e-8)
        w = self.total_variance(t_eff, float(np.log(strike / forward)))
        vol = float(np.sqrt(w / t_eff)) + self.vol_shift
        if not vol > 0:
            raise ArgumentError(
                f"Shifted volatility {vol!r} is not positive at t={t}, strike={strike}"
            )
        return vol

    def shifted(self, shift: float) -> SsviVolatilitySurface:
        return SsviVolatilitySurface(
            rho=self.rho,
            eta=self.eta,
            gamma=self.gamma,
            t_grid=self.t_grid,
            theta_grid=self.theta_grid,
            vol_shift=self.vol_shift + shift,
        )


@dataclass(frozen=True)
class LocalVolatilityFromImplied:
    """Dupire local volatility derived from an implied surface.

    Uses Gatheral's total-variance form with finite differences in expiry and
    log-moneyness y = log(K / F(T)):

        σ_loc² = ∂w/∂T / (1 - y/w ∂w/∂y + 1/4 (-1/4 - 1/w + y²/w²)(∂w/∂y)² + 1/2 ∂²w/∂y²)

    Calling the object returns NaN where the local variance is not positive,
    which the calibrator rejects.
    """

    implied_vol: Callable[[float, float], float]
    spot: float
    interest_rate: Callable[[float], float]
    dividend_rate: Callable[[float], float]
    time_step: float = 1e-3
    log_strike_step: float = 1e-3

    def __post_init__(self) -> None:
        if self.spot <= 0:
            raise ArgumentError("spot must be > 0")
        if self.time_step <= 0 or self.log_strike_step <= 0:
            raise ArgumentError("finite-difference steps must be > 0")

    def forward(self, t: float) -> float:
        return float(
            self.spot
            * np.exp((self.interest_rate(t) - self.dividend_rate(t)) * t)
        )

    def _total_variance(self, t: float, y: float) -> float:
        vol = self.implied_vol(t, self.forward(t) * np.exp(y))
        return vol * vol * t

    def __call__(self, t: float, level: float) -> float:
        h = self.time_step
        dy = self.log_strike_step
        t_eff = max(t, h)
        y = float(np.log(level / self.forward(t_eff)))

        w = self._total_variance(t_eff, y)
        if t_eff > h:
            dw_dt = (
                self._total_variance(t_eff + h, y) - self._total_variance(t_eff - h, y)
            ) / (2.0 * h)
        else:
            dw_dt = (self._total_variance(t_eff + h, y) - w) / h
        w_up = self._total_variance(t_eff, y + dy)
        w_dn = self._total_variance(t_eff, y - dy)
        dw_dy = (w_up - w_dn) / (2.0 * dy)
        d2w_dy2 = (w_up - 2.0 * w + w_dn) / (dy * dy)

        denom = (
            1.0
            - y / w * dw_dy
            + 0.25 * (-0.25 - 1.0 / w + y * y / (w * w)) * dw_dy**2
            + 0.5 * d2w_dy2
        )
        local_var = dw_dt / denom
        if not np.isfinite(local_var) or local_var <= 0:
            return float("nan")
        return float(np.sqrt(local_var))
