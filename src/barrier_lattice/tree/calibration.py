"""Local-volatility calibration of a recombining trinomial tree.

The tree is grown layer by layer from the valuation date:

1. Layer `k` keeps layer `k - 1` as its interior, so every parent's middle
   child sits at the parent level, and extends each edge by one lattice step
   sized with the local volatility found at that edge.
2. Each parent gets the (down, middle, up) probabilities matching the
   deterministic forward and the local variance `F² (exp(σ² dt) - 1)`.
   When that exact solution falls outside [0, 1] the forward is still matched
   and the second moment is projected onto the interval of attainable values.
   A forward outside the children's span cannot be matched and fails.
3. Layers are discounted with the single-period forward discount factor of
   the interest-rate curve.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np

from barrier_lattice.errors import ArgumentError, CalibrationError
from barrier_lattice.tree.data import (
    MIN_STEPS,
    PROBABILITY_TOLERANCE,
    RecombiningTrinomialTreeData,
    check_probability_rows,
)
from barrier_lattice.tree.lattice import CoxRossRubinsteinLattice, LatticeSpecification

logger = logging.getLogger(__name__)

VolatilityFunction = Callable[[float, float], float]
RateFunction = Callable[[float], float]

# Round-off tolerance when snapping probabilities onto [0, 1].
_SNAP_TOLERANCE = 1e-13


def _local_volatility(surface: VolatilityFunction, t: float, level: float) -> float:
    vol = float(surface(t, level))
    if not np.isfinite(vol) or vol <= 0:
        raise CalibrationError(
            f"Volatility surface returned {vol!r} at t={t:.6f}, level={level:.6f}"
        )
    return vol


def _log_discount(rate: RateFunction, t: float) -> float:
    if t == 0:
        return 0.0
    value = float(rate(t))
    if not np.isfinite(value):
        raise CalibrationError(f"Rate curve returned {value!r} at t={t:.6f}")
    return -value * t


def _solve_moments(
    a: np.ndarray, b: np.ndarray, xd: np.ndarray, xu: np.ndarray
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Solve (down, middle, up) for central first moment `a` and second `b`."""
    up = (b - a * xd) / (xu * (xu - xd))
    down = (b - a * xu) / (xd * (xd - xu))
    return down, 1.0 - up - down, up


def _snap(p: np.ndarray) -> np.ndarray:
    p = np.where((p < 0.0) & (p > -_SNAP_TOLERANCE), 0.0, p)
    return np.where((p > 1.0) & (p < 1.0 + _SNAP_TOLERANCE), 1.0, p)


def transition_probabilities(
    parents: np.ndarray,
    children: np.ndarray,
    growth: float,
    volatilities: np.ndarray,
    dt: float,
    *,
    layer: int = 0,
) -> tuple[np.ndarray, int]:
    """Moment-matched transition matrix from `parents` into `children`.

    Returns the `(len(parents), 3)` matrix and the number of rows whose
    variance had to be projected to keep every probability in [0, 1].
    """
    forward = parents * growth
    variance = forward**2 * np.expm1(volatilities**2 * dt)
    a = forward - parents
    b = variance + a**2
    xd = children[:-2] - parents
    xu = children[2:] - parents

    down, middle, up = _solve_moments(a, b, xd, xu)
    bad = (
        (down < 0) | (down > 1) | (middle < 0) | (middle > 1) | (up < 0) | (up > 1)
    )
    n_adjusted = int(bad.sum())
    if n_adjusted:
        lower = np.maximum(a * xd, a * xu)
        upper = a * (xd + xu) - xd * xu
        unreachable = bad & (lower > upper)
        if unreachable.any():
            j = int(np.flatnonzero(unreachable)[0])
            raise CalibrationError(
                f"Forward {forward[j]:.6f} outside children "
                f"[{children[j]:.6f}, {children[j + 2]:.6f}] at layer {layer}"
            )
        b_adj = np.where(bad, np.clip(b, lower, upper), b)
        down, middle, up = _solve_moments(a, b_adj, xd, xu)

    matrix = np.column_stack([_snap(down), _snap(middle), _snap(up)])
    if not check_probability_rows(matrix, tol=PROBABILITY_TOLERANCE):
        raise CalibrationError(f"Inadmissible transition probabilities at layer {layer}")
    return matrix, n_adjusted


@dataclass(frozen=True)
class ImpliedTrinomialTreeCalibrator:
    """Build a recombining trinomial tree fitted to a volatility surface."""

    steps: int
    time_to_expiry: float
    lattice: LatticeSpecification = field(default_factory=CoxRossRubinsteinLattice)

    def __post_init__(self) -> None:
        if self.steps < MIN_STEPS:
            raise ArgumentError(f"number of steps must be >= {MIN_STEPS}, got {self.steps}")
        if not self.time_to_expiry > 0:
            raise ArgumentError("time_to_expiry must be > 0")

    @property
    def dt(self) -> float:
        return self.time_to_expiry / self.steps

    def calibrate(
        self,
        implied_vol_surface: VolatilityFunction,
        spot: float,
        interest_rate: RateFunction,
        dividend_rate: RateFunction,
    ) -> RecombiningTrinomialTreeData:
        """Calibrate the tree.

        Args:
            implied_vol_surface: `(time, level) -> vol`, read as the local
                volatility at that node.
            spot: Level of the single node at layer 0.
            interest_rate: Zero rate of the discounting curve at a time.
            dividend_rate: Zero rate of the dividend/foreign curve at a time.

        Raises:
            ArgumentError: If `spot` is not positive.
            CalibrationError: If the surface returns a non-finite or
                non-positive volatility, or a layer admits no valid
                probabilities.
        """
        if not spot > 0:
            raise ArgumentError("spot must be > 0")

        dt = self.dt
        times = dt * np.arange(self.steps + 1)
        log_df_rate = np.array([_log_discount(interest_rate, t) for t in times])
        log_df_div = np.array([_log_discount(dividend_rate, t) for t in times])

        state_values = [np.array([float(spot)])]
        probabilities: list[np.ndarray] = []
        discount_factors: list[float] = []
        total_adjusted = 0

        for k in range(1, self.steps + 1):
            parents = state_values[-1]
            t_prev = float(times[k - 1])

            vols = np.array([_local_volatility(implied_vol_surface, t_prev, s) for s in parents])
            low = parents[0] * np.exp(-self.lattice.space_step(vols[0], dt))
            high = parents[-1] * np.exp(self.lattice.space_step(vols[-1], dt))
            children = np.concatenate(([low], parents, [high]))

            growth = float(
                np.exp(
                    (log_df_div[k] - log_df_div[k - 1])
                    - (log_df_rate[k] - log_df_rate[k - 1])
                )
            )
            matrix, n_adjusted = transition_probabilities(
                parents, children, growth, vols, dt, layer=k
            )
            total_adjusted += n_adjusted

            state_values.append(children)
            probabilities.append(matrix)
            discount_factors.append(float(np.exp(log_df_rate[k] - log_df_rate[k - 1])))

        if total_adjusted:
            n_nodes = self.steps**2
            logger.warning(
                "Projected local variance at %d of %d tree nodes to keep "
                "probabilities in [0, 1]",
                total_adjusted,
                n_nodes,
            )
        logger.debug(
            "Calibrated implied trinomial tree steps=%d T=%.6f spot=%.6f span=[%.6f, %.6f]",
            self.steps,
            self.time_to_expiry,
            spot,
            state_values[-1][0],
            state_values[-1][-1],
        )

        return RecombiningTrinomialTreeData.of(
            state_values=state_values,
            transition_probabilities=probabilities,
            discount_factors=discount_factors,
            time_to_expiry=self.time_to_expiry,
        )


def calibrate_implied_tree(
    implied_vol_surface: VolatilityFunction,
    spot: float,
    interest_rate: RateFunction,
    dividend_rate: RateFunction,
    steps: int,
    time_to_expiry: float,
    lattice: LatticeSpecification | None = None,
) -> RecombiningTrinomialTreeData:
    """Functional shortcut for :class:`ImpliedTrinomialTreeCalibrator`."""
    calibrator = ImpliedTrinomialTreeCalibrator(
        steps=steps,
        time_to_expiry=time_to_expiry,
        lattice=lattice if lattice is not None else CoxRossRubinsteinLattice(),
    )
    return calibrator.calibrate(implied_vol_surface, spot, interest_rate, dividend_rate)
