"""Recombining trinomial tree dataset."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from barrier_lattice.errors import ArgumentError

MIN_STEPS = 3
PROBABILITY_TOLERANCE = 1e-12


def _frozen_array(values, *, ndim: int) -> np.ndarray:
    arr = np.array(values, dtype=float)
    if arr.ndim != ndim:
        raise ArgumentError(f"expected a {ndim}-D array, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


def check_probability_rows(probabilities: np.ndarray, *, tol: float = PROBABILITY_TOLERANCE) -> bool:
    """True when every row lies in [0, 1] and sums to one within `tol`."""
    if probabilities.ndim != 2 or probabilities.shape[1] != 3:
        return False
    if not np.all(np.isfinite(probabilities)):
        return False
    if np.any(probabilities < 0.0) or np.any(probabilities > 1.0):
        return False
    return bool(np.all(np.abs(probabilities.sum(axis=1) - 1.0) <= tol))


@dataclass(frozen=True, eq=False)
class RecombiningTrinomialTreeData:
    """Immutable state values, transition probabilities and discount factors.

    With `n` steps:
    - `state_values[i]` has `2i + 1` strictly increasing node levels, i = 0..n.
    - `transition_probabilities[i - 1]` has shape `(2i - 1, 3)` and holds the
      (down, middle, up) probabilities from layer `i - 1` into layer `i`.
    - `discount_factors[i - 1]` discounts from layer `i` back to layer `i - 1`.

    Use the 1-based accessors (`transition_probability(i)` etc.) rather than
    indexing the tuples directly.
    """

    state_values: tuple[np.ndarray, ...]
    transition_probabilities: tuple[np.ndarray, ...]
    discount_factors: tuple[float, ...]
    time_to_expiry: float

    def __post_init__(self) -> None:
        states = tuple(_frozen_array(s, ndim=1) for s in self.state_values)
        probs = tuple(_frozen_array(p, ndim=2) for p in self.transition_probabilities)
        dfs = tuple(float(df) for df in self.discount_factors)

        n = len(states) - 1
        if n < MIN_STEPS:
            raise ArgumentError(f"number of steps must be >= {MIN_STEPS}, got {n}")
        if len(probs) != n or len(dfs) != n:
            raise ArgumentError(
                "expected one probability matrix and one discount factor per step"
            )
        if not self.time_to_expiry > 0:
            raise ArgumentError("time_to_expiry must be > 0")

        for i, layer in enumerate(states):
            if layer.size != 2 * i + 1:
                raise ArgumentError(
                    f"layer {i} must have {2 * i + 1} nodes, got {layer.size}"
                )
            if not np.all(np.isfinite(layer)) or np.any(np.diff(layer) <= 0):
                raise ArgumentError(f"state values of layer {i} must be strictly increasing")
        for i, p in enumerate(probs, start=1):
            if p.shape != (2 * i - 1, 3):
                raise ArgumentError(
                    f"transition probabilities into layer {i} must have shape "
                    f"{(2 * i - 1, 3)}, got {p.shape}"
                )
            if not check_probability_rows(p):
                raise ArgumentError(f"invalid transition probabilities into layer {i}")
        if any(not (np.isfinite(df) and df > 0) for df in dfs):
            raise ArgumentError("discount factors must be positive and finite")

        object.__setattr__(self, "state_values", states)
        object.__setattr__(self, "transition_probabilities", probs)
        object.__setattr__(self, "discount_factors", dfs)
        object.__setattr__(self, "time_to_expiry", float(self.time_to_expiry))

    @classmethod
    def of(
        cls,
        state_values: Sequence[Sequence[float]],
        transition_probabilities: Sequence[Sequence[Sequence[float]]],
        discount_factors: Sequence[float],
        time_to_expiry: float,
    ) -> RecombiningTrinomialTreeData:
        return cls(
            state_values=tuple(state_values),
            transition_probabilities=tuple(transition_probabilities),
            discount_factors=tuple(discount_factors),
            time_to_expiry=time_to_expiry,
        )

    @property
    def step_count(self) -> int:
        return len(self.state_values) - 1

    @property
    def dt(self) -> float:
        return self.time_to_expiry / self.step_count

    def state_value(self, layer: int) -> np.ndarray:
        return self.state_values[layer]

    def transition_probability(self, layer: int) -> np.ndarray:
        """Probabilities from layer `layer - 1` into `layer` (1 <= layer <= n)."""
        self._check_step_layer(layer)
        return self.transition_probabilities[layer - 1]

    def discount_factor(self, layer: int) -> float:
        """Discount factor from `layer` back to `layer - 1` (1 <= layer <= n)."""
        self._check_step_layer(layer)
        return self.discount_factors[layer - 1]

    def _check_step_layer(self, layer: int) -> None:
        if not 1 <= layer <= self.step_count:
            raise ArgumentError(f"layer must lie in [1, {self.step_count}], got {layer}")
