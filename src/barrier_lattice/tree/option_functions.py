"""Payoff functions priced by the trinomial tree engine.

`OptionFunction` is a closed set of immutable payoff descriptions. They carry
contract data only; the backward-induction dispatch lives in
`barrier_lattice.tree.engine`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from barrier_lattice.errors import ArgumentError
from barrier_lattice.tree.data import MIN_STEPS
from barrier_lattice.types import BarrierDirection, PutCall, PutCallInput, normalize_put_call

# Relative distance under which a node is treated as sitting on the barrier.
BARRIER_HIT_TOLERANCE = 1e-12


def _check_contract(strike: float, time_to_expiry: float) -> None:
    if not strike > 0:
        raise ArgumentError("strike must be > 0")
    if not time_to_expiry >= 0:
        raise ArgumentError("time_to_expiry must be >= 0")


def intrinsic_value(state_values: np.ndarray, strike: float, sign: float) -> np.ndarray:
    """Elementwise `max(sign * (S - K), 0)`."""
    return np.maximum(sign * (np.asarray(state_values, dtype=float) - strike), 0.0)


@dataclass(frozen=True)
class VanillaOptionFunction:
    """European call or put on the tree's underlying."""

    strike: float
    time_to_expiry: float
    put_call: PutCall

    def __post_init__(self) -> None:
        object.__setattr__(self, "put_call", normalize_put_call(self.put_call))
        _check_contract(self.strike, self.time_to_expiry)

    @classmethod
    def of(
        cls, strike: float, time_to_expiry: float, put_call: PutCallInput
    ) -> VanillaOptionFunction:
        return cls(float(strike), float(time_to_expiry), normalize_put_call(put_call))

    @property
    def sign(self) -> float:
        return self.put_call.sign


@dataclass(frozen=True)
class KnockoutOptionFunction:
    """European call or put extinguished when the barrier is touched.

    `rebate[i]` is the amount paid at a node of layer `i` that has breached
    the barrier, so the vector has one entry per layer (`steps + 1`).
    """

    strike: float
    time_to_expiry: float
    put_call: PutCall
    barrier_direction: BarrierDirection
    barrier_level: float
    rebate: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "put_call", normalize_put_call(self.put_call))
        object.__setattr__(self, "barrier_direction", BarrierDirection(self.barrier_direction))
        object.__setattr__(self, "rebate", tuple(float(r) for r in self.rebate))
        _check_contract(self.strike, self.time_to_expiry)
        if not self.barrier_level > 0:
            raise ArgumentError("barrier level must be > 0")
        if len(self.rebate) < MIN_STEPS + 1:
            raise ArgumentError(
                f"rebate must have one value per layer (at least {MIN_STEPS + 1})"
            )
        if any(not np.isfinite(r) or r < 0 for r in self.rebate):
            raise ArgumentError("rebate values must be finite and >= 0")

    @classmethod
    def of(
        cls,
        strike: float,
        time_to_expiry: float,
        put_call: PutCallInput,
        barrier_direction: BarrierDirection | str,
        barrier_level: float,
        rebate: Sequence[float] | np.ndarray,
    ) -> KnockoutOptionFunction:
        return cls(
            strike=float(strike),
            time_to_expiry=float(time_to_expiry),
            put_call=normalize_put_call(put_call),
            barrier_direction=BarrierDirection(barrier_direction),
            barrier_level=float(barrier_level),
            rebate=tuple(np.asarray(rebate, dtype=float).ravel()),
        )

    @property
    def sign(self) -> float:
        return self.put_call.sign

    @property
    def step_count(self) -> int:
        return len(self.rebate) - 1

    def rebate_at(self, layer: int) -> float:
        if not 0 <= layer <= self.step_count:
            raise ArgumentError(f"layer must lie in [0, {self.step_count}], got {layer}")
        return self.rebate[layer]

    def knocked(self, state_values: np.ndarray) -> np.ndarray:
        """Mask of nodes on or beyond the barrier."""
        s = np.asarray(state_values, dtype=float)
        hit = np.abs(s - self.barrier_level) <= BARRIER_HIT_TOLERANCE * self.barrier_level
        if self.barrier_direction is BarrierDirection.UP:
            return (s >= self.barrier_level) | hit
        return (s <= self.barrier_level) | hit

    def check_covered(self, state_values: np.ndarray) -> None:
        """Raise unless the barrier lies strictly inside the layer's span."""
        s = np.asarray(state_values, dtype=float)
        if not s[0] < self.barrier_level < s[-1]:
            raise ArgumentError(
                f"barrier not covered by tree: level {self.barrier_level} outside "
                f"({s[0]}, {s[-1]})"
            )

    def apply_barrier(
        self, raw_values: np.ndarray, state_values: np.ndarray, layer: int
    ) -> np.ndarray:
        """Replace knocked nodes by the rebate and blend the node next to the barrier.

        With the bracketing pair `s[i] <= H < s[i + 1]`, the alive node `near`
        (`i` for an up barrier, `i + 1` for a down barrier) receives
        `w * rebate + (1 - w) * raw[near]` with `w = |s[far] - H| / (s[i+1] - s[i])`.
        No blending happens when a node sits on the barrier.
        """
        s = np.asarray(state_values, dtype=float)
        rebate = self.rebate_at(layer)
        knocked = self.knocked(s)
        values = np.where(knocked, rebate, raw_values)

        h = self.barrier_level
        if not s[0] < h < s[-1]:
            return values
        if np.any(np.abs(s - h) <= BARRIER_HIT_TOLERANCE * h):
            return values

        i = int(np.searchsorted(s, h, side="right")) - 1
        gap = s[i + 1] - s[i]
        if self.barrier_direction is BarrierDirection.UP:
            near, far = i, i + 1
        else:
            near, far = i + 1, i
        w = abs(s[far] - h) / gap
        values[near] = w * rebate + (1.0 - w) * raw_values[near]
        return values


OptionFunction = VanillaOptionFunction | KnockoutOptionFunction
