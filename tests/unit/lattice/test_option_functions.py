import numpy as np
import pytest

from barrier_lattice.errors import ArgumentError
from barrier_lattice.tree import (
    CoxRossRubinsteinLattice,
    KnockoutOptionFunction,
    VanillaOptionFunction,
    build_uniform_tree,
    next_layer_values,
    payoff_at_expiry,
)
from barrier_lattice.types import BarrierDirection, PutCall

STATES = np.array([1.0, 2.0, 3.0, 4.0, 5.0])


def _knockout(direction, level, rebate=0.5, strike=2.5, put_call="call", steps=4):
    return KnockoutOptionFunction.of(
        strike=strike,
        time_to_expiry=1.0,
        put_call=put_call,
        barrier_direction=direction,
        barrier_level=level,
        rebate=[rebate] * (steps + 1),
    )


def test_vanilla_payoff_is_intrinsic_value():
    call = VanillaOptionFunction.of(2.5, 1.0, "call")
    put = VanillaOptionFunction.of(2.5, 1.0, "P")

    np.testing.assert_allclose(payoff_at_expiry(call, STATES, 4), [0.0, 0.0, 0.5, 1.5, 2.5])
    np.testing.assert_allclose(payoff_at_expiry(put, STATES, 4), [1.5, 0.5, 0.0, 0.0, 0.0])
    assert put.put_call is PutCall.PUT


def test_vanilla_next_layer_is_discounted_expectation():
    vanilla = VanillaOptionFunction.of(2.5, 1.0, "call")
    probs = np.array([[0.2, 0.5, 0.3], [0.1, 0.6, 0.3], [0.25, 0.5, 0.25]])
    child = np.array([0.0, 1.0, 2.0, 3.0, 4.0])

    out = next_layer_values(vanilla, 0.9, probs, STATES[1:4], child, 1)

    expected = 0.9 * np.array([0.5 + 0.6, 0.1 + 1.2 + 0.9, 0.5 + 1.5 + 1.0])
    np.testing.assert_allclose(out, expected)


def test_up_barrier_blends_node_below_barrier():
    fn = _knockout("up", 3.75)
    raw = np.array([10.0, 20.0, 30.0, 40.0, 50.0])

    out = fn.apply_barrier(raw, STATES, 2)

    # Nodes 3 and 4 are knocked; node 2 is 0.25 of a gap from the far node.
    np.testing.assert_allclose(out, [10.0, 20.0, 0.25 * 0.5 + 0.75 * 30.0, 0.5, 0.5])


def test_down_barrier_mirrors_up_barrier():
    fn = _knockout("down", 2.25)
    raw = np.array([10.0, 20.0, 30.0, 40.0, 50.0])

    out = fn.apply_barrier(raw, STATES, 2)

    np.testing.assert_allclose(out, [0.5, 0.5, 0.25 * 0.5 + 0.75 * 30.0, 40.0, 50.0])


def test_node_closer_to_barrier_gets_more_rebate_weight():
    raw = np.full(5, 10.0)
    close = _knockout("up", 3.1).apply_barrier(raw, STATES, 0)[2]
    far = _knockout("up", 3.9).apply_barrier(raw, STATES, 0)[2]
    assert close < far < 10.0


@pytest.mark.parametrize("direction", ["up", "down"])
def test_exact_node_hit_skips_blending(direction):
    fn = _knockout(direction, 3.0, rebate=0.25)
    raw = np.array([10.0, 20.0, 30.0, 40.0, 50.0])

    out = fn.apply_barrier(raw, STATES, 1)

    assert out[2] == 0.25
    if direction == "up":
        np.testing.assert_array_equal(out, [10.0, 20.0, 0.25, 0.25, 0.25])
    else:
        np.testing.assert_array_equal(out, [0.25, 0.25, 0.25, 40.0, 50.0])


def test_exact_node_barrier_on_uniform_tree():
    data = build_uniform_tree(CoxRossRubinsteinLattice(), 100.0, 0.2, 0.01, 0.0, 1.0, 10)
    expiry = data.state_value(10)
    level = float(expiry[14])
    fn = KnockoutOptionFunction.of(100.0, 1.0, "call", "up", level, [3.0] * 11)

    values = payoff_at_expiry(fn, expiry, 10)

    assert values[14] == 3.0
    assert values[13] == pytest.approx(expiry[13] - 100.0)


def test_rebate_vector_is_indexed_by_layer():
    fn = KnockoutOptionFunction.of(2.5, 1.0, "call", "up", 3.5, [0.0, 1.0, 2.0, 3.0, 4.0])
    out = fn.apply_barrier(np.zeros(5), STATES, 3)
    assert out[3] == out[4] == 3.0


@pytest.mark.parametrize("level", [0.5, 1.0, 5.0, 7.0])
def test_barrier_outside_expiry_layer_raises(level):
    direction = "down" if level <= 1.0 else "up"
    fn = _knockout(direction, level)
    with pytest.raises(ArgumentError, match="barrier not covered by tree"):
        payoff_at_expiry(fn, STATES, 4)


def test_factories_validate_inputs():
    with pytest.raises(ArgumentError, match="strike"):
        VanillaOptionFunction.of(0.0, 1.0, "call")
    with pytest.raises(ArgumentError, match="time_to_expiry"):
        VanillaOptionFunction.of(1.0, -1.0, "call")
    with pytest.raises(ArgumentError, match="put_call"):
        VanillaOptionFunction.of(1.0, 1.0, "straddle")
    with pytest.raises(ArgumentError, match="barrier level"):
        _knockout("up", 0.0)
    with pytest.raises(ArgumentError, match="one value per layer"):
        _knockout("up", 3.5, steps=2)
    with pytest.raises(ArgumentError, match="rebate values"):
        _knockout("up", 3.5, rebate=-1.0)
    with pytest.raises(ValueError):
        _knockout("sideways", 3.5)


def test_knockout_fields_are_normalised():
    fn = _knockout("down", 2.0)
    assert fn.barrier_direction is BarrierDirection.DOWN
    assert fn.step_count == 4
    assert fn.rebate == (0.5,) * 5
    with pytest.raises(ArgumentError, match="layer must lie in"):
        fn.rebate_at(5)
