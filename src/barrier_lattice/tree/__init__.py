"""Recombining trinomial trees: dataset, lattices, calibration and pricing."""

from .calibration import ImpliedTrinomialTreeCalibrator, calibrate_implied_tree
from .data import RecombiningTrinomialTreeData
from .engine import (
    TrinomialTree,
    check_alignment,
    next_layer_values,
    option_values,
    payoff_at_expiry,
    price_uniform,
)
from .lattice import (
    CoxRossRubinsteinLattice,
    LatticeSpecification,
    TrigeorgisLattice,
    build_uniform_tree,
    lattice_factors,
)
from .option_functions import KnockoutOptionFunction, OptionFunction, VanillaOptionFunction

__all__ = [
    "RecombiningTrinomialTreeData",
    "LatticeSpecification",
    "CoxRossRubinsteinLattice",
    "TrigeorgisLattice",
    "lattice_factors",
    "build_uniform_tree",
    "ImpliedTrinomialTreeCalibrator",
    "calibrate_implied_tree",
    "OptionFunction",
    "VanillaOptionFunction",
    "KnockoutOptionFunction",
    "TrinomialTree",
    "check_alignment",
    "payoff_at_expiry",
    "next_layer_values",
    "option_values",
    "price_uniform",
]
