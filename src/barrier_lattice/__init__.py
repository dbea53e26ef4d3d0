"""Implied trinomial tree pricing of FX single-barrier options."""

from .engines import BlackBarrierPricer, ImpliedTreeBarrierPricer, convergence_table
from .errors import ArgumentError, CalibrationError
from .products import Barrier, FxSingleBarrierOption, FxVanillaOption
from .risk import BarrierSensitivities, fd_sensitivities
from .tree import (
    CoxRossRubinsteinLattice,
    KnockoutOptionFunction,
    RecombiningTrinomialTreeData,
    TrigeorgisLattice,
    TrinomialTree,
    VanillaOptionFunction,
    calibrate_implied_tree,
)
from .types import (
    BarrierDirection,
    CurrencyAmount,
    CurrencyPair,
    KnockType,
    LongShort,
    PutCall,
)

__all__ = [
    "ArgumentError",
    "CalibrationError",
    "PutCall",
    "BarrierDirection",
    "KnockType",
    "LongShort",
    "CurrencyPair",
    "CurrencyAmount",
    "Barrier",
    "FxVanillaOption",
    "FxSingleBarrierOption",
    "RecombiningTrinomialTreeData",
    "CoxRossRubinsteinLattice",
    "TrigeorgisLattice",
    "calibrate_implied_tree",
    "VanillaOptionFunction",
    "KnockoutOptionFunction",
    "TrinomialTree",
    "ImpliedTreeBarrierPricer",
    "BlackBarrierPricer",
    "convergence_table",
    "BarrierSensitivities",
    "fd_sensitivities",
]
