"""Risk measures for barrier options."""

from .sensitivities import BarrierSensitivities, fd_sensitivities

__all__ = ["BarrierSensitivities", "fd_sensitivities"]
