"""Error taxonomy shared by the tree pricing stack."""


class ArgumentError(ValueError):
    """Malformed or inconsistent inputs (never retried)."""


class CalibrationError(RuntimeError):
    """Implied-tree fitting produced an inadmissible result."""
