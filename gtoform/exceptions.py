"""Exceptions raised while building the inputs of the integral engine."""

import enum


class ShellConstructionErrorKind(enum.Enum):
    """The reason a shell could not be constructed."""

    LENGTH_MISMATCH = 1
    EMPTY_CONTRACTION = 2
    NON_POSITIVE_EXPONENT = 3
    INVALID_ANGULAR_MOMENTUM = 4


class ShellConstructionError(ValueError):
    """Raised when the parameters of a shell are inconsistent."""

    def __init__(self, kind: ShellConstructionErrorKind, message: str):
        super().__init__(f"{kind.name}: {message}")
        self.kind = kind
