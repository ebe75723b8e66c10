"""Exceptions raised by the occupancy simulation."""

from typing import Optional


class InvalidParameter(ValueError):
    """Raised for bad counts, shapes, spreads or effect configurations.

    Subclasses ValueError so callers that already catch ValueError for bad
    configuration keep working.
    """


class NumericOverflow(ArithmeticError):
    """Raised when a linear predictor is not finite.

    Finite extremes are clamped before the logistic transform; only inf/nan
    values end up here.
    """

    def __init__(
        self,
        quantity: str,
        n_bad: int,
        message: Optional[str] = None,
    ):
        self.quantity = quantity
        self.n_bad = n_bad

        if message is None:
            message = (
                f"{quantity}: {n_bad} non-finite value(s); check the spreads "
                f"of the generating distributions"
            )

        super().__init__(message)
