"""
Custom exception classes for the rental calendar engine.

These exceptions provide precise error types that controllers can catch
to render friendly messages instead of generic 500 errors. Validation
rejections are NOT exceptions; see rentcal.services.validator.
"""


class CarNotFoundError(Exception):
    """Raised when a car ID cannot be found in the catalog."""

    def __init__(self, message: str = "Error: car not found") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ReservationNotFoundError(Exception):
    """Raised when a reservation record cannot be found in the store."""

    def __init__(self, message: str = "Error: reservation not found") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class InvalidDateRangeError(Exception):
    """Raised when a range is built with start after end or a non-date bound."""

    def __init__(self, message: str = "Error: invalid date range") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ReservationStateError(Exception):
    """Raised when a state transition is not allowed for a reservation."""

    def __init__(self, message: str = "Error: reservation state does not allow this") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message
