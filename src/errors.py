from typing import Optional


class PaymentsEngineError(Exception):
    """Base class for errors raised by the payments engine."""


class InputError(PaymentsEngineError):
    """Raised when the input cannot be read or decoded into transactions. Aborts the run."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class InvalidStateTransition(PaymentsEngineError):
    """Raised when the ledger is asked for a dispute state change the lifecycle does not allow."""
