"""Transaction engine exceptions."""

from typing import Optional


class TxnEngineError(Exception):
    """Base class for transaction engine errors."""


class CriticalError(TxnEngineError):
    """Raised when the input source cannot be acquired before processing starts."""


class ExternalError(TxnEngineError):
    """Raised for a structurally malformed record; aborts the run."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.message = message
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class AmountError(TxnEngineError, ValueError):
    """Base class for fixed-point amount errors."""


class AmountParseError(AmountError):
    """Raised when text does not match the amount grammar or exceeds the bound."""


class AmountOverflowError(AmountError):
    """Raised when an addition exceeds the maximum representable magnitude."""


class AmountUnderflowError(AmountError):
    """Raised when a subtraction would produce a negative amount."""


class LedgerError(TxnEngineError):
    """Raised when a ledger invariant would be violated."""
