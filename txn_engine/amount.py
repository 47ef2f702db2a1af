"""
Fixed-Point Amount Module

Exact, non-negative monetary amounts with four implied fractional digits.
The value is held as an unsigned integer magnitude scaled by 10^4 and bounded
to 128 bits. NEVER uses float; all arithmetic is checked and exact.
"""

import re
from dataclasses import dataclass

from .errors import AmountOverflowError, AmountParseError, AmountUnderflowError


SCALE = 4
SCALE_FACTOR = 10 ** SCALE
MAX_MAGNITUDE = 2 ** 128 - 1
MAX_UNITS_DIGITS = len(str(MAX_MAGNITUDE // SCALE_FACTOR))

# [digits] ['.' digits]; fractional length is checked separately for a clearer error
_AMOUNT_PATTERN = re.compile(r"(?P<units>[0-9]*)(?:\.(?P<fraction>[0-9]*))?")


@dataclass(frozen=True, order=True)
class Amount:
    """
    Immutable fixed-point amount.
    `magnitude` is the value multiplied by 10^4, e.g. 1.5 -> 15000.
    """
    magnitude: int

    def __post_init__(self):
        if isinstance(self.magnitude, bool) or not isinstance(self.magnitude, int):
            raise TypeError("Amount magnitude must be an int")
        if self.magnitude < 0:
            raise AmountUnderflowError("Amount cannot be negative")
        if self.magnitude > MAX_MAGNITUDE:
            raise AmountOverflowError("Amount exceeds maximum representable value")

    @classmethod
    def zero(cls) -> 'Amount':
        return cls(0)

    @classmethod
    def from_magnitude(cls, magnitude: int) -> 'Amount':
        """Build from an already-scaled integer magnitude"""
        return cls(magnitude)

    @classmethod
    def parse(cls, text: str) -> 'Amount':
        """
        Parse decimal text into an Amount

        Accepts an optional integer part and an optional '.' followed by
        1 to 4 digits. Signs, exponents, separators and whitespace are rejected.

        Args:
            text: Decimal string such as "10", "1.5", ".0005"

        Returns:
            Parsed Amount

        Raises:
            AmountParseError: If the text is malformed or out of range
        """
        if not isinstance(text, str):
            raise AmountParseError("Amount must be given as a string")

        match = _AMOUNT_PATTERN.fullmatch(text)
        if not match:
            raise AmountParseError(f"Invalid amount: {text!r}")

        units = match.group("units")
        fraction = match.group("fraction")

        if fraction is not None:
            if not fraction:
                raise AmountParseError(f"Invalid amount: {text!r} (empty fractional part)")
            if len(fraction) > SCALE:
                raise AmountParseError(
                    f"Invalid amount: {text!r} (more than {SCALE} fractional digits)"
                )
        elif not units:
            raise AmountParseError("Invalid amount: empty string")

        # Bounded before int() so oversized text never reaches the int conversion limit
        units = units.lstrip("0")
        if len(units) > MAX_UNITS_DIGITS:
            raise AmountParseError(
                f"Invalid amount: {text[:MAX_UNITS_DIGITS]!r}... (exceeds maximum value)"
            )

        magnitude = int(units or "0") * SCALE_FACTOR
        if fraction:
            magnitude += int(fraction.ljust(SCALE, "0"))

        if magnitude > MAX_MAGNITUDE:
            raise AmountParseError(f"Invalid amount: {text!r} (exceeds maximum value)")

        return cls(magnitude)

    def __add__(self, other: 'Amount') -> 'Amount':
        if not isinstance(other, Amount):
            return NotImplemented
        total = self.magnitude + other.magnitude
        if total > MAX_MAGNITUDE:
            raise AmountOverflowError(f"Cannot add {other} to {self}: limit exceeded")
        return Amount(total)

    def __sub__(self, other: 'Amount') -> 'Amount':
        if not isinstance(other, Amount):
            return NotImplemented
        if other.magnitude > self.magnitude:
            raise AmountUnderflowError(f"Cannot subtract {other} from {self}: insufficient funds")
        return Amount(self.magnitude - other.magnitude)

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.magnitude == 0

    def to_string(self) -> str:
        """Canonical form with exactly four fractional digits"""
        units, fraction = divmod(self.magnitude, SCALE_FACTOR)
        return f"{units}.{fraction:0{SCALE}d}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Amount('{self.to_string()}')"


def parse(text: str) -> Amount:
    """Parse decimal text into an Amount"""
    return Amount.parse(text)


def add(a: Amount, b: Amount) -> Amount:
    """Checked addition; raises AmountOverflowError"""
    return a + b


def sub(a: Amount, b: Amount) -> Amount:
    """Checked subtraction; raises AmountUnderflowError"""
    return a - b


def format_amount(amount: Amount) -> str:
    """Render with exactly four fractional digits"""
    return amount.to_string()
