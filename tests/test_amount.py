"""
Test suite for amount module

Tests parsing, canonical formatting and checked arithmetic of fixed-point
amounts. No value may ever be rounded.
"""

import pytest
from decimal import Decimal

from txn_engine.amount import (
    Amount, MAX_MAGNITUDE, SCALE_FACTOR, add, sub, parse, format_amount
)
from txn_engine.errors import (
    AmountError, AmountParseError, AmountOverflowError, AmountUnderflowError
)


MAX_TEXT = "34028236692093846346337460743176821.1455"


class TestAmountParse:
    """Test Amount.parse grammar"""

    @pytest.mark.parametrize("text,magnitude", [
        ("1.5", 15000),
        ("0.1234", 1234),
        (".0005", 5),
        ("100", 1_000_000),
        ("0.0", 0),
        ("0", 0),
        ("007.10", 71000),
        ("2.", None),
    ])
    def test_valid_and_invalid_grammar(self, text, magnitude):
        """Test representative inputs against the grammar"""
        if magnitude is None:
            with pytest.raises(AmountParseError):
                Amount.parse(text)
        else:
            assert Amount.parse(text).magnitude == magnitude

    @pytest.mark.parametrize("text", [
        "0.12345",
        "1.00000",
        "-1.0",
        "+1.0",
        "1e5",
        "1,000.00",
        " 1.0",
        "1.0 ",
        "1.a",
        "abc",
        "",
        ".",
        "1..2",
        "1.2.3",
        "١٢",
        "1" * 36,
        "1" * 5000,
        "9" * 5000 + ".5",
    ])
    def test_rejected_inputs(self, text):
        """Test that anything outside the grammar is rejected"""
        with pytest.raises(AmountParseError):
            Amount.parse(text)

    def test_fifth_fractional_digit_message(self):
        """Test the error names the fractional digit limit"""
        with pytest.raises(AmountParseError, match="more than 4 fractional digits"):
            Amount.parse("0.123499999")

    def test_maximum_value(self):
        """Test the largest representable value parses and one more does not"""
        amount = Amount.parse(MAX_TEXT)
        assert amount.magnitude == MAX_MAGNITUDE
        assert amount.magnitude == 340282366920938463463374607431768211455

        with pytest.raises(AmountParseError, match="exceeds maximum"):
            Amount.parse("34028236692093846346337460743176821.1456")

        with pytest.raises(AmountParseError, match="exceeds maximum"):
            Amount.parse("99999999999999999999999999999999999999999")

    def test_oversized_integer_part(self):
        """Test very long digit strings fail as parse errors, not int conversion errors"""
        with pytest.raises(AmountParseError, match="exceeds maximum"):
            Amount.parse("1" * 5000)

        assert Amount.parse("0" * 5000 + "1.5") == Amount.parse("1.5")
        assert Amount.parse("0" * 5000) == Amount.zero()

    def test_non_string_rejected(self):
        """Test that floats never become amounts"""
        with pytest.raises(AmountParseError):
            Amount.parse(1.5)

    def test_parse_errors_are_value_errors(self):
        """Test the error hierarchy"""
        with pytest.raises(ValueError):
            parse("bad")
        assert issubclass(AmountParseError, AmountError)


class TestAmountFormat:
    """Test canonical formatting"""

    @pytest.mark.parametrize("magnitude,text", [
        (12345, "1.2345"),
        (100_2345, "100.2345"),
        (2345, "0.2345"),
        (5, "0.0005"),
        (0, "0.0000"),
        (MAX_MAGNITUDE, MAX_TEXT),
    ])
    def test_format(self, magnitude, text):
        """Test exactly four fractional digits are rendered"""
        amount = Amount(magnitude)
        assert amount.to_string() == text
        assert str(amount) == text
        assert format_amount(amount) == text

    @pytest.mark.parametrize("text", ["1.5", ".5", "10", "0.0001", "42.42", MAX_TEXT])
    def test_canonical_form_is_fixed_point(self, text):
        """Test format(parse(s)) is stable and numerically equal to s"""
        once = Amount.parse(text).to_string()
        twice = Amount.parse(once).to_string()

        assert once == twice
        assert Decimal(once) == Decimal(text)

    def test_repr(self):
        assert repr(Amount.parse("2.5")) == "Amount('2.5000')"


class TestAmountArithmetic:
    """Test checked arithmetic"""

    def test_add_and_sub(self):
        """Test exact addition and subtraction"""
        a = Amount.parse("10.0001")
        b = Amount.parse("0.9999")

        assert (a + b) == Amount.parse("11")
        assert add(a, b) == Amount.parse("11")
        assert (a - b) == Amount.parse("9.0002")
        assert sub(a, b) == Amount.parse("9.0002")

    def test_sub_inverts_add(self):
        """Test sub(add(a, b), b) == a"""
        pairs = [("0", "0"), ("1.5", "2.25"), (".0001", "99999.9999"), ("0", MAX_TEXT)]
        for left, right in pairs:
            a, b = Amount.parse(left), Amount.parse(right)
            assert sub(add(a, b), b) == a

    def test_add_overflow(self):
        """Test addition beyond the 128-bit bound raises"""
        with pytest.raises(AmountOverflowError, match="limit exceeded"):
            Amount(MAX_MAGNITUDE) + Amount(1)

    def test_sub_underflow(self):
        """Test subtraction below zero raises"""
        with pytest.raises(AmountUnderflowError, match="insufficient funds"):
            Amount.parse("1") - Amount.parse("1.0001")

    def test_operands_unchanged(self):
        """Test amounts are immutable values"""
        a = Amount.parse("5")
        b = Amount.parse("3")
        a + b
        a - b

        assert a == Amount.parse("5")
        assert b == Amount.parse("3")

        with pytest.raises(AttributeError):
            a.magnitude = 1

    def test_ordering_and_zero(self):
        assert Amount.parse("1") < Amount.parse("1.0001")
        assert Amount.parse("2") >= Amount.parse("2.0000")
        assert Amount.zero().is_zero()
        assert not Amount.parse("0.0001").is_zero()
        assert Amount.zero() == Amount.parse("0")
        assert len({Amount.parse("1"), Amount.parse("1.0")}) == 1


class TestAmountConstruction:
    """Test construction from magnitudes"""

    def test_magnitude_bounds(self):
        """Test out-of-range magnitudes are rejected"""
        assert Amount.from_magnitude(SCALE_FACTOR) == Amount.parse("1")

        with pytest.raises(AmountUnderflowError):
            Amount(-1)

        with pytest.raises(AmountOverflowError):
            Amount(MAX_MAGNITUDE + 1)

        with pytest.raises(TypeError):
            Amount(True)

        with pytest.raises(TypeError):
            Amount(1.0)

