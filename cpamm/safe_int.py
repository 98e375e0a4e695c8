"""Checked integer wrapper for reserve, supply and fee arithmetic.

Token amounts on the ledger are u64. The liquidity math widens every
intermediate product to u128 and narrows the result back to u64, so this
wrapper makes each step fail loudly instead of wrapping:
- Division by zero raises DivisionByZero
- Subtraction underflow raises Underflow
- Results above the u128 working width raise Overflow
- Narrowing with to_u64() raises Overflow when the value does not fit

Usage pattern:
    from cpamm.safe_int import S

    def share(reserve: int, lp_amount: int, supply: int) -> int:
        # Wrap at entry
        sr, sl, ss = S(reserve), S(lp_amount), S(supply)

        # Natural arithmetic - automatically checked
        result = (sr * sl) // ss  # Raises if ss == 0

        # Narrow at exit
        return result.to_u64()
"""

from __future__ import annotations

U16_MAX = 2**16 - 1
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""

    pass


class Overflow(SafeIntError):
    """Value exceeds the working or target width."""

    pass


class SafeInt:
    """Unsigned integer with checked arithmetic.

    Values are always in [0, U128_MAX]; an operation whose result would leave
    that range raises instead of producing a value.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
            Underflow: If value is negative
            Overflow: If value exceeds U128_MAX
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        if value < 0:
            raise Underflow(f"Negative value: {value}")
        if value > U128_MAX:
            raise Overflow(f"Value exceeds u128 max: {value}")
        self._value = value

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        """Add two values.

        Raises:
            Overflow: If the sum exceeds U128_MAX
        """
        other_val = _extract_value(other)
        result = self._value + other_val
        if result > U128_MAX:
            raise Overflow(f"Overflow: {self._value} + {other_val}")
        return SafeInt(result)

    def __radd__(self, other: int) -> SafeInt:
        return self.__add__(other)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        """Subtract self from other (other - self).

        Raises:
            Underflow: If result would be negative
        """
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        """Multiply two values.

        Raises:
            Overflow: If the product exceeds U128_MAX
        """
        other_val = _extract_value(other)
        result = self._value * other_val
        if result > U128_MAX:
            raise Overflow(f"Overflow: {self._value} * {other_val}")
        return SafeInt(result)

    def __rmul__(self, other: int) -> SafeInt:
        return self.__mul__(other)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding down.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        """True if non-zero."""
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Equivalent to: (self + other - 1) // other

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt((self._value + other_val - 1) // other_val)

    def min(self, other: SafeInt | int) -> SafeInt:
        """Return minimum of self and other."""
        return SafeInt(min(self._value, _extract_value(other)))

    def to_u64(self) -> int:
        """Narrow to a u64 int.

        Raises:
            Overflow: If value exceeds 2^64-1
        """
        if self._value > U64_MAX:
            raise Overflow(f"Value exceeds u64 max: {self._value}")
        return self._value

    def to_u128(self) -> int:
        """Return the value as an int (always fits u128 by construction)."""
        return self._value

    def is_u64(self) -> bool:
        """Check if value fits in u64 without raising."""
        return self._value <= U64_MAX

    @classmethod
    def zero(cls) -> SafeInt:
        """Create a SafeInt with value 0."""
        return cls(0)


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
