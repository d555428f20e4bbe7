"""
FixedPoint -- non-negative 18-decimal fixed-point value object.

Responsibility:
    Provides the single numeric type used for every royalty computation:
    sale prices, profits, pools, shares, claim balances, and the two
    fractional FR parameters (percent of profit, successive ratio).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module, the stores, and the engines.

Invariants enforced:
    - Values are integers of base units at scale 10**18 (1.0 == 10**18).
    - Values are never negative; subtraction below zero is an error unless
      the caller explicitly asks for ``saturating_sub``.
    - Every multiplication and division truncates toward zero (floor for
      non-negative operands). Nothing ever rounds up.

Failure modes:
    - ValueError on negative values, non-finite input, or more than 18
      fractional digits.
    - TypeError when constructed from float (binary floats are not exact).
    - ZeroDivisionError from ``div``/``mul_div`` with a zero divisor.

Audit relevance:
    Truncation dust is deterministic. Replaying the same sequence of sales
    produces the same shares to the last base unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, localcontext

DECIMALS = 18
SCALE = 10**DECIMALS

# Enough digits that scaling by 10**18 never rounds under the Decimal context.
_WORKING_PRECISION = 96


@dataclass(frozen=True, slots=True)
class FixedPoint:
    """
    Fixed-point amount or fraction.

    Contract:
        Wraps a non-negative ``int`` of base units. ``FixedPoint.of("0.16")``
        holds ``160000000000000000``.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots).
        - ``raw`` is always a non-negative int.
        - Arithmetic returns new instances; operands are never mutated.

    Non-goals:
        - Does NOT carry a currency; the engine runs in a single unit of value.
        - Does NOT auto-round; truncation is explicit in each operation.
    """

    raw: int

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise TypeError(f"raw must be int, got {type(self.raw).__name__}")
        if self.raw < 0:
            raise ValueError(f"FixedPoint cannot be negative: {self.raw}")

    @classmethod
    def of(cls, value: Decimal | str | int | FixedPoint) -> FixedPoint:
        """
        Parse a human-scale value into base units.

        Preconditions:
            - value is a FixedPoint, int, str, or Decimal (never float).

        Postconditions:
            - Returns FixedPoint whose ``raw`` equals ``value * 10**18`` exactly.

        Raises:
            TypeError: for float or other unsupported types.
            ValueError: for negative, non-finite, or over-precise values.
        """
        if isinstance(value, FixedPoint):
            return value
        if isinstance(value, float):
            raise TypeError("FixedPoint.of does not accept float; pass a str or Decimal")
        if isinstance(value, bool) or not isinstance(value, (Decimal, str, int)):
            raise TypeError(f"Cannot build FixedPoint from {type(value).__name__}")
        try:
            decimal_value = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
        except InvalidOperation as e:
            raise ValueError(f"Invalid fixed-point value: {value!r}") from e
        if not decimal_value.is_finite():
            raise ValueError(f"Fixed-point value must be finite: {value!r}")
        with localcontext() as ctx:
            ctx.prec = _WORKING_PRECISION
            scaled = decimal_value.scaleb(DECIMALS)
        if scaled != scaled.to_integral_value():
            raise ValueError(
                f"Fixed-point value {value!r} has more than {DECIMALS} fractional digits"
            )
        return cls(raw=int(scaled))

    @classmethod
    def from_raw(cls, raw: int) -> FixedPoint:
        """Wrap an integer of base units."""
        return cls(raw=raw)

    @classmethod
    def zero(cls) -> FixedPoint:
        return cls(raw=0)

    @classmethod
    def one(cls) -> FixedPoint:
        return cls(raw=SCALE)

    @property
    def is_zero(self) -> bool:
        return self.raw == 0

    @property
    def is_positive(self) -> bool:
        return self.raw > 0

    def to_decimal(self) -> Decimal:
        """Exact Decimal representation (no context rounding)."""
        with localcontext() as ctx:
            ctx.prec = _WORKING_PRECISION
            return Decimal(self.raw).scaleb(-DECIMALS)

    # -- truncating arithmetic ------------------------------------------------

    def mul(self, other: FixedPoint) -> FixedPoint:
        """``floor(self * other)`` at fixed scale."""
        return FixedPoint(raw=(self.raw * _coerce(other).raw) // SCALE)

    def div(self, other: FixedPoint) -> FixedPoint:
        """``floor(self / other)`` at fixed scale.

        Raises:
            ZeroDivisionError: if ``other`` is zero.
        """
        divisor = _coerce(other)
        if divisor.raw == 0:
            raise ZeroDivisionError(f"FixedPoint division of {self} by zero")
        return FixedPoint(raw=(self.raw * SCALE) // divisor.raw)

    def mul_div(self, numerator: FixedPoint, denominator: FixedPoint) -> FixedPoint:
        """``floor(self * numerator / denominator)`` with a single truncation."""
        denom = _coerce(denominator)
        if denom.raw == 0:
            raise ZeroDivisionError(f"FixedPoint mul_div of {self} by zero")
        return FixedPoint(raw=(self.raw * _coerce(numerator).raw) // denom.raw)

    def saturating_sub(self, other: FixedPoint) -> FixedPoint:
        """``max(0, self - other)``."""
        return FixedPoint(raw=max(0, self.raw - _coerce(other).raw))

    def __add__(self, other: FixedPoint) -> FixedPoint:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(raw=self.raw + other.raw)

    def __sub__(self, other: FixedPoint) -> FixedPoint:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        if other.raw > self.raw:
            raise ValueError(f"FixedPoint underflow: {self} - {other}")
        return FixedPoint(raw=self.raw - other.raw)

    def __lt__(self, other: FixedPoint) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self.raw < other.raw

    def __le__(self, other: FixedPoint) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self.raw <= other.raw

    def __gt__(self, other: FixedPoint) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self.raw > other.raw

    def __ge__(self, other: FixedPoint) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self.raw >= other.raw

    def __str__(self) -> str:
        whole, frac = divmod(self.raw, SCALE)
        if frac == 0:
            return str(whole)
        return f"{whole}.{frac:0{DECIMALS}d}".rstrip("0")

    def __repr__(self) -> str:
        return f"FixedPoint({str(self)!r})"


def _coerce(value: FixedPoint | Decimal | str | int) -> FixedPoint:
    return value if isinstance(value, FixedPoint) else FixedPoint.of(value)


# Semantic aliases used in signatures throughout the kernel.
Amount = FixedPoint
Fraction = FixedPoint

ZERO = FixedPoint(raw=0)
ONE = FixedPoint(raw=SCALE)


def fixed_sum(values) -> FixedPoint:
    """Sum an iterable of FixedPoint values (empty sum is zero)."""
    total = 0
    for value in values:
        total += value.raw
    return FixedPoint(raw=total)
