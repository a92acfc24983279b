"""Fixed-point decimal with 18 fractional digits.

Values are stored as a non-negative integer scaled by 10^18, the same
representation the contracts use. Rounding is explicit:

- ``*`` and ``/`` truncate toward zero, like the contracts' ``mul``/``div``.
- ``pow`` rounds each squaring half-up, like the contracts' ``decPow``.
- Division by zero yields ``Decimal.INFINITY`` (``2**256 - 1`` raw).
"""
from __future__ import annotations

import decimal as _pydecimal
from functools import total_ordering
from typing import Union

DECIMALS = 18
ONE_RAW = 10**DECIMALS
HALF_RAW = ONE_RAW // 2
MAX_UINT256 = 2**256 - 1

Decimalish = Union["Decimal", int, float, str]


def _parse(value: Decimalish) -> int:
    """Convert a Decimalish value into its scaled integer representation."""
    if isinstance(value, Decimal):
        return value.raw
    if isinstance(value, bool):
        raise TypeError("bool is not a valid decimal value")
    if isinstance(value, int):
        raw = value * ONE_RAW
    elif isinstance(value, (float, str)):
        try:
            parsed = _pydecimal.Decimal(repr(value) if isinstance(value, float) else value.strip())
        except _pydecimal.InvalidOperation as e:
            raise ValueError(f"Not a decimal number: {value!r}") from e
        if not parsed.is_finite():
            raise ValueError(f"Not a finite decimal number: {value!r}")
        raw = int(parsed.scaleb(DECIMALS).to_integral_value(rounding=_pydecimal.ROUND_DOWN))
    else:
        raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")

    if raw < 0:
        raise ValueError(f"Decimal must not be negative: {value!r}")
    return raw


@total_ordering
class Decimal:
    """Immutable non-negative fixed-point number."""

    __slots__ = ("_raw",)

    ZERO: Decimal
    ONE: Decimal
    INFINITY: Decimal

    def __init__(self, value: Decimalish = 0) -> None:
        self._raw = _parse(value)

    @classmethod
    def from_raw(cls, raw: int) -> Decimal:
        """Build from an already scaled integer (e.g. a uint256 read on-chain)."""
        if raw < 0:
            raise ValueError(f"Decimal must not be negative: {raw}")
        obj = cls.__new__(cls)
        obj._raw = int(raw)
        return obj

    @classmethod
    def from_hex(cls, value: str) -> Decimal:
        return cls.from_raw(int(value, 16))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def raw(self) -> int:
        return self._raw

    @property
    def hex(self) -> str:
        return hex(self._raw)

    @property
    def is_zero(self) -> bool:
        return self._raw == 0

    @property
    def infinite(self) -> bool:
        return self._raw == MAX_UINT256

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other: Decimalish) -> Decimal:
        return Decimal.from_raw(self._raw + _parse(other))

    __radd__ = __add__

    def __sub__(self, other: Decimalish) -> Decimal:
        subtrahend = _parse(other)
        if subtrahend > self._raw:
            raise ValueError(f"Subtraction would go negative: {self} - {Decimal.from_raw(subtrahend)}")
        return Decimal.from_raw(self._raw - subtrahend)

    def __rsub__(self, other: Decimalish) -> Decimal:
        return Decimal(other) - self

    def __mul__(self, other: Decimalish) -> Decimal:
        return Decimal.from_raw(self._raw * _parse(other) // ONE_RAW)

    __rmul__ = __mul__

    def __truediv__(self, other: Decimalish) -> Decimal:
        divisor = _parse(other)
        if divisor == 0:
            return Decimal.INFINITY
        return Decimal.from_raw(self._raw * ONE_RAW // divisor)

    def __rtruediv__(self, other: Decimalish) -> Decimal:
        return Decimal(other) / self

    def mul_div(self, multiplier: Decimalish, divider: Decimalish) -> Decimal:
        """``self * multiplier / divider`` with a single truncation at the end."""
        divisor = _parse(divider)
        if divisor == 0:
            return Decimal.INFINITY
        return Decimal.from_raw(self._raw * _parse(multiplier) // divisor)

    def pow(self, exponent: int) -> Decimal:
        """Exponentiation by squaring with half-up rounding per step."""
        if not isinstance(exponent, int) or exponent < 0:
            raise ValueError(f"Exponent must be a non-negative integer, got {exponent!r}")
        if exponent == 0:
            return Decimal.ONE

        x = self._raw
        y = ONE_RAW
        while exponent > 1:
            if exponent % 2:
                y = (x * y + HALF_RAW) // ONE_RAW
            x = (x * x + HALF_RAW) // ONE_RAW
            exponent //= 2
        return Decimal.from_raw((x * y + HALF_RAW) // ONE_RAW)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Decimal, int, float, str)) and not isinstance(other, bool):
            try:
                return self._raw == _parse(other)
            except ValueError:
                return False
        return NotImplemented

    def __lt__(self, other: Decimalish) -> bool:
        return self._raw < _parse(other)

    def __hash__(self) -> int:
        return hash(self._raw)

    def __bool__(self) -> bool:
        return self._raw != 0

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        if self.infinite:
            return "∞"
        characteristic, mantissa = divmod(self._raw, ONE_RAW)
        fraction = f"{mantissa:018d}".rstrip("0")
        return f"{characteristic}.{fraction}" if fraction else str(characteristic)

    def __repr__(self) -> str:
        return f"Decimal('{self}')"

    def __float__(self) -> float:
        return self._raw / ONE_RAW

    def to_string(self, precision: int) -> str:
        """Round half-up to ``precision`` fractional digits."""
        if self.infinite:
            return "∞"
        if not 0 <= precision <= DECIMALS:
            raise ValueError(f"precision must be between 0 and {DECIMALS}")
        unit = 10 ** (DECIMALS - precision)
        rounded = (self._raw + unit // 2) // unit
        characteristic, mantissa = divmod(rounded, 10**precision)
        if precision == 0:
            return str(characteristic)
        return f"{characteristic}.{mantissa:0{precision}d}"

    def prettify(self, precision: int = 2) -> str:
        """Like ``to_string`` but with thousands separators."""
        text = self.to_string(precision)
        if text == "∞":
            return text
        characteristic, _, mantissa = text.partition(".")
        grouped = f"{int(characteristic):,}"
        return f"{grouped}.{mantissa}" if mantissa else grouped


Decimal.ZERO = Decimal.from_raw(0)
Decimal.ONE = Decimal.from_raw(ONE_RAW)
Decimal.INFINITY = Decimal.from_raw(MAX_UINT256)
