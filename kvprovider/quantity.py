"""Resource quantities such as ``10Gi``, ``500m`` or ``2e3``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_UP, Decimal, InvalidOperation, localcontext
from enum import Enum

_PATTERN_TEXT = r"^([+-]?[0-9.]+)([eEinumkKMGTP]*[-+]?[0-9]*)$"
_PATTERN = re.compile(_PATTERN_TEXT)
_EXPONENT = re.compile(r"[eE]([-+]?[0-9]+)")
_PRECISION = 200

_BINARY_POWERS = {"Ki": 10, "Mi": 20, "Gi": 30, "Ti": 40, "Pi": 50, "Ei": 60}
_BINARY_SUFFIXES = {0: "", **{power: suffix for suffix, power in _BINARY_POWERS.items()}}

_DECIMAL_EXPONENTS = {
    "n": -9,
    "u": -6,
    "m": -3,
    "": 0,
    "k": 3,
    "M": 6,
    "G": 9,
    "T": 12,
    "P": 15,
    "E": 18,
}
_DECIMAL_SUFFIXES = {exponent: suffix for suffix, exponent in _DECIMAL_EXPONENTS.items()}


class QuantityFormat(Enum):
    """How a quantity was written and how it is printed back."""

    DECIMAL_EXPONENT = "DecimalExponent"
    BINARY_SI = "BinarySI"
    DECIMAL_SI = "DecimalSI"


class QuantityError(ValueError):
    """Raised when a quantity string cannot be parsed."""


@dataclass(frozen=True)
class Quantity:
    """An exact amount together with the notation it is expressed in."""

    value: Decimal
    format: QuantityFormat = QuantityFormat.DECIMAL_SI

    def __str__(self) -> str:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            value = self.value
            if value == 0:
                return "0"
            if (
                self.format is QuantityFormat.BINARY_SI
                and abs(value) >= 1024
                and value == value.to_integral_value()
            ):
                amount = int(value)
                power = 0
                while power < 60 and amount % (1 << (power + 10)) == 0:
                    power += 10
                return f"{amount >> power}{_BINARY_SUFFIXES[power]}"

            # Decimal notations keep nano precision, rounding away from zero.
            amount = int(value.scaleb(9).to_integral_value(rounding=ROUND_UP))
            exponent = -9
            while exponent < 18 and amount % 1000 == 0:
                amount //= 1000
                exponent += 3
            if self.format is QuantityFormat.DECIMAL_EXPONENT:
                suffix = f"e{exponent}" if exponent else ""
            else:
                suffix = _DECIMAL_SUFFIXES[exponent]
            return f"{amount}{suffix}"


def parse_quantity(text: str) -> Quantity:
    """Parse a quantity string, raising QuantityError if it is malformed."""
    if not isinstance(text, str) or not text:
        raise QuantityError("quantities must match the regular expression '%s'" % _PATTERN_TEXT)
    match = _PATTERN.match(text)
    if match is None:
        raise QuantityError("quantities must match the regular expression '%s'" % _PATTERN_TEXT)
    number, suffix = match.groups()

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        try:
            amount = Decimal(number)
        except InvalidOperation:
            raise QuantityError("unable to parse numeric part of quantity") from None

        if suffix in _BINARY_POWERS:
            return Quantity(amount * (1 << _BINARY_POWERS[suffix]), QuantityFormat.BINARY_SI)
        if suffix in _DECIMAL_EXPONENTS:
            return Quantity(amount.scaleb(_DECIMAL_EXPONENTS[suffix]), QuantityFormat.DECIMAL_SI)
        exponent = _EXPONENT.fullmatch(suffix)
        if exponent is not None:
            return Quantity(
                amount.scaleb(int(exponent.group(1))), QuantityFormat.DECIMAL_EXPONENT
            )
    raise QuantityError("unable to parse quantity's suffix")