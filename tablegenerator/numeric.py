"""
Exact comparison of numbers written as decimal strings.

Result values in the logs can be huge integers or use scientific notation,
so they are never compared as binary floats. A value is reduced to a
canonical (digits, decimal point position) form and compared digit-wise.
"""
import functools
import re
from typing import Tuple, Union

__all__ = ["DecimalValue", "compare", "ZERO"]

_DECIMAL_RE = re.compile(r"^([+-]?)([0-9]*)(?:\.([0-9]*))?(?:[eE]([+-]?[0-9]+))?$")


def _canonical(text: str) -> Tuple[bool, str, int]:
    """
    Reduce a decimal literal to (negative, digits, point).

    ``digits`` carries no leading or trailing zeros and ``point`` is the
    position of the decimal point counted from the first digit, so
    ``"120.5e1"`` becomes ``(False, "1205", 4)``. Zero is ``(False, "", 0)``.
    """
    match = _DECIMAL_RE.match(text)
    if match is None or not (match.group(2) or match.group(3)):
        raise ValueError(f"Not a decimal number: {text!r}")

    sign, integer, fraction, exponent = match.groups()
    fraction = fraction or ""
    digits = integer + fraction
    point = len(integer) + (int(exponent) if exponent else 0)

    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")

    if not digits:
        return False, "", 0
    return sign == "-", digits, point


def _compare_magnitude(u_digits: str, u_point: int, v_digits: str, v_point: int) -> int:
    if not u_digits or not v_digits:
        # zero against anything
        return (len(u_digits) > 0) - (len(v_digits) > 0)
    if u_point != v_point:
        return 1 if u_point > v_point else -1
    width = max(len(u_digits), len(v_digits))
    u_padded = u_digits.ljust(width, "0")
    v_padded = v_digits.ljust(width, "0")
    return (u_padded > v_padded) - (u_padded < v_padded)


@functools.total_ordering
class DecimalValue:
    """
    An exact number that keeps the text it was read from.

    Equality, hashing and ordering use the canonical form, so ``"5"``,
    ``"5.0"``, ``"5e0"`` and ``"0005"`` are all the same value. There is no
    ``__float__``: the deviation metrics call ``to_float()`` explicitly.
    """

    __slots__ = ("text", "negative", "digits", "point")

    def __init__(self, text: Union[str, "DecimalValue"]):
        if isinstance(text, DecimalValue):
            text = text.text
        text = str(text).strip()
        self.text = text
        self.negative, self.digits, self.point = _canonical(text)

    def is_zero(self) -> bool:
        return not self.digits

    def to_float(self) -> float:
        return float(self.text)

    def _cmp(self, other: "DecimalValue") -> int:
        if self.negative != other.negative:
            return -1 if self.negative else 1
        result = _compare_magnitude(self.digits, self.point, other.digits, other.point)
        return -result if self.negative else result

    def __eq__(self, other):
        if isinstance(other, str):
            other = DecimalValue(other)
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self._cmp(other) == 0

    def __lt__(self, other):
        if isinstance(other, str):
            other = DecimalValue(other)
        if not isinstance(other, DecimalValue):
            return NotImplemented
        return self._cmp(other) < 0

    def __hash__(self):
        return hash((self.negative, self.digits, self.point))

    def __str__(self):
        return self.text

    def __repr__(self):
        return f"DecimalValue({self.text!r})"


ZERO = DecimalValue("0")


def compare(u: Union[str, DecimalValue], v: Union[str, DecimalValue]) -> int:
    """Return 1 if u > v, 0 if they are equal and -1 if u < v."""
    if not isinstance(u, DecimalValue):
        u = DecimalValue(u)
    if not isinstance(v, DecimalValue):
        v = DecimalValue(v)
    return u._cmp(v)
