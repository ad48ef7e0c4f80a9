"""Checked unsigned arithmetic for curve pricing and settlement.

Every value lives in the 256-bit unsigned domain of the settlement layer. Python
ints never wrap, so each helper checks the bound explicitly and raises
``ArithmeticFault`` instead of returning an out-of-domain value.

Division floors (`//`); on non-negative operands this truncates toward zero.
"""

from __future__ import annotations

from .errors import ArithmeticFault
from .types import CommissionSplit

UINT256_MAX: int = 2**256 - 1
PERCENT_SCALE: int = 100
# Highest integer exponent priced with the closed-form power sum.
MAX_CLOSED_FORM_EXPONENT: int = 10


def _check_uint(value: int, what: str) -> int:
    if value < 0:
        raise ArithmeticFault(f"underflow in {what}")
    if value > UINT256_MAX:
        raise ArithmeticFault(f"overflow in {what}")
    return value


def checked_add(a: int, b: int) -> int:
    return _check_uint(a + b, f"{a} + {b}")


def checked_sub(a: int, b: int) -> int:
    return _check_uint(a - b, f"{a} - {b}")


def checked_mul(a: int, b: int) -> int:
    return _check_uint(a * b, "multiplication")


def checked_pow(base: int, exponent: int) -> int:
    # Bound the size before materializing the power.
    if base > 1 and exponent * (base.bit_length() - 1) > 256:
        raise ArithmeticFault(f"overflow in {base}^{exponent}")
    return _check_uint(base**exponent, f"{base}^{exponent}")


def checked_div(a: int, b: int) -> int:
    if b == 0:
        raise ArithmeticFault(f"division by zero: {a} / 0")
    return _check_uint(a // b, f"{a} / {b}")


def percent_of(amount: int, rate: int) -> int:
    """``amount * rate / 100`` floored."""
    return checked_div(checked_mul(amount, rate), PERCENT_SCALE)


def split_commission(total: int, platform_rate: int, creator_rate: int) -> CommissionSplit:
    """
    Split a mint cost into (platform, creator, reserve).

    Both cuts floor; the reserve takes the remainder, so the three parts always
    sum to `total` exactly.
    """
    platform_cut = percent_of(total, platform_rate)
    creator_cut = percent_of(total, creator_rate)
    reserve_cut = checked_sub(checked_sub(total, platform_cut), creator_cut)
    return CommissionSplit(platform_cut=platform_cut, creator_cut=creator_cut, reserve_cut=reserve_cut)


def net_of_commission(amount: int, platform_rate: int, creator_rate: int) -> int:
    """``amount * (100 - platform_rate - creator_rate) / 100`` floored."""
    keep = checked_sub(checked_sub(PERCENT_SCALE, platform_rate), creator_rate)
    return percent_of(amount, keep)
