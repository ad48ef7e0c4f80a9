"""
Power / power-sum math kernel (v1 semantics).

Two primitives back curve pricing:

  pow(base, n, d)      -> (numerator, denominator), numerator/denominator ~ base^(n/d)
  int_power_sum(p, b)  -> sum_{i=1}^{b} i^p  (exact)

Rounding:
- `pow` returns floor(base^(n/d) * 2^precision) over 2^precision. The k-th root is
  an exact integer root, so the error is below 2^-precision and always downward.
- `int_power_sum` evaluates Faulhaber's formula with Bernoulli numbers over
  `Fraction`s; the result is an exact integer for every p >= 0.
"""

from __future__ import annotations

import math
from fractions import Fraction
from functools import lru_cache


DEFAULT_POW_PRECISION = 64


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def integer_root(x: int, k: int) -> int:
    """Return floor(x ** (1/k)) for x >= 0, k >= 1."""
    _require_int("x", x)
    _require_int("k", k)
    if x < 0:
        raise ValueError(f"x must be non-negative: {x}")
    if k < 1:
        raise ValueError(f"k must be positive: {k}")
    if x < 2 or k == 1:
        return x
    if k == 2:
        return math.isqrt(x)

    # 2^ceil(bits/k) is an upper bound; Newton from above decreases monotonically.
    r = 1 << -(-x.bit_length() // k)
    while True:
        y = ((k - 1) * r + x // r ** (k - 1)) // k
        if y >= r:
            return r
        r = y


def pow_fraction(base: int, exp_n: int, exp_d: int, *, precision: int = DEFAULT_POW_PRECISION) -> tuple[int, int]:
    """
    Rational lower approximation of base^(exp_n/exp_d).

    Returns (numerator, denominator) with denominator == 2^precision.
    """
    for name, v in (("base", base), ("exp_n", exp_n), ("exp_d", exp_d), ("precision", precision)):
        _require_int(name, v)
    if base < 0:
        raise ValueError(f"base must be non-negative: {base}")
    if exp_n < 0:
        raise ValueError(f"exp_n must be non-negative: {exp_n}")
    if exp_d <= 0:
        raise ValueError(f"exp_d must be positive: {exp_d}")
    if precision < 0:
        raise ValueError(f"precision must be non-negative: {precision}")

    denominator = 1 << precision
    numerator = integer_root(base**exp_n * denominator**exp_d, exp_d)
    return numerator, denominator


@lru_cache(maxsize=None)
def bernoulli_plus(limit: int) -> tuple[Fraction, ...]:
    """Bernoulli numbers B_0..B_limit with the B_1 = +1/2 convention."""
    if limit < 0:
        raise ValueError(f"limit must be non-negative: {limit}")
    out: list[Fraction] = [Fraction(1)]
    for m in range(1, limit + 1):
        acc = sum((math.comb(m + 1, k) * out[k] for k in range(m)), Fraction(0))
        out.append(-acc / (m + 1))
    if limit >= 1:
        out[1] = -out[1]
    return tuple(out)


def int_power_sum(power: int, upper: int) -> int:
    """Exact sum_{i=1}^{upper} i^power (0 when upper == 0)."""
    _require_int("power", power)
    _require_int("upper", upper)
    if power < 0:
        raise ValueError(f"power must be non-negative: {power}")
    if upper < 0:
        raise ValueError(f"upper must be non-negative: {upper}")
    if upper == 0:
        return 0
    if power == 0:
        return upper

    b = bernoulli_plus(power)
    total = sum(
        (math.comb(power + 1, j) * b[j] * upper ** (power + 1 - j) for j in range(power + 1)),
        Fraction(0),
    )
    total /= power + 1
    if total.denominator != 1:
        raise AssertionError(f"power sum is not integral: {total}")
    return int(total.numerator)


class PowerMath:
    """Interface for the power / power-sum collaborator used by curve pricing."""

    def pow(self, base: int, exp_n: int, exp_d: int) -> tuple[int, int]:
        raise NotImplementedError

    def int_power_sum(self, power: int, upper: int) -> int:
        raise NotImplementedError


class ExactPowerMath(PowerMath):
    """Deterministic integer implementation backed by this kernel."""

    def __init__(self, precision: int = DEFAULT_POW_PRECISION) -> None:
        _require_int("precision", precision)
        if precision < 0:
            raise ValueError(f"precision must be non-negative: {precision}")
        self.precision = precision

    def pow(self, base: int, exp_n: int, exp_d: int) -> tuple[int, int]:
        return pow_fraction(base, exp_n, exp_d, precision=self.precision)

    def int_power_sum(self, power: int, upper: int) -> int:
        return int_power_sum(power, upper)

    def __repr__(self) -> str:
        return f"ExactPowerMath(precision={self.precision})"
