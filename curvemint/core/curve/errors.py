"""Exception types for the bonding-curve engine.

Every settlement failure is raised as a ``CurveError`` subclass. A raised error
means the whole operation was rejected and nothing was mutated.
``CurveMarket.execute()`` converts them into ``SettlementResult`` rejections for
callers that prefer result inspection.
"""

from __future__ import annotations


class CurveError(Exception):
    """Base class for curve pricing / settlement failures."""


class InvalidCurveParams(CurveError):
    """Raised when curve or fee parameters are outside their domain."""


class ConfigurationAlreadySet(CurveError):
    """Raised when the one-time fee setup is attempted a second time."""


class SlippageExceeded(CurveError):
    """Raised when the first-unit price exceeds the caller's ceiling."""


class InsufficientPayment(CurveError):
    """Raised when the offered payment is below the computed mint cost."""


class ArithmeticFault(CurveError):
    """Raised on overflow, underflow or division by zero in curve math."""


class ReserveUnderflow(CurveError):
    """Raised when a burn would take the reserve below zero."""


class Unauthorized(CurveError):
    """Raised when the caller may not burn, transfer or claim."""


class InsufficientBalance(CurveError):
    """Raised when a holder lacks the units or collateral an operation needs."""


class AssetMismatch(CurveError):
    """Raised when a token entry point is used on a native curve or vice versa."""


class PayoutModeMismatch(CurveError):
    """Raised when a sweep entry point does not match the curve's payout mode."""


class InvalidQuantity(CurveError):
    """Raised when a mint/burn quantity is non-positive or exceeds supply."""


class CurveInvariantError(CurveError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
