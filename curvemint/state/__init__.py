"""
State management for curvemint collaborators
"""

from .balances import NATIVE_ASSET, BalanceTable
from .collateral import InMemoryCollateral
from .units import SerialUnitLedger

__all__ = [
    "NATIVE_ASSET",
    "BalanceTable",
    "InMemoryCollateral",
    "SerialUnitLedger",
]
