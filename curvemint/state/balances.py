"""
Collateral holdings keyed by (holder, asset).

One table serves every asset a curve can settle in: fungible tokens named by a
32-byte hex id, and the native currency under `NATIVE_ASSET`. Holdings never go
negative and zero holdings are dropped, so two tables with the same holdings
compare equal regardless of history.
"""

from typing import Dict, Mapping, Optional, Tuple


# Type aliases
PubKey = str  # account identifier
AssetId = str  # 32-byte hex string (0x...)
Amount = int  # Non-negative integer (arbitrary precision)

NATIVE_ASSET = "0x" + "00" * 32

HoldingKey = Tuple[PubKey, AssetId]


def require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")


class BalanceTable:
    """Sparse (holder, asset) -> amount table."""

    def __init__(self, holdings: Optional[Mapping[HoldingKey, Amount]] = None) -> None:
        self._holdings: Dict[HoldingKey, Amount] = {}
        for (holder, asset), amount in (holdings or {}).items():
            self.credit(holder, asset, amount)

    def get(self, holder: PubKey, asset: AssetId) -> Amount:
        return self._holdings.get((holder, asset), 0)

    def credit(self, holder: PubKey, asset: AssetId, amount: Amount) -> None:
        require_amount(amount)
        if amount:
            self._holdings[(holder, asset)] = self.get(holder, asset) + amount

    def debit(self, holder: PubKey, asset: AssetId, amount: Amount) -> None:
        """Remove `amount`; raises ValueError (and changes nothing) if the holding is short."""
        require_amount(amount)
        held = self.get(holder, asset)
        if held < amount:
            raise ValueError(f"{holder} holds {held} of {asset}, cannot debit {amount}")
        if held == amount:
            self._holdings.pop((holder, asset), None)
        else:
            self._holdings[(holder, asset)] = held - amount

    def holdings(self) -> Dict[HoldingKey, Amount]:
        """Copy of every non-zero holding, ordered by (holder, asset)."""
        return {key: self._holdings[key] for key in sorted(self._holdings)}

    def total_for_asset(self, asset: AssetId) -> Amount:
        return sum(amount for (_holder, a), amount in self._holdings.items() if a == asset)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BalanceTable):
            return NotImplemented
        return self._holdings == other._holdings

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._holdings)} holdings)"
