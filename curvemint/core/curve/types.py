"""Data types for the bonding-curve engine.

Units/conventions:
- every amount is a non-negative integer in the collateral's base unit,
- `*_rate` values are whole percents (0..100),
- unit indices are 1-based absolute positions on the curve's x-axis.

`CurveParams` and `FeeConfig` are frozen; `CurveState` is the single mutable
ledger owned by a `CurveMarket` and passed explicitly to pricing functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import ClassVar

from ...state.balances import NATIVE_ASSET, AssetId, PubKey


def _require_uint(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@unique
class AssetKind(Enum):
    TOKEN = "token"
    NATIVE = "native"


@unique
class PayoutMode(Enum):
    """Disposition of the platform cut: paid inline, or accrued for a later claim."""
    IMMEDIATE = "immediate"
    DEFERRED = "deferred"


@unique
class Action(Enum):
    MINT = "mint"
    MINT_NATIVE = "mint_native"
    BURN = "burn"
    BURN_BATCH = "burn_batch"
    WITHDRAW = "withdraw"
    CLAIM_PLATFORM = "claim_platform"
    CLAIM_CREATOR = "claim_creator"


@unique
class Event(Enum):
    MINTED = "Minted"
    BURNED = "Burned"
    BATCH_BURNED = "BatchBurned"
    WITHDRAWN = "Withdrawn"


@unique
class PricingStrategy(Enum):
    CLOSED_FORM = "closed_form"
    ITERATIVE = "iterative"
    FRACTIONAL = "fractional"


@dataclass(frozen=True)
class CurveParams:
    """Immutable curve parameters for f(x) = slope * x^(n/d) + virtual_balance."""

    slope: int
    exponent_numerator: int
    exponent_denominator: int
    integer_exponent: int
    virtual_balance: int

    def __post_init__(self) -> None:
        for name in (
            "slope",
            "exponent_numerator",
            "exponent_denominator",
            "integer_exponent",
            "virtual_balance",
        ):
            _require_uint(name, getattr(self, name))
        if self.exponent_denominator == 0:
            raise ValueError("exponent_denominator must be non-zero")
        n, d = self.exponent_numerator, self.exponent_denominator
        expected = n // d if n % d == 0 else 0
        if self.integer_exponent != expected:
            raise ValueError(
                f"integer_exponent must be {expected} for exponent {n}/{d}, got {self.integer_exponent}"
            )

    @property
    def is_integer_mode(self) -> bool:
        return self.integer_exponent > 0

    @property
    def initial_mint_price(self) -> int:
        return self.slope + self.virtual_balance


@dataclass(frozen=True)
class FeeConfig:
    """Commission configuration. Unset until the one-time fee setup."""

    platform_account: PubKey | None = None
    platform_rate: int = 0
    creator_account: PubKey | None = None
    creator_rate: int = 0

    def __post_init__(self) -> None:
        for name in ("platform_rate", "creator_rate"):
            v = getattr(self, name)
            _require_uint(name, v)
            if v > 100:
                raise ValueError(f"{name} must be in [0, 100]: {v}")
        if self.platform_rate + self.creator_rate > 100:
            raise ValueError(
                f"platform_rate + creator_rate must be <= 100, got {self.platform_rate + self.creator_rate}"
            )

    @property
    def is_set(self) -> bool:
        return self.platform_account is not None or self.creator_account is not None

    @property
    def total_rate(self) -> int:
        return self.platform_rate + self.creator_rate


@dataclass
class CurveState:
    """Mutable ledger of one deployed curve."""

    params: CurveParams
    collateral_asset: AssetId = NATIVE_ASSET
    payout_mode: PayoutMode = PayoutMode.DEFERRED
    fees: FeeConfig = FeeConfig()

    total_supply: int = 0
    reserve: int = 0
    # Collateral the engine believes it custodies (reserve + unpaid commissions).
    collateral_held: int = 0
    total_platform_profit: int = 0
    total_creator_profit: int = 0

    # Fractional mode only: absolute unit index -> per-unit price, write-once.
    price_cache: dict[int, int] = field(default_factory=dict)

    @property
    def asset_kind(self) -> AssetKind:
        return AssetKind.NATIVE if self.collateral_asset == NATIVE_ASSET else AssetKind.TOKEN


@dataclass(frozen=True)
class CommissionSplit:
    platform_cut: int
    creator_cut: int
    reserve_cut: int

    def __post_init__(self) -> None:
        for name in ("platform_cut", "creator_cut", "reserve_cut"):
            _require_uint(name, getattr(self, name))

    @property
    def total(self) -> int:
        return self.platform_cut + self.creator_cut + self.reserve_cut


# ---------------------------------------------------------------------------
# Settlement records (append-only, consumed by indexers)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Minted:
    event: ClassVar[Event] = Event.MINTED

    batch_id: int
    cost: int
    reserve_after: int
    quantity: int
    platform_cut: int
    creator_cut: int


@dataclass(frozen=True)
class Burned:
    event: ClassVar[Event] = Event.BURNED

    batch_id: int
    return_amount: int
    reserve_after: int
    quantity: int


@dataclass(frozen=True)
class BatchBurned:
    event: ClassVar[Event] = Event.BATCH_BURNED

    batch_ids: tuple[int, ...]
    quantities: tuple[int, ...]
    return_amount: int
    reserve_after: int


@dataclass(frozen=True)
class Withdrawn:
    event: ClassVar[Event] = Event.WITHDRAWN

    to: PubKey
    amount: int


Record = Minted | Burned | BatchBurned | Withdrawn


@dataclass(frozen=True)
class SettlementCommand:
    """Parameters for one settlement. Unused fields keep their defaults."""

    action: Action
    caller: PubKey
    quantity: int = 0                           # mint / mint_native / burn
    payment: int = 0                            # mint (max pull) / mint_native (attached)
    max_first_unit_price: int | None = None     # mint / mint_native
    batch_id: int = 0                           # burn
    batch_ids: tuple[int, ...] = ()             # burn_batch
    quantities: tuple[int, ...] = ()            # burn_batch
    owner: PubKey | None = None                 # burn / burn_batch (operator burns)


@dataclass(frozen=True)
class SettlementResult:
    """Result of ``CurveMarket.execute``."""

    ok: bool
    record: Record | None = None
    error: str | None = None
    code: str | None = None
