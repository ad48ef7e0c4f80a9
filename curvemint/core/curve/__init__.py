"""`curve`: bonding-curve pricing and settlement engine.

Price curve: f(x) = slope * x^(n/d) + virtual_balance over the cumulative unit
index x. Mint pays the sum of f over the next units; burn returns the sum over
the top units, net of commission.

- deterministic, integer-only pricing with checked 256-bit arithmetic,
- one explicitly owned mutable `CurveState` per curve,
- all-or-nothing settlement with invariant checks after every operation.

Public API:
- `create_curve(...) -> CurveState`, `setup_fees(state, ...)`
- `cost_to_mint`, `quote_cost_to_mint`, `return_on_burn`, `quote_return_on_burn`
- `CurveMarket(state, ledger=..., collateral=...)` with `mint`, `mint_native`,
  `burn`, `burn_batch`, `withdraw`, `claim_platform_profit`,
  `claim_creator_profit`, `execute`
"""

from .errors import (
    ArithmeticFault,
    AssetMismatch,
    ConfigurationAlreadySet,
    CurveError,
    CurveInvariantError,
    InsufficientBalance,
    InsufficientPayment,
    InvalidCurveParams,
    InvalidQuantity,
    PayoutModeMismatch,
    ReserveUnderflow,
    SlippageExceeded,
    Unauthorized,
)
from .invariants import check_all
from .ports import CollateralGateway, PowerMath, UnitLedger
from .pricing import (
    cost_to_mint,
    pricing_strategy,
    quote_cost_to_mint,
    quote_return_on_burn,
    return_on_burn,
    unit_price,
)
from .settlement import CurveMarket
from .state import cached_price, create_curve, current_supply, setup_fees, state_from_dict, state_to_dict
from .types import (
    Action,
    AssetKind,
    BatchBurned,
    Burned,
    CurveParams,
    CurveState,
    Event,
    FeeConfig,
    Minted,
    PayoutMode,
    PricingStrategy,
    SettlementCommand,
    SettlementResult,
    Withdrawn,
)

__all__ = [
    "create_curve",
    "setup_fees",
    "current_supply",
    "cached_price",
    "state_to_dict",
    "state_from_dict",
    "cost_to_mint",
    "quote_cost_to_mint",
    "return_on_burn",
    "quote_return_on_burn",
    "unit_price",
    "pricing_strategy",
    "check_all",
    "CurveMarket",
    "CollateralGateway",
    "PowerMath",
    "UnitLedger",
    "Action",
    "AssetKind",
    "BatchBurned",
    "Burned",
    "CurveParams",
    "CurveState",
    "Event",
    "FeeConfig",
    "Minted",
    "PayoutMode",
    "PricingStrategy",
    "SettlementCommand",
    "SettlementResult",
    "Withdrawn",
    "ArithmeticFault",
    "AssetMismatch",
    "ConfigurationAlreadySet",
    "CurveError",
    "CurveInvariantError",
    "InsufficientBalance",
    "InsufficientPayment",
    "InvalidCurveParams",
    "InvalidQuantity",
    "PayoutModeMismatch",
    "ReserveUnderflow",
    "SlippageExceeded",
    "Unauthorized",
]
