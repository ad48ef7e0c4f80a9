#!/usr/bin/env python3

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curvemint.core.curve import CurveError, PayoutMode
from curvemint.integration.config import CurveConfig, build_market
from curvemint.integration.snapshot import snapshot_from_state
from curvemint.state.balances import NATIVE_ASSET
from curvemint.state.collateral import InMemoryCollateral


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    alice = "alice"
    collateral = InMemoryCollateral()
    collateral.credit(alice, NATIVE_ASSET, 1_000_000)

    config = CurveConfig(
        name="offline-demo",
        initial_mint_price=100,
        slope=10,
        exponent_numerator=3,
        exponent_denominator=2,
        payout_mode=PayoutMode.IMMEDIATE,
        platform_account="platform",
        platform_rate=5,
        creator_account="creator",
        creator_rate=5,
    )
    market = build_market(config, collateral=collateral)

    quote = market.quote_mint(5)
    print(f"[offline-demo] quote for 5 units: {quote}")
    minted = market.mint_native(alice, 5, payment=quote + 1_000, max_first_unit_price=market.price_at(1))
    print(f"[offline-demo] minted batch={minted.batch_id} cost={minted.cost} reserve={minted.reserve_after}")

    try:
        market.mint_native(alice, 1, payment=1)
    except CurveError as exc:
        print(f"[offline-demo] underpaid mint rejected as expected: {type(exc).__name__}")

    burned = market.burn(alice, minted.batch_id, 2)
    print(f"[offline-demo] burned 2 units: return={burned.return_amount} reserve={burned.reserve_after}")

    swept = market.withdraw()
    print(f"[offline-demo] withdrew {swept.amount} to {swept.to}")

    print(f"[offline-demo] alice balance: {collateral.balance_of(NATIVE_ASSET, alice)}")
    print(f"[offline-demo] custody={market.custody_balance()} reserve={market.state.reserve}")
    print(f"[offline-demo] snapshot commitment: {snapshot_from_state(market.state).commitment_hex()}")
    if market.custody_balance() != market.state.reserve:
        print("[offline-demo] FAIL: custody does not match reserve after withdraw")
        return 1
    print("[offline-demo] OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
