#!/usr/bin/env python3
"""
Quote a bonding curve without touching any ledger.

Prints per-unit prices, the cost of minting the next `--quantity` units and the
return on burning the top `--burn` units at a given supply, as JSON.

Examples:
  python tools/curve_quote.py --price 1 --slope 1 --exp-num 2 --supply 0 --quantity 3
  python tools/curve_quote.py --config curve.yaml --supply 100 --quantity 10
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from curvemint.core.curve import pricing_strategy, quote_cost_to_mint, quote_return_on_burn, unit_price
from curvemint.integration.config import (
    CurveConfig,
    apply_env_overrides,
    curve_state_from_config,
    load_curve_config,
)
from curvemint.kernels.python.power_math_v1 import ExactPowerMath


def build_quote(config: CurveConfig, *, supply: int, quantity: int, burn: int, show_units: int) -> dict[str, Any]:
    state = curve_state_from_config(config)
    state.total_supply = supply
    power_math = ExactPowerMath(config.pow_precision)
    units = [
        {"index": i, "price": unit_price(state.params, i, power_math)}
        for i in range(supply + 1, supply + 1 + min(show_units, quantity))
    ]
    return {
        "schema": "curvemint/quote/v1",
        "curve": {
            "name": config.name,
            "initial_mint_price": config.initial_mint_price,
            "slope": config.slope,
            "exponent": f"{config.exponent_numerator}/{config.exponent_denominator}",
            "strategy": pricing_strategy(state.params).value,
            "platform_rate": state.fees.platform_rate,
            "creator_rate": state.fees.creator_rate,
        },
        "supply": supply,
        "mint": {"quantity": quantity, "cost": quote_cost_to_mint(state, quantity, power_math)},
        "burn": {"quantity": min(burn, supply), "return": quote_return_on_burn(state, burn, power_math)},
        "next_units": units,
    }


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Quote mint cost / burn return on a bonding curve")
    ap.add_argument("--config", type=str, default="", help="YAML curve config (overrides curve flags)")
    ap.add_argument("--price", type=int, default=1, help="initial mint price, price(1)")
    ap.add_argument("--slope", type=int, default=1)
    ap.add_argument("--exp-num", type=int, default=1)
    ap.add_argument("--exp-den", type=int, default=1)
    ap.add_argument("--platform-rate", type=int, default=0)
    ap.add_argument("--creator-rate", type=int, default=0)
    ap.add_argument("--supply", type=int, default=0)
    ap.add_argument("--quantity", type=int, default=1)
    ap.add_argument("--burn", type=int, default=0)
    ap.add_argument("--show-units", type=int, default=5)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.supply < 0 or args.quantity < 0 or args.burn < 0 or args.show_units < 0:
        raise SystemExit("supply, quantity, burn and show-units must be non-negative")

    if args.config:
        config = load_curve_config(args.config)
    else:
        fees: dict[str, Any] = {}
        if args.platform_rate or args.creator_rate:
            fees = dict(
                platform_account="platform",
                platform_rate=args.platform_rate,
                creator_account="creator",
                creator_rate=args.creator_rate,
            )
        config = apply_env_overrides(
            CurveConfig(
                initial_mint_price=args.price,
                slope=args.slope,
                exponent_numerator=args.exp_num,
                exponent_denominator=args.exp_den,
                **fees,
            )
        )

    report = build_quote(
        config,
        supply=args.supply,
        quantity=args.quantity,
        burn=args.burn,
        show_units=args.show_units,
    )
    print(json.dumps(report, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
