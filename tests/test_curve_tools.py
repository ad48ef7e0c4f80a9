from __future__ import annotations

import json
from pathlib import Path

import pytest


def test_build_quote_quadratic() -> None:
    from tools.curve_quote import build_quote

    from curvemint.integration.config import CurveConfig

    report = build_quote(
        CurveConfig(initial_mint_price=1, slope=1, exponent_numerator=2),
        supply=3,
        quantity=2,
        burn=2,
        show_units=5,
    )
    assert report["schema"] == "curvemint/quote/v1"
    assert report["curve"]["strategy"] == "closed_form"
    assert report["mint"] == {"quantity": 2, "cost": 16 + 25}
    assert report["burn"] == {"quantity": 2, "return": 13}
    assert report["next_units"] == [{"index": 4, "price": 16}, {"index": 5, "price": 25}]


def test_quote_cli_prints_json(capsys) -> None:
    from tools.curve_quote import main

    rc = main(["--exp-num", "3", "--exp-den", "2", "--price", "100", "--slope", "10", "--quantity", "4"])
    assert rc == 0
    report = json.loads(capsys.readouterr().out)
    assert report["curve"]["strategy"] == "fractional"
    assert report["curve"]["exponent"] == "3/2"
    assert report["next_units"][3] == {"index": 4, "price": 170}


def test_quote_cli_reads_config(tmp_path: Path, capsys, monkeypatch) -> None:
    from tools.curve_quote import main

    monkeypatch.delenv("CURVEMINT_SLOPE", raising=False)
    path = tmp_path / "curve.yaml"
    path.write_text(
        "initial_mint_price: 10\nslope: 1\nexponent_numerator: 12\n"
        "fees: {platform_account: p, platform_rate: 10, creator_account: c, creator_rate: 0}\n",
        encoding="utf-8",
    )
    assert main(["--config", str(path), "--supply", "1", "--burn", "1"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["curve"]["strategy"] == "iterative"
    assert report["curve"]["platform_rate"] == 10
    assert report["burn"]["return"] == 10 * 90 // 100


def test_offline_demo_runs(capsys) -> None:
    from tools.curve_offline_demo import main

    assert main() == 0
    assert "[offline-demo] OK" in capsys.readouterr().out


def test_build_quote_rejects_rates_without_accounts() -> None:
    from tools.curve_quote import build_quote

    from curvemint.integration.config import CurveConfig

    with pytest.raises(ValueError, match="without both"):
        build_quote(CurveConfig(creator_rate=5), supply=0, quantity=1, burn=0, show_units=1)
