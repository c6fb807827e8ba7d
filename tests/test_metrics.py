from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

sys.path.append(str(Path(__file__).resolve().parents[1]))

from kabu.metrics import derive_per, derive_report, format_market_cap, to_fixed  # noqa: E402
from kabu.models import UNAVAILABLE, QuotePayload  # noqa: E402


def _payload(
    *,
    price: dict[str, Any] | None = None,
    detail: dict[str, Any] | None = None,
    stats: dict[str, Any] | None = None,
    fin: dict[str, Any] | None = None,
) -> QuotePayload:
    return QuotePayload.from_raw(
        {
            "price": price or {},
            "summaryDetail": detail or {},
            "defaultKeyStatistics": stats or {},
            "financialData": fin or {},
        }
    )


def test_per_skips_non_positive_trailing_for_forward() -> None:
    assert derive_per(_payload(stats={"trailingPE": -1}, fin={"forwardPE": 10})) == "10.00"
    assert derive_per(_payload(stats={"trailingPE": 0}, fin={"forwardPE": 12.5})) == "12.50"


def test_per_prefers_positive_trailing() -> None:
    assert derive_per(_payload(stats={"trailingPE": 5})) == "5.00"
    assert derive_per(_payload(stats={"trailingPE": 5}, fin={"forwardPE": 9})) == "5.00"


def test_per_computes_price_over_eps_last() -> None:
    payload = _payload(
        price={"regularMarketPrice": 100},
        stats={"trailingPE": None, "trailingEps": 20},
        fin={"forwardPE": None},
    )
    assert derive_per(payload) == "5.00"


def test_per_needs_positive_eps_and_numeric_price() -> None:
    assert derive_per(_payload(price={"regularMarketPrice": 100}, stats={"trailingEps": -3})) == UNAVAILABLE
    assert derive_per(_payload(price={"regularMarketPrice": "100"}, stats={"trailingEps": 5})) == UNAVAILABLE
    assert derive_per(_payload()) == UNAVAILABLE


def test_per_ignores_non_numeric_ratios() -> None:
    payload = _payload(stats={"trailingPE": "Infinity"}, fin={"forwardPE": True})
    assert derive_per(payload) == UNAVAILABLE


def test_market_cap_scaling() -> None:
    assert format_market_cap(1.5e12) == "1.50兆円"
    assert format_market_cap(1e12) == "1.00兆円"
    assert format_market_cap(5e9) == "50億円"
    assert format_market_cap(123_456_789_012) == "1235億円"
    assert format_market_cap(999_950_000_000) == "10000億円"


def test_market_cap_unavailable() -> None:
    for value in (None, 0, -5e9, "1e12", float("nan")):
        assert format_market_cap(value) == UNAVAILABLE


def test_report_fields_from_wrapped_values() -> None:
    payload = _payload(
        price={"regularMarketPrice": {"raw": 2500.0, "fmt": "2,500"}, "marketCap": {"raw": 3.2e12}},
        detail={"dividendRate": 50, "dividendYield": 0.0215},
        stats={"priceToBook": 1.234, "trailingEps": 123.45, "bookValue": 1234.5},
        fin={"returnOnEquity": 0.1234},
    )
    report = derive_report(payload, "任天堂")
    assert report.name == "任天堂"
    assert report.price == "2500"
    assert report.per == "20.25"
    assert report.pbr == "1.23"
    assert report.eps == "123.45"
    assert report.dividend_rate == "50"
    assert report.dividend_yield_pct == "2.15"
    assert report.roe_pct == "12.34"
    assert report.bps == "1235"
    assert report.market_cap == "3.20兆円"


def test_fractional_price_is_shown_as_is() -> None:
    assert derive_report(_payload(price={"regularMarketPrice": 1234.5}), "x").price == "1234.5"


def test_negative_roe_is_kept() -> None:
    assert derive_report(_payload(fin={"returnOnEquity": -0.05}), "x").roe_pct == "-5.00"


def test_missing_or_malformed_fields_degrade_individually() -> None:
    payload = QuotePayload.from_raw(
        {
            "price": {"regularMarketPrice": True, "marketCap": [1, 2]},
            "summaryDetail": "garbage",
            "defaultKeyStatistics": {"priceToBook": 0, "bookValue": "n/a"},
        }
    )
    report = derive_report(payload, "7203.T")
    assert report.name == "7203.T"
    for value in (
        report.price,
        report.per,
        report.pbr,
        report.eps,
        report.dividend_rate,
        report.dividend_yield_pct,
        report.roe_pct,
        report.bps,
        report.market_cap,
    ):
        assert value == UNAVAILABLE


def test_non_mapping_payload_is_empty() -> None:
    report = derive_report(QuotePayload.from_raw(None), "AAPL")
    assert report.price == UNAVAILABLE
    assert report.market_cap == UNAVAILABLE


def test_exact_ties_round_away_from_zero() -> None:
    assert to_fixed(0.125) == "0.13"
    assert to_fixed(-0.125) == "-0.13"
    assert to_fixed(2.5, 0) == "3"
    # 2.675 is stored just below the tie
    assert to_fixed(2.675) == "2.67"
    report = derive_report(_payload(stats={"priceToBook": 0.125, "trailingPE": 10.125}), "X")
    assert report.pbr == "0.13"
    assert report.per == "10.13"
    assert format_market_cap(1.125e12) == "1.13兆円"
