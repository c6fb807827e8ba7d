"""Derive a display-ready metrics report from an untrusted quote payload."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from kabu.models import UNAVAILABLE, MetricsReport, QuotePayload

TRILLION = 1e12
HUNDRED_MILLION = 1e8


def _number(x: Any) -> float | None:
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return None
    value = float(x)
    if not math.isfinite(value):
        return None
    return value


def _present(x: Any) -> float | None:
    # zero counts as "not reported" for the pass-through fields
    value = _number(x)
    if value is None or value == 0:
        return None
    return value


def _positive(x: Any) -> float | None:
    value = _number(x)
    if value is None or value <= 0:
        return None
    return value


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _plain(x: float) -> str:
    if x.is_integer():
        return str(int(x))
    return repr(x)


def to_fixed(x: float, nd: int = 2) -> str:
    """Fixed-point text with exact binary ties rounded away from zero."""
    return str(Decimal(x).quantize(Decimal(1).scaleb(-nd), rounding=ROUND_HALF_UP))


def _fixed(x: float | None, nd: int = 2) -> str:
    if x is None:
        return UNAVAILABLE
    return to_fixed(x, nd)


def format_market_cap(market_cap: Any) -> str:
    value = _positive(market_cap)
    if value is None:
        return UNAVAILABLE
    if value >= TRILLION:
        return f"{to_fixed(value / TRILLION)}兆円"
    return f"{_round_half_up(value / HUNDRED_MILLION)}億円"


def derive_per(payload: QuotePayload) -> str:
    """Trailing P/E, then forward P/E, then price / trailing EPS."""
    trailing = _positive(payload.stats.trailing_pe)
    if trailing is not None:
        return _fixed(trailing)
    forward = _positive(payload.financial.forward_pe)
    if forward is not None:
        return _fixed(forward)
    price = _number(payload.price.regular_market_price)
    eps = _positive(payload.stats.trailing_eps)
    if price is not None and eps is not None:
        return _fixed(price / eps)
    return UNAVAILABLE


def _percent(fraction: Any) -> str:
    value = _present(fraction)
    return _fixed(value * 100) if value is not None else UNAVAILABLE


def derive_report(payload: QuotePayload, display_name: str) -> MetricsReport:
    price = _number(payload.price.regular_market_price)
    pbr = _present(payload.stats.price_to_book)
    eps = _present(payload.stats.trailing_eps)
    dividend = _present(payload.summary_detail.dividend_rate)
    bps = _present(payload.stats.book_value)

    return MetricsReport(
        name=display_name,
        price=_plain(price) if price is not None else UNAVAILABLE,
        per=derive_per(payload),
        pbr=_fixed(pbr),
        eps=_plain(eps) if eps is not None else UNAVAILABLE,
        dividend_rate=_plain(dividend) if dividend is not None else UNAVAILABLE,
        dividend_yield_pct=_percent(payload.summary_detail.dividend_yield),
        roe_pct=_percent(payload.financial.return_on_equity),
        bps=str(_round_half_up(bps)) if bps is not None else UNAVAILABLE,
        market_cap=format_market_cap(payload.price.market_cap),
    )
