from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Mapping, Union

MoversKind = Literal["gainers", "losers", "volume"]
MOVERS_KINDS: tuple[MoversKind, ...] = ("gainers", "losers", "volume")

# Upstream values are untrusted: a number, a string such as "Infinity", or absent.
Scalar = Union[int, float, str, None]

UNAVAILABLE = "-"


@dataclass(frozen=True, slots=True)
class TickerEntry:
    code: str
    name: str


@dataclass(frozen=True, slots=True)
class SearchHit:
    symbol: str
    exchange: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RankingEntry:
    rank: int
    label: str
    change_percent: float | None = None
    symbol: str | None = None


def _scalar(raw: Mapping[str, Any], key: str) -> Scalar:
    value = raw.get(key)
    # quoteSummary wraps numbers as {"raw": 1.0, "fmt": "1.00"} unless formatted=false
    if isinstance(value, Mapping):
        value = value.get("raw")
    if isinstance(value, (int, float, str)):
        return value
    return None


def _module(payload: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = payload.get(name)
    return raw if isinstance(raw, Mapping) else {}


@dataclass(frozen=True, slots=True)
class PriceModule:
    regular_market_price: Scalar = None
    market_cap: Scalar = None
    short_name: Scalar = None
    long_name: Scalar = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "PriceModule":
        return cls(
            regular_market_price=_scalar(raw, "regularMarketPrice"),
            market_cap=_scalar(raw, "marketCap"),
            short_name=_scalar(raw, "shortName"),
            long_name=_scalar(raw, "longName"),
        )


@dataclass(frozen=True, slots=True)
class SummaryDetail:
    dividend_rate: Scalar = None
    dividend_yield: Scalar = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "SummaryDetail":
        return cls(
            dividend_rate=_scalar(raw, "dividendRate"),
            dividend_yield=_scalar(raw, "dividendYield"),
        )


@dataclass(frozen=True, slots=True)
class KeyStatistics:
    trailing_pe: Scalar = None
    trailing_eps: Scalar = None
    price_to_book: Scalar = None
    book_value: Scalar = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "KeyStatistics":
        return cls(
            trailing_pe=_scalar(raw, "trailingPE"),
            trailing_eps=_scalar(raw, "trailingEps"),
            price_to_book=_scalar(raw, "priceToBook"),
            book_value=_scalar(raw, "bookValue"),
        )


@dataclass(frozen=True, slots=True)
class FinancialData:
    forward_pe: Scalar = None
    return_on_equity: Scalar = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "FinancialData":
        return cls(
            forward_pe=_scalar(raw, "forwardPE"),
            return_on_equity=_scalar(raw, "returnOnEquity"),
        )


QUOTE_MODULES: tuple[str, ...] = (
    "price",
    "summaryDetail",
    "defaultKeyStatistics",
    "financialData",
)


@dataclass(frozen=True, slots=True)
class QuotePayload:
    """The four quoteSummary modules; every field may be absent."""

    price: PriceModule = PriceModule()
    summary_detail: SummaryDetail = SummaryDetail()
    stats: KeyStatistics = KeyStatistics()
    financial: FinancialData = FinancialData()

    @classmethod
    def from_raw(cls, payload: Mapping[str, Any] | None) -> "QuotePayload":
        payload = payload if isinstance(payload, Mapping) else {}
        return cls(
            price=PriceModule.from_raw(_module(payload, "price")),
            summary_detail=SummaryDetail.from_raw(_module(payload, "summaryDetail")),
            stats=KeyStatistics.from_raw(_module(payload, "defaultKeyStatistics")),
            financial=FinancialData.from_raw(_module(payload, "financialData")),
        )


@dataclass(frozen=True, slots=True)
class MetricsReport:
    """Display-ready metrics. Every value is a formatted string or ``UNAVAILABLE``."""

    name: str
    price: str = UNAVAILABLE
    per: str = UNAVAILABLE
    pbr: str = UNAVAILABLE
    eps: str = UNAVAILABLE
    dividend_rate: str = UNAVAILABLE
    dividend_yield_pct: str = UNAVAILABLE
    roe_pct: str = UNAVAILABLE
    bps: str = UNAVAILABLE
    market_cap: str = UNAVAILABLE


class ReplyFailure(Enum):
    EMPTY_INPUT = "empty_input"
    NOT_FOUND = "not_found"
    FETCH_FAILED = "fetch_failed"
