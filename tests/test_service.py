from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any, Sequence

sys.path.append(str(Path(__file__).resolve().parents[1]))

from kabu.errors import QuoteFetchError  # noqa: E402
from kabu.models import QUOTE_MODULES, QuotePayload, ReplyFailure, SearchHit, TickerEntry  # noqa: E402
from kabu.registry import TickerRegistry  # noqa: E402
from kabu.report import MSG_EMPTY_INPUT, MSG_FETCH_FAILED, MSG_NOT_FOUND  # noqa: E402
from kabu.resolver import SymbolResolver  # noqa: E402
from kabu.service import LookupService  # noqa: E402

REGISTRY = TickerRegistry(
    [
        TickerEntry(code="7974", name="任天堂"),
        TickerEntry(code="9434", name="ソフトバンク"),
    ]
)

RAW_QUOTE: dict[str, Any] = {
    "price": {"regularMarketPrice": 8000, "marketCap": 1.04e13},
    "summaryDetail": {"dividendRate": 120, "dividendYield": 0.015},
    "defaultKeyStatistics": {"trailingPE": 25.5, "priceToBook": 4.1, "trailingEps": 313.7, "bookValue": 2045.4},
    "financialData": {"returnOnEquity": 0.165},
}


class _CountingSearch:
    def __init__(self, hits: Sequence[SearchHit] = ()) -> None:
        self.hits = list(hits)
        self.calls = 0

    async def search(self, query: str) -> Sequence[SearchHit]:
        self.calls += 1
        return self.hits


class _StubQuotes:
    def __init__(self, raw: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.raw = raw or {}
        self.error = error
        self.calls: list[tuple[str, tuple[str, ...]]] = []

    async def fetch_quote(self, symbol: str, modules: Sequence[str] = QUOTE_MODULES) -> QuotePayload:
        self.calls.append((symbol, tuple(modules)))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return QuotePayload.from_raw(self.raw)


def _service(search=None, quotes=None) -> tuple[LookupService, _CountingSearch, _StubQuotes]:
    search = search or _CountingSearch()
    quotes = quotes or _StubQuotes(RAW_QUOTE)
    resolver = SymbolResolver(REGISTRY, search)
    return LookupService(REGISTRY, resolver, quotes), search, quotes


def test_blank_input_short_circuits_to_guidance() -> None:
    service, search, quotes = _service()
    for text in ("", "   ", "　\t", None):
        assert asyncio.run(service.reply_for(text)) == MSG_EMPTY_INPUT
    assert search.calls == 0
    assert quotes.calls == []


def test_unresolved_input_reports_not_found() -> None:
    service, search, quotes = _service()
    assert asyncio.run(service.lookup("存在しない会社")) is ReplyFailure.NOT_FOUND
    assert asyncio.run(service.reply_for("存在しない会社")) == MSG_NOT_FOUND
    assert search.calls == 2
    assert quotes.calls == []


def test_name_lookup_renders_full_report() -> None:
    service, _, quotes = _service()
    reply = asyncio.run(service.reply_for("任天堂"))
    assert reply == (
        "📈 任天堂\n"
        "株価：8000円\n"
        "PER：25.50倍　PBR：4.10倍\n"
        "EPS：313.7　配当金：120円\n"
        "利回り：1.50%\n"
        "ROE：16.50%\n"
        "BPS：2045　時価総額：10.40兆円"
    )
    assert quotes.calls == [("7974.T", QUOTE_MODULES)]


def test_unknown_code_uses_symbol_as_display_name() -> None:
    service, _, _ = _service()
    reply = asyncio.run(service.reply_for("1234"))
    assert reply.startswith("📈 1234.T\n")


def test_search_resolved_symbol_in_registry_uses_registry_name() -> None:
    search = _CountingSearch([SearchHit(symbol="9434.T", exchange="JPX")])
    service, _, _ = _service(search=search)
    assert asyncio.run(service.reply_for("SoftBank Corp")).startswith("📈 ソフトバンク\n")


def test_quote_failures_become_fixed_message() -> None:
    for error in (QuoteFetchError("down"), RuntimeError("boom"), KeyError("price")):
        service, _, _ = _service(quotes=_StubQuotes(error=error))
        assert asyncio.run(service.reply_for("7974")) == MSG_FETCH_FAILED


def test_concurrent_lookups_are_independent() -> None:
    service, _, quotes = _service()

    async def _run() -> list[str]:
        return await asyncio.gather(
            service.reply_for("7974"),
            service.reply_for(""),
            service.reply_for("ソフトバンク"),
        )

    replies = asyncio.run(_run())
    assert replies[0].startswith("📈 任天堂\n")
    assert replies[1] == MSG_EMPTY_INPUT
    assert replies[2].startswith("📈 ソフトバンク\n")
    assert sorted(symbol for symbol, _ in quotes.calls) == ["7974.T", "9434.T"]
