"""Yahoo Finance backed collaborators for search, quotes and movers.

yfinance does synchronous I/O, so every call into it is wrapped in
``asyncio.to_thread``. The search endpoint is queried directly over aiohttp
first because it is cheaper and supports the Japanese locale.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Sequence

import aiohttp
import yfinance as yf
from yfinance import Search
from yfinance.data import YfData

from kabu.errors import (
    KabuErrorCode,
    QuoteFetchError,
    RankingFetchError,
    SearchError,
)
from kabu.models import QUOTE_MODULES, MoversKind, QuotePayload, RankingEntry, SearchHit

log = logging.getLogger(__name__)

SEARCH_URL = "https://query1.finance.yahoo.com/v1/finance/search"
QUOTE_SUMMARY_URL = "https://query2.finance.yahoo.com/v10/finance/quoteSummary"

# (sort field, ascending)
MOVERS_SORT: dict[str, tuple[str, bool]] = {
    "gainers": ("percentchange", False),
    "losers": ("percentchange", True),
    "volume": ("dayvolume", False),
}


async def _to_thread(func, *args, **kwargs):
    return await asyncio.to_thread(func, *args, **kwargs)


def _hits(quotes: Iterable[Any]) -> list[SearchHit]:
    out: list[SearchHit] = []
    for q in quotes:
        if not isinstance(q, dict):
            continue
        symbol = str(q.get("symbol") or "").strip()
        if not symbol:
            continue
        out.append(
            SearchHit(
                symbol=symbol,
                exchange=str(q.get("exchange") or ""),
                name=q.get("shortname") or q.get("longname"),
            )
        )
    return out


class YahooSearchClient:
    def __init__(
        self,
        *,
        region: str = "JP",
        lang: str = "ja-JP",
        limit: int = 8,
        timeout_s: float = 10.0,
    ) -> None:
        self.region = region
        self.lang = lang
        self.limit = limit
        self.timeout_s = timeout_s

    async def _search_http(self, query: str) -> list[dict[str, Any]]:
        params = {
            "q": query,
            "quotesCount": str(self.limit),
            "newsCount": "0",
            "listsCount": "0",
            "enableFuzzyQuery": "true",
            "region": self.region,
            "lang": self.lang,
        }
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(SEARCH_URL, params=params) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        quotes = data.get("quotes") if isinstance(data, dict) else None
        return [q for q in quotes or [] if isinstance(q, dict)]

    async def search(self, query: str) -> Sequence[SearchHit]:
        query = (query or "").strip()
        if not query:
            return []

        http_error: Exception | None = None
        try:
            hits = _hits(await self._search_http(query))
            if hits:
                return hits
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            http_error = exc
            log.warning("Yahoo search HTTP failed for %r: %s", query, exc)

        def _sync():
            s = Search(query, max_results=self.limit, news_count=0, enable_fuzzy_query=True)
            return list(s.quotes or [])

        try:
            quotes = await _to_thread(_sync)
        except Exception as exc:
            raise SearchError(f"search failed for {query!r}: {exc}", retryable=True) from (
                http_error or exc
            )
        return _hits(quotes)


class YFinanceQuoteClient:
    """Fetch quoteSummary modules through yfinance's cookie/crumb session."""

    def __init__(self, *, timeout_s: float = 10.0, data: YfData | None = None) -> None:
        self.timeout_s = timeout_s
        self._data = data

    def _fetch_sync(self, symbol: str, modules: Sequence[str]) -> dict[str, Any]:
        data = self._data or YfData()
        params = {
            "modules": ",".join(modules),
            "corsDomain": "finance.yahoo.com",
            "formatted": "false",
            "symbol": symbol,
        }
        return data.get_raw_json(
            f"{QUOTE_SUMMARY_URL}/{symbol}", params=params, timeout=self.timeout_s
        )

    async def fetch_quote(
        self, symbol: str, modules: Sequence[str] = QUOTE_MODULES
    ) -> QuotePayload:
        try:
            raw = await _to_thread(self._fetch_sync, symbol, tuple(modules))
        except Exception as exc:
            raise QuoteFetchError(f"quoteSummary failed for {symbol}: {exc}", retryable=True) from exc

        summary = raw.get("quoteSummary") if isinstance(raw, dict) else None
        if not isinstance(summary, dict):
            raise QuoteFetchError(
                f"malformed quoteSummary for {symbol}", code=KabuErrorCode.MALFORMED
            )
        if summary.get("error"):
            raise QuoteFetchError(
                f"quoteSummary error for {symbol}: {summary['error']}",
                code=KabuErrorCode.NOT_FOUND,
            )
        results = summary.get("result") or []
        if not results or not isinstance(results[0], dict):
            raise QuoteFetchError(f"no quoteSummary result for {symbol}", code=KabuErrorCode.NOT_FOUND)
        return QuotePayload.from_raw(results[0])


def _change(q: dict[str, Any]) -> float | None:
    value = q.get("regularMarketChangePercent")
    if isinstance(value, dict):
        value = value.get("raw")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class YFinanceMoversClient:
    """Day movers for one region via the Yahoo equity screener."""

    def __init__(self, *, region: str = "jp", size: int = 25) -> None:
        self.region = region
        self.size = size

    def _screen_sync(self, kind: MoversKind) -> dict[str, Any]:
        sort_field, ascending = MOVERS_SORT[kind]
        query = yf.EquityQuery("eq", ["region", self.region])
        return yf.screen(query, size=self.size, sortField=sort_field, sortAsc=ascending)

    async def fetch_movers(self, kind: MoversKind) -> Sequence[RankingEntry]:
        if kind not in MOVERS_SORT:
            raise RankingFetchError(f"unknown movers kind: {kind}", code=KabuErrorCode.MALFORMED)
        try:
            resp = await _to_thread(self._screen_sync, kind)
        except Exception as exc:
            raise RankingFetchError(f"screener failed for {kind}: {exc}", retryable=True) from exc

        quotes = resp.get("quotes") if isinstance(resp, dict) else None
        if not isinstance(quotes, list):
            raise RankingFetchError(f"malformed screener response for {kind}", code=KabuErrorCode.MALFORMED)

        out: list[RankingEntry] = []
        for q in quotes:
            if not isinstance(q, dict):
                continue
            symbol = str(q.get("symbol") or "").strip() or None
            label = q.get("shortName") or q.get("longName") or symbol
            if not label:
                continue
            out.append(
                RankingEntry(
                    rank=len(out) + 1,
                    label=str(label),
                    change_percent=_change(q),
                    symbol=symbol,
                )
            )
        return out
