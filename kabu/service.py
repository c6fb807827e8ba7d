from __future__ import annotations

import logging
from typing import Protocol, Sequence

from kabu.errors import KabuError
from kabu.metrics import derive_report
from kabu.models import QUOTE_MODULES, MetricsReport, QuotePayload, ReplyFailure
from kabu.registry import TickerRegistry
from kabu.report import render_reply
from kabu.resolver import SymbolResolver

log = logging.getLogger(__name__)


class QuoteSource(Protocol):
    async def fetch_quote(self, symbol: str, modules: Sequence[str] = ...) -> QuotePayload: ...


class LookupService:
    """Inbound text -> reply text. Stateless per call and never raises."""

    def __init__(
        self,
        registry: TickerRegistry,
        resolver: SymbolResolver,
        quotes: QuoteSource,
    ) -> None:
        self.registry = registry
        self.resolver = resolver
        self.quotes = quotes

    async def lookup(self, text: str | None) -> MetricsReport | ReplyFailure:
        if not text or not text.strip():
            return ReplyFailure.EMPTY_INPUT

        symbol = await self.resolver.resolve(text)
        if symbol is None:
            log.info("Could not resolve %r", text)
            return ReplyFailure.NOT_FOUND
        log.info("Resolved %r -> %s", text, symbol)

        try:
            payload = await self.quotes.fetch_quote(symbol, QUOTE_MODULES)
        except KabuError as exc:
            log.warning("Quote fetch failed for %s: %s", symbol, exc)
            return ReplyFailure.FETCH_FAILED
        except Exception:
            log.exception("Quote fetch crashed for %s", symbol)
            return ReplyFailure.FETCH_FAILED

        display = self.registry.display_name(symbol, self.resolver.suffix)
        return derive_report(payload, display)

    async def reply_for(self, text: str | None) -> str:
        return render_reply(await self.lookup(text))
