from __future__ import annotations

import logging
import re
from typing import Protocol, Sequence

from kabu.errors import KabuError
from kabu.models import SearchHit
from kabu.normalize import normalize
from kabu.registry import TickerRegistry

log = logging.getLogger(__name__)

CODE_ONLY_RE = re.compile(r"^[0-9]{4}$")


class SymbolSearch(Protocol):
    async def search(self, query: str) -> Sequence[SearchHit]: ...


class SymbolResolver:
    """Turn free-form input into an exchange symbol such as ``7974.T``.

    Order: a bare 4-digit code, then the registry (exact before partial
    name match), then the external search. Never raises; ``None`` means the
    input could not be resolved.
    """

    def __init__(
        self,
        registry: TickerRegistry,
        search: SymbolSearch,
        *,
        suffix: str = ".T",
        exchange: str = "JPX",
    ) -> None:
        self.registry = registry
        self.search = search
        self.suffix = suffix
        self.exchange = exchange

    def _pick_hit(self, hits: Sequence[SearchHit]) -> str | None:
        for hit in hits:
            if hit.exchange == self.exchange and hit.symbol.endswith(self.suffix):
                return hit.symbol
        return None

    async def resolve(self, raw: str | None) -> str | None:
        if not isinstance(raw, str) or not raw.strip():
            return None

        query = normalize(raw.strip())
        if not query:
            return None
        if CODE_ONLY_RE.match(query):
            return query + self.suffix

        entry = self.registry.match(query)
        if entry is not None:
            return entry.code + self.suffix

        try:
            hits = await self.search.search(query)
        except KabuError as exc:
            log.warning("Symbol search failed for %r: %s", query, exc)
            return None
        except Exception:
            log.exception("Symbol search crashed for %r", query)
            return None

        symbol = self._pick_hit(hits or [])
        if symbol is None:
            log.info("No %s listing in search results for %r", self.exchange, query)
        return symbol
