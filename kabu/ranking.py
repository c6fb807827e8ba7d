from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Protocol, Sequence

from kabu.errors import KabuError
from kabu.metrics import to_fixed
from kabu.models import UNAVAILABLE, MoversKind, RankingEntry
from kabu.registry import TickerRegistry

log = logging.getLogger(__name__)

MSG_RANKING_FAILED = "ランキング取得に失敗しました。"
MSG_RANKING_EMPTY = "該当銘柄がありません。"

BANNERS: dict[str, str] = {
    "gainers": "📈本日の上昇率ランキングTOP{limit}",
    "losers": "📉本日の下落率ランキングTOP{limit}",
    "volume": "📊本日の出来高ランキングTOP{limit}",
}


class MoversSource(Protocol):
    async def fetch_movers(self, kind: MoversKind) -> Sequence[RankingEntry]: ...


def _fmt_change(change: float | None) -> str:
    if change is None or isinstance(change, bool) or not math.isfinite(change):
        return f"{UNAVAILABLE}%"
    text = to_fixed(change)
    return f"{text}%" if text.startswith("-") else f"+{text}%"


def build_ranking(
    entries: Sequence[RankingEntry], limit: int, *, kind: MoversKind = "gainers"
) -> str:
    """Render the first ``limit`` entries in upstream order, numbered from 1."""
    banner = BANNERS.get(kind, BANNERS["gainers"]).format(limit=limit)
    top = list(entries)[: max(limit, 0)]
    if not top:
        return f"{banner}\n\n{MSG_RANKING_EMPTY}"
    lines = [
        f"{i}位：{entry.label} {_fmt_change(entry.change_percent)}"
        for i, entry in enumerate(top, start=1)
    ]
    return f"{banner}\n\n" + "\n".join(lines)


class RankingAggregator:
    """Fetch a movers list and render it as a digest; never raises."""

    def __init__(
        self,
        movers: MoversSource,
        registry: TickerRegistry | None = None,
        *,
        suffix: str = ".T",
    ) -> None:
        self.movers = movers
        self.registry = registry
        self.suffix = suffix

    def _relabel(self, entry: RankingEntry) -> RankingEntry:
        if self.registry is None or not entry.symbol:
            return entry
        name = self.registry.display_name(entry.symbol, self.suffix)
        if name == entry.symbol:
            return entry
        return replace(entry, label=name)

    async def digest(self, kind: MoversKind = "gainers", limit: int = 5) -> str:
        try:
            entries = await self.movers.fetch_movers(kind)
        except KabuError as exc:
            log.warning("Ranking fetch failed (%s): %s", kind, exc)
            return MSG_RANKING_FAILED
        except Exception:
            log.exception("Ranking fetch crashed (%s)", kind)
            return MSG_RANKING_FAILED
        return build_ranking([self._relabel(e) for e in entries or []], limit, kind=kind)
