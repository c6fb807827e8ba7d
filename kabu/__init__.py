"""Ticker resolution and quote report package."""

from kabu.config import Settings
from kabu.metrics import derive_report
from kabu.models import MetricsReport, QuotePayload, RankingEntry, SearchHit, TickerEntry
from kabu.normalize import normalize
from kabu.ranking import RankingAggregator, build_ranking
from kabu.registry import TickerRegistry, match_by_name
from kabu.report import render_reply
from kabu.resolver import SymbolResolver
from kabu.service import LookupService

__all__ = [
    "LookupService",
    "MetricsReport",
    "QuotePayload",
    "RankingAggregator",
    "RankingEntry",
    "SearchHit",
    "Settings",
    "SymbolResolver",
    "TickerEntry",
    "TickerRegistry",
    "build_ranking",
    "derive_report",
    "match_by_name",
    "normalize",
    "render_reply",
]
