from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import time, timedelta, timezone
from pathlib import Path

from kabu.models import MOVERS_KINDS, MoversKind

JST = timezone(timedelta(hours=9), name="JST")
PUSH_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _env_str(name: str) -> str | None:
    raw = os.getenv(name)
    raw = raw.strip() if isinstance(raw, str) else None
    return raw or None


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env_str(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_ids(name: str) -> frozenset[int]:
    ids: set[int] = set()
    for part in (os.getenv(name) or "").split(","):
        part = part.strip()
        if part.isdigit():
            ids.add(int(part))
    return frozenset(ids)


def parse_push_time(raw: str | None, default: time = time(9, 0, tzinfo=JST)) -> time:
    """Parse ``HH:MM`` as a Tokyo wall-clock time."""
    m = PUSH_TIME_RE.match((raw or "").strip())
    if not m:
        return default
    return time(int(m.group(1)), int(m.group(2)), tzinfo=JST)


@dataclass(frozen=True)
class Settings:
    token: str | None
    prefix: str = "k!"
    tickers_file: Path = Path("data/japan_tickers.json")
    market_suffix: str = ".T"
    exchange: str = "JPX"
    reply_channel_ids: frozenset[int] = field(default_factory=frozenset)
    http_timeout_s: int = 10
    search_limit: int = 8
    push_user_id: int | None = None
    push_time: time = time(9, 0, tzinfo=JST)
    ranking_kind: MoversKind = "gainers"
    ranking_limit: int = 5
    push_on_start: bool = False

    @staticmethod
    def from_env() -> "Settings":
        kind = (_env_str("RANKING_KIND") or "gainers").lower()
        user_id = _env_str("RANKING_PUSH_USER_ID")
        return Settings(
            token=_env_str("DISCORD_BOT_TOKEN"),
            prefix=_env_str("BOT_PREFIX") or "k!",
            tickers_file=Path(_env_str("KABU_TICKERS_FILE") or "data/japan_tickers.json"),
            market_suffix=_env_str("KABU_MARKET_SUFFIX") or ".T",
            exchange=_env_str("KABU_EXCHANGE") or "JPX",
            reply_channel_ids=_env_ids("KABU_REPLY_CHANNEL_IDS"),
            http_timeout_s=_env_int("KABU_HTTP_TIMEOUT_S", 10),
            search_limit=_env_int("KABU_SEARCH_LIMIT", 8),
            push_user_id=int(user_id) if user_id and user_id.isdigit() else None,
            push_time=parse_push_time(_env_str("RANKING_PUSH_TIME")),
            ranking_kind=kind if kind in MOVERS_KINDS else "gainers",  # type: ignore[arg-type]
            ranking_limit=_env_int("RANKING_LIMIT", 5),
            push_on_start=_env_bool("RANKING_PUSH_ON_START"),
        )

    def token_valid(self) -> bool:
        return bool(self.token) and not str(self.token).startswith("YOUR_")
