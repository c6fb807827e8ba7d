from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.append(str(Path(__file__).resolve().parents[1]))

from commands.kabu import MAX_RANKING_LIMIT, Kabu  # noqa: E402


class _FakeCtx:
    def __init__(self) -> None:
        self.interaction = None
        self.author = SimpleNamespace(id=5)
        self.typed = 0
        self.replies: list[str] = []

    async def typing(self) -> None:
        self.typed += 1

    async def reply(self, text: str, **kwargs) -> None:
        self.replies.append(text)


class _FakeLookup:
    async def reply_for(self, text: str) -> str:
        return f"lookup:{text}"


class _FakeRanking:
    def __init__(self, text: str = "digest") -> None:
        self.text = text
        self.calls: list[tuple[str, int]] = []

    async def digest(self, kind: str = "gainers", limit: int = 5) -> str:
        self.calls.append((kind, limit))
        return self.text


def _cog(ranking: _FakeRanking | None = None) -> Kabu:
    bot = SimpleNamespace(
        services=SimpleNamespace(lookup=_FakeLookup(), ranking=ranking or _FakeRanking())
    )
    return Kabu(bot)  # type: ignore[arg-type]


def test_kabu_command_replies_with_lookup() -> None:
    cog = _cog()
    ctx = _FakeCtx()
    asyncio.run(Kabu.kabu.callback(cog, ctx, query="7974"))
    assert ctx.typed == 1
    assert ctx.replies == ["lookup:7974"]


def test_ranking_command_clamps_limit() -> None:
    ranking = _FakeRanking()
    cog = _cog(ranking)
    asyncio.run(Kabu.ranking.callback(cog, _FakeCtx(), kind="volume", limit=100))
    asyncio.run(Kabu.ranking.callback(cog, _FakeCtx(), kind="losers", limit=0))
    assert ranking.calls == [("volume", MAX_RANKING_LIMIT), ("losers", 1)]


def test_ranking_command_splits_long_digests() -> None:
    text = "\n".join(f"{i}位：" + "株" * 150 for i in range(1, 21))
    ctx = _FakeCtx()
    asyncio.run(Kabu.ranking.callback(_cog(_FakeRanking(text)), ctx, kind="gainers", limit=20))
    assert len(ctx.replies) > 1
    assert all(len(chunk) <= 2000 for chunk in ctx.replies)
    assert "\n".join(ctx.replies) == text
