from __future__ import annotations

import logging
from typing import Literal

from discord.ext import commands

from utils import BOT_PREFIX, chunk_lines, defer_interaction, safe_reply

log = logging.getLogger(__name__)

MAX_RANKING_LIMIT = 20


class Kabu(commands.Cog):
    """Stock lookup and movers ranking commands."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.services = bot.services  # type: ignore[attr-defined]

    @commands.hybrid_command(  # type: ignore[arg-type]
        name="kabu",
        description="銘柄名または証券コードから株価と指標を表示します。",
        help=(
            "Look up a Tokyo-listed stock by 4-digit code or company name.\n\n"
            "**Usage**: `/kabu query:<code or name>`\n"
            "**Examples**: `/kabu query:7974`, `/kabu query:任天堂`\n"
            f"`{BOT_PREFIX}kabu ｿﾆｰ`"
        ),
        extras={
            "category": "Stocks",
            "destination": "Price, PER/PBR, EPS, dividend, yield, ROE, BPS and market cap.",
            "plus": "Blank input returns a usage hint; unknown names say so instead of guessing.",
            "pro": (
                "Full-width and mixed-case names are normalized; an exact registry "
                "name beats a partial one, and Yahoo search is the last resort."
            ),
        },
    )
    async def kabu(self, ctx: commands.Context, *, query: str = "") -> None:
        await defer_interaction(ctx)
        log.info("/kabu from user %s: %r", ctx.author.id, query)
        reply = await self.services.lookup.reply_for(query)
        await safe_reply(ctx, reply, mention_author=False)

    @commands.hybrid_command(  # type: ignore[arg-type]
        name="ranking",
        description="本日の値上がり・値下がり・出来高ランキングを表示します。",
        help=(
            "Show today's movers on the Tokyo market.\n\n"
            "**Usage**: `/ranking kind:<gainers|losers|volume> limit:<1-20>`\n"
            f"`{BOT_PREFIX}ranking gainers 5`"
        ),
        extras={
            "category": "Stocks",
            "destination": "Numbered movers digest in upstream order.",
            "plus": "Labels use the registry company name when the code is known.",
            "pro": "Order is taken as-is from the Yahoo screener; limit is clamped to 1-20.",
        },
    )
    async def ranking(
        self,
        ctx: commands.Context,
        kind: Literal["gainers", "losers", "volume"] = "gainers",
        limit: int = 5,
    ) -> None:
        await defer_interaction(ctx)
        limit = max(1, min(int(limit), MAX_RANKING_LIMIT))
        text = await self.services.ranking.digest(kind, limit)
        for chunk in chunk_lines(text):
            await safe_reply(ctx, chunk, mention_author=False)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Kabu(bot))
