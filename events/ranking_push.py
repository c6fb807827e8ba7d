from __future__ import annotations

import logging
from datetime import time

import discord
from discord.ext import commands, tasks

from events import EventInfo
from kabu.config import JST

log = logging.getLogger(__name__)

MANUAL_TEST_PREFIX = "[手動テスト通知]\n"


EVENT_INFO = EventInfo(
    name="ranking_push",
    destination="DM the daily market movers digest to the configured user.",
    plus="Runs every day at RANKING_PUSH_TIME (JST); optionally once at startup.",
)


class RankingPush(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.services = bot.services  # type: ignore[attr-defined]
        self._sent_startup = False
        settings = self.services.settings
        if settings.push_user_id is not None:
            self.daily_push.change_interval(time=settings.push_time)
            self.daily_push.start()
        else:
            log.info("RANKING_PUSH_USER_ID not set; daily ranking push disabled")

    def cog_unload(self) -> None:
        self.daily_push.cancel()

    async def _recipient(self, user_id: int) -> discord.abc.Messageable:
        user = self.bot.get_user(user_id)
        if user is None:
            user = await self.bot.fetch_user(user_id)
        return user

    async def push_digest(self, *, prefix: str = "") -> bool:
        """Fetch the digest and DM it. Delivery failures are logged, not raised."""
        settings = self.services.settings
        if settings.push_user_id is None:
            return False
        text = await self.services.ranking.digest(settings.ranking_kind, settings.ranking_limit)
        try:
            target = await self._recipient(settings.push_user_id)
            await target.send(prefix + text)
        except discord.HTTPException:
            log.exception("Ranking push to %s failed", settings.push_user_id)
            return False
        log.info("Ranking push delivered to %s", settings.push_user_id)
        return True

    @tasks.loop(time=time(9, 0, tzinfo=JST))
    async def daily_push(self) -> None:
        await self.push_digest()

    @daily_push.before_loop
    async def _before_daily_push(self) -> None:
        await self.bot.wait_until_ready()

    @daily_push.error
    async def _daily_push_error(self, error: BaseException) -> None:
        log.exception("Daily ranking push crashed", exc_info=error)

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        if self._sent_startup or not self.services.settings.push_on_start:
            return
        self._sent_startup = True
        await self.push_digest(prefix=MANUAL_TEST_PREFIX)


async def setup(bot: commands.Bot) -> None:
    if not hasattr(bot, "events"):
        bot.events = []
    bot.events.append(EVENT_INFO)
    await bot.add_cog(RankingPush(bot))
