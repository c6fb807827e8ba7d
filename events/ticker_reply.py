from __future__ import annotations

import logging

import discord
from discord.ext import commands

from events import EventInfo

log = logging.getLogger(__name__)


EVENT_INFO = EventInfo(
    name="ticker_reply",
    destination="Reply with a stock summary to any plain message in DMs or lookup channels.",
    plus="Accepts a 4-digit code or a company name in any width or case.",
    example="7974 / 任天堂 / ｿﾆｰ",
)


class TickerReply(commands.Cog):
    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot
        self.services = bot.services  # type: ignore[attr-defined]

    def _should_answer(self, message: discord.Message) -> bool:
        if message.author.bot:
            return False
        if message.guild is None:
            return True
        return message.channel.id in self.services.settings.reply_channel_ids

    async def _is_command(self, message: discord.Message) -> bool:
        # any prefixed or mention-prefixed text belongs to the command handler,
        # including unknown commands answered by on_command_error
        ctx = await self.bot.get_context(message)
        return ctx.prefix is not None

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if not self._should_answer(message):
            return
        # attachment-only / sticker messages carry no text to look up
        if not message.content:
            return
        if await self._is_command(message):
            return

        log.info("Lookup from user %s: %r", message.author.id, message.content)
        reply = await self.services.lookup.reply_for(message.content)
        try:
            await message.reply(reply, mention_author=False)
        except discord.HTTPException:
            log.exception("Failed to reply to message %s", message.id)


async def setup(bot: commands.Bot) -> None:
    if not hasattr(bot, "events"):
        bot.events = []
    bot.events.append(EVENT_INFO)
    await bot.add_cog(TickerReply(bot))
