import discord
from discord.ext import commands
from utils import BOT_PREFIX, build_suggestions, defer_interaction
from datetime import datetime, timezone
from typing import List, Tuple

HELP_COLOR = 0x2E86C1
FOOTER = "銘柄名または4桁コードを送るだけでも回答します"


def _help_entries(bot: commands.Bot) -> List[Tuple[str, str]]:
    entries: List[Tuple[str, str]] = []
    for c in sorted((c for c in bot.commands if not c.hidden), key=lambda c: c.qualified_name):
        entries.append((f"/{c.qualified_name}", c.description or "-"))
    for e in sorted(getattr(bot, "events", []), key=lambda e: e.name):
        entries.append((f"[{e.name}]", e.destination or "-"))
    return entries


def make_help_embed(bot: commands.Bot) -> discord.Embed:
    embed = discord.Embed(
        title="\U0001F4C8 Kabu Bot Help",
        description="株価検索とランキング配信のコマンド・イベント一覧です。",
        color=HELP_COLOR,
        timestamp=datetime.now(timezone.utc),
    )
    for name, value in _help_entries(bot)[:25]:
        embed.add_field(name=name, value=value, inline=False)
    embed.set_footer(text=FOOTER)
    return embed


def make_command_help_embed(bot: commands.Bot, name: str) -> discord.Embed | None:
    """Build a help embed for a command or event."""
    cmd = bot.get_command(name)
    if cmd and not cmd.hidden:
        extras = getattr(cmd, "extras", {})
        embed = discord.Embed(
            title=f"\U0001F4D6 Command Help: /{cmd.qualified_name}",
            color=HELP_COLOR,
            timestamp=datetime.now(timezone.utc),
        )
        destination = extras.get("destination") or cmd.description
        if destination:
            embed.add_field(name="Destination", value=destination, inline=False)
        if cmd.help:
            embed.add_field(name="Usage", value=cmd.help, inline=False)
        for key in ("plus", "pro"):
            if extras.get(key):
                embed.add_field(name=key.capitalize(), value=extras[key], inline=False)
        embed.set_footer(text=FOOTER)
        return embed
    info = next((e for e in getattr(bot, "events", []) if e.name == name), None)
    if not info:
        return None
    embed = discord.Embed(
        title=f"\U0001F4D6 Event Help: {info.name}",
        color=HELP_COLOR,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="Destination", value=info.destination, inline=False)
    if info.plus:
        embed.add_field(name="Plus", value=info.plus, inline=False)
    if info.example:
        embed.add_field(name="Example", value=info.example, inline=False)
    embed.set_footer(text=FOOTER)
    return embed


class Help(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.hybrid_command(
        name="help",
        description="コマンドとイベントの一覧、または個別の詳細を表示します。",
        help=(
            "List commands and events, or show details for one of them.\n\n"
            "**Usage**: `/help [command]`\n"
            "**Examples**: `/help kabu`, `/help ticker_reply`\n"
            f"`{BOT_PREFIX}help ranking`"
        ),
        extras={
            "category": "Utility",
            "destination": "Overview embed of every command and event.",
            "plus": "Event names such as ticker_reply and ranking_push are accepted too.",
            "pro": "Unknown names get up to three close command suggestions.",
        },
    )
    async def help(self, ctx: commands.Context, *, command: str | None = None) -> None:
        """Show help for a command or list commands."""
        await defer_interaction(ctx)
        if not command:
            await ctx.send(embed=make_help_embed(self.bot))
            return
        embed = make_command_help_embed(self.bot, command.strip().lower())
        if embed:
            await ctx.send(embed=embed)
            return
        suggestions = build_suggestions(command, self.bot.commands)
        prefix = getattr(ctx, "prefix", None) or BOT_PREFIX
        message = "コマンドが見つかりません。"
        if suggestions:
            message += "もしかして:\n" + "\n".join(suggestions)
        else:
            message += f"{prefix}help で一覧を確認できます。"
        await ctx.send(message)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Help(bot))
