import os

from discord.ext import commands
from difflib import SequenceMatcher
from typing import Iterable, List

BOT_PREFIX = os.getenv("BOT_PREFIX", "k!")
DISCORD_MESSAGE_LIMIT = 2000


async def defer_interaction(ctx: commands.Context) -> None:
    """Show a 'processing' state while a command runs."""
    if ctx.interaction and not ctx.interaction.response.is_done():
        await ctx.interaction.response.defer(thinking=True)
    else:
        await ctx.typing()


async def safe_reply(ctx: commands.Context, *args, **kwargs):
    """Send an ephemeral reply when possible.

    If the context has an interaction, pass through the ``ephemeral`` flag to
    ``ctx.reply``. Otherwise, fall back to ``ctx.reply``/``ctx.send`` without the
    flag to avoid ``TypeError`` in prefix commands.
    """
    ephemeral = kwargs.pop("ephemeral", False)
    if ctx.interaction:
        return await ctx.reply(*args, ephemeral=ephemeral, **kwargs)
    func = getattr(ctx, "reply", None) or ctx.send
    return await func(*args, **kwargs)


def chunk_lines(text: str, max_len: int = DISCORD_MESSAGE_LIMIT) -> list[str]:
    """Split ``text`` on line boundaries into chunks no longer than ``max_len``."""
    chunks: list[str] = []
    buf = ""
    for line in text.split("\n"):
        while len(line) > max_len:
            if buf:
                chunks.append(buf)
                buf = ""
            chunks.append(line[:max_len])
            line = line[max_len:]
        candidate = f"{buf}\n{line}" if buf else line
        if len(candidate) <= max_len:
            buf = candidate
        else:
            chunks.append(buf)
            buf = line
    if buf:
        chunks.append(buf)
    return chunks


def build_suggestions(
    query: str,
    commands_iter: Iterable[commands.Command],
    *,
    max_results: int = 3,
    threshold: float = 0.35,
) -> List[str]:
    """Rank visible command names by fuzzy similarity to ``query``."""

    query = query.strip().lower()
    if not query:
        return []

    ranked: list[tuple[float, str]] = []
    for cmd in commands_iter:
        if getattr(cmd, "hidden", False):
            continue
        for name in (cmd.qualified_name, *getattr(cmd, "aliases", [])):
            score = SequenceMatcher(None, query, name.lower()).ratio()
            if score >= threshold:
                ranked.append((score, name))

    ranked.sort(key=lambda item: item[0], reverse=True)
    return [f"- /{name} ({score * 100:.0f}%)" for score, name in ranked[:max_results]]
