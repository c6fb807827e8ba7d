"""Discord bot entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import discord
from discord import app_commands
from discord.ext import commands
from dotenv import load_dotenv

from events import EventInfo
from kabu.clients import YahooSearchClient, YFinanceMoversClient, YFinanceQuoteClient
from kabu.config import Settings
from kabu.errors import RegistryLoadError
from kabu.ranking import RankingAggregator
from kabu.registry import TickerRegistry
from kabu.resolver import SymbolResolver
from kabu.service import LookupService
from utils import BOT_PREFIX, build_suggestions, safe_reply

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent

COMMANDS_PATH = BASE_DIR / "commands"
EVENTS_PATH = BASE_DIR / "events"


def setup_logging(path: str = "bot.log") -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    # write logs both to console and to a persistent file for later review
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)


@dataclass(frozen=True)
class Services:
    """Dependencies built once at startup and shared read-only by extensions."""

    settings: Settings
    registry: TickerRegistry
    lookup: LookupService
    ranking: RankingAggregator


def build_services(settings: Settings) -> Services:
    registry = TickerRegistry.load(settings.tickers_file)
    search = YahooSearchClient(limit=settings.search_limit, timeout_s=settings.http_timeout_s)
    resolver = SymbolResolver(
        registry,
        search,
        suffix=settings.market_suffix,
        exchange=settings.exchange,
    )
    quotes = YFinanceQuoteClient(timeout_s=settings.http_timeout_s)
    return Services(
        settings=settings,
        registry=registry,
        lookup=LookupService(registry, resolver, quotes),
        ranking=RankingAggregator(
            YFinanceMoversClient(), registry, suffix=settings.market_suffix
        ),
    )


class Bot(commands.Bot):
    """Bot implementation with async extension loading."""

    def __init__(self, services: Services) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(
            command_prefix=commands.when_mentioned_or(services.settings.prefix),
            intents=intents,
            help_command=None,
        )
        self.services = services
        self.events: list[EventInfo] = []

    async def on_ready(self) -> None:
        """Log when the bot has successfully logged in."""
        if self.user:
            log.info("Logged in as %s (ID %s)", self.user, self.user.id)
        else:
            log.info("Logged in")
        await self.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name="/kabu")
        )

    async def setup_hook(self) -> None:  # type: ignore[override]
        successes, failures = await self.load_all_extensions()
        log.info("Extensions loaded: %d success, %d failed", len(successes), len(failures))
        if failures:
            log.info("Failed extensions: %s", ", ".join(failures))
        synced = await self.tree.sync()
        names = ", ".join(cmd.name for cmd in synced)
        log.info("Synced %d application command(s): %s", len(synced), names)

    async def load_all_extensions(self) -> tuple[list[str], list[str]]:
        """Load every extension under the commands and events directories."""

        successes: list[str] = []
        failures: list[str] = []

        extensions: list[str] = []
        for base in (COMMANDS_PATH, EVENTS_PATH):
            if not base.exists():
                continue
            for file in sorted(base.glob("*.py")):
                if file.name.startswith("_") or file.name == "__init__.py":
                    continue
                extensions.append(f"{base.name}.{file.stem}")

        for ext in extensions:
            try:
                await self.load_extension(ext)
                log.info("Loaded extension %s", ext)
                successes.append(ext)
            except Exception:
                log.exception("Failed to load extension %s", ext)
                failures.append(ext)

        log.info("Discovered %d extensions", len(extensions))
        return successes, failures

    async def on_command_error(  # type: ignore[override]
        self, ctx: commands.Context, error: commands.CommandError
    ) -> None:
        """Send a friendly notice when a prefix command is missing."""

        if isinstance(error, commands.CommandNotFound):
            invoked = (getattr(ctx, "invoked_with", "") or "").lower()
            prefix = getattr(ctx, "prefix", None) or BOT_PREFIX
            suggestions = build_suggestions(invoked, self.commands) if invoked else []
            if suggestions:
                message = "コマンドが見つかりません。もしかして:\n" + "\n".join(suggestions)
            else:
                message = f"コマンドが見つかりません。{prefix}kabu 7974 のように入力してください。"
            await safe_reply(ctx, message, mention_author=False)
            return

        await super().on_command_error(ctx, error)

    async def on_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        """Handle application command errors gracefully."""

        log.exception("Application command failed", exc_info=error)
        message = "コマンドの実行に失敗しました。時間をおいて再度お試しください。"
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)


def main() -> None:
    """Bot startup sequence."""

    load_dotenv()
    setup_logging()
    settings = Settings.from_env()
    if not settings.token_valid():
        raise SystemExit("ERROR: valid DISCORD_BOT_TOKEN not set")

    try:
        services = build_services(settings)
    except RegistryLoadError as exc:
        raise SystemExit(f"ERROR: {exc.message}") from exc

    bot = Bot(services)
    bot.tree.on_error = bot.on_app_command_error
    bot.run(settings.token, log_handler=None)


if __name__ == "__main__":
    main()
