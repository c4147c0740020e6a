"""langprofile entry point: CLI over the language profile updater.

Commands:
  langprofile classify en zh          Count classify-text signals
  langprofile converse "msg" ...      Count conversation-action signals
  langprofile detect "text"           Show ranked languages for a text
  langprofile show                    Print stored counters
  langprofile status                  Show configuration
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from langprofile import __version__
from langprofile.config import ProfileConfig, load_config
from langprofile.conversation.message import ConversationActionsRequest, ConversationMessage
from langprofile.errors import LanguageProfileError
from langprofile.profile import LanguageProfile
from langprofile.storage.base import BaseSignalStore
from langprofile.storage.memory import InMemorySignalStore
from langprofile.storage.models import SignalKind
from langprofile.storage.store import SignalStore
from langprofile.understanding.language import detect_language_tags, detect_languages
from langprofile.updater.dedup import NOTIFICATION_KEY
from langprofile.updater.updater import LanguageProfileUpdater

console = Console()

_KIND_CHOICES = {
    "conversation": SignalKind.CONVERSATION_ACTIONS,
    "classify": SignalKind.CLASSIFY_TEXT,
}

# ─── Service wiring ──────────────────────────────────────────────


def create_store(config: ProfileConfig) -> BaseSignalStore:
    """Build the signal store selected by the config."""
    backend = config.storage.backend
    if backend == "sqlite":
        return SignalStore(config.database_path)
    if backend == "memory":
        return InMemorySignalStore()
    raise ValueError(f"Unknown storage backend '{backend}'.")


class ProfileService:
    """Owns the store, the updater and the read-side profile."""

    def __init__(self, config: ProfileConfig) -> None:
        self.config = config
        self.store = create_store(config)
        self.updater = LanguageProfileUpdater(
            self.store,
            default_notification_key=config.updater.default_notification_key,
            suppress_replays=config.updater.suppress_replays,
            replay_cache_size=config.updater.replay_cache_size,
        )
        self.profile = LanguageProfile(self.store)

    async def startup(self) -> None:
        await self.store.connect()

    async def shutdown(self) -> None:
        await self.updater.aclose()
        await self.store.close()


# ─── CLI Commands ────────────────────────────────────────────────


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


@click.group()
@click.version_option(__version__, prog_name="langprofile")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.json (default: ~/.langprofile/config.json).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """Per-language usage profile built from text signals."""
    _setup_logging(verbose)
    ctx.obj = load_config(config_path)


@cli.command()
@click.argument("language_tags", nargs=-1, required=True)
@click.pass_obj
def classify(config: ProfileConfig, language_tags: tuple[str, ...]) -> None:
    """Count one classify-text signal for each given language tag."""
    _run(config, _classify(language_tags))


@cli.command()
@click.argument("messages", nargs=-1, required=True)
@click.option("--notification-key", "-k", default=None, help="Notification the messages belong to.")
@click.pass_obj
def converse(config: ProfileConfig, messages: tuple[str, ...], notification_key: str | None) -> None:
    """Count conversation-action signals for a batch of messages."""
    now = datetime.now(timezone.utc)
    request = ConversationActionsRequest(
        messages=[ConversationMessage(text=text, reference_time=now) for text in messages],
        extras={NOTIFICATION_KEY: notification_key} if notification_key else {},
    )
    _run(config, _converse(request))


@cli.command()
@click.argument("text")
def detect(text: str) -> None:
    """Show the ranked languages the default detector finds in TEXT."""
    results = detect_languages(text)
    if not results:
        console.print("[yellow]No language detected.[/]")
        return
    for result in results:
        console.print(f"  {result.tag}: {result.confidence:.2f}")


@cli.command()
@click.option(
    "--kind",
    type=click.Choice(sorted(_KIND_CHOICES)),
    default=None,
    help="Only show one signal kind.",
)
@click.pass_obj
def show(config: ProfileConfig, kind: str | None) -> None:
    """Print the stored language counters."""
    _run(config, _show(_KIND_CHOICES.get(kind) if kind else None))


@cli.command()
@click.pass_obj
def status(config: ProfileConfig) -> None:
    """Show configuration."""
    console.print("[bold cyan]langprofile status[/]\n")
    console.print(f"  Version: {__version__}")
    console.print(f"  Config: {config.config_dir}")
    console.print(f"  Backend: {config.storage.backend}")
    console.print(f"  Database: {config.database_path}")
    console.print(f"  Replay suppression: {'on' if config.updater.suppress_replays else 'off'}")


# ─── Async Runners ───────────────────────────────────────────────


def _run(config: ProfileConfig, action) -> None:
    """Run one async action against a started service."""
    try:
        asyncio.run(_with_service(config, action))
    except (LanguageProfileError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


async def _with_service(config: ProfileConfig, action) -> None:
    service = ProfileService(config)
    await service.startup()
    try:
        await action(service)
    finally:
        await service.shutdown()


def _classify(language_tags: tuple[str, ...]):
    async def action(service: ProfileService) -> None:
        await service.updater.update_from_classify_text_async(language_tags)
        console.print(f"[green]Counted classify-text for {', '.join(dict.fromkeys(language_tags))}[/]")

    return action


def _converse(request: ConversationActionsRequest):
    async def action(service: ProfileService) -> None:
        await service.updater.update_from_conversation_actions_async(
            request, detect_language_tags
        )
        console.print(f"[green]Counted {len(request.messages)} message(s)[/]")

    return action


def _show(signal_kind: SignalKind | None):
    async def action(service: ProfileService) -> None:
        if signal_kind:
            infos = await service.store.get_by_signal_kind(signal_kind)
        else:
            infos = await service.store.get_all()
        if not infos:
            console.print("[dim]No signals recorded yet.[/]")
            return

        table = Table(title="Language signals")
        table.add_column("Language")
        table.add_column("Signal")
        table.add_column("Count", justify="right")
        for info in infos:
            table.add_row(info.language_tag, info.signal_kind.name, str(info.count))
        console.print(table)

        kinds = [signal_kind] if signal_kind else list(SignalKind)
        for kind in kinds:
            frequent = await service.profile.frequent_languages(
                kind, service.config.frequent_min_share
            )
            if frequent:
                console.print(f"  Frequent for {kind.name}: {', '.join(frequent)}")

    return action


# ─── Direct execution ───────────────────────────────────────────

if __name__ == "__main__":
    cli()
