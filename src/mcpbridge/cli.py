"""mcpbridge CLI - keep host plugins in step with an MCP bridge.

Usage:
    mcpbridge url [URL]           # Show or set the bridge URL
    mcpbridge test [--url URL]    # Test connection, report tool count
    mcpbridge sync [--url URL]    # Save URL (if given) and sync plugins
    mcpbridge watch [-i SECONDS]  # Re-sync periodically
    mcpbridge plugins             # List persisted plugins
    mcpbridge unsync [--force]    # Remove all MCP plugins
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import Settings
from .errors import BridgeError
from .plugins.models import is_owned
from .store import JsonFileStore, PluginRepository
from .sync import ConsoleNotifier, SyncOrchestrator

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def build_orchestrator(settings: Settings) -> SyncOrchestrator:
    """Wire store, repository and notifier from settings."""
    repository = PluginRepository(
        JsonFileStore(settings.resolved_store_path()),
        default_bridge_url=settings.default_bridge_url,
    )
    return SyncOrchestrator(
        repository,
        notifier=ConsoleNotifier(console),
        timeout_s=settings.timeout_s,
    )


def cmd_url(args: argparse.Namespace, orchestrator: SyncOrchestrator) -> int:
    """Show or set the bridge URL."""
    try:
        if args.url is None:
            console.print(orchestrator.repository.get_bridge_url())
            return 0
        stored = orchestrator.repository.set_bridge_url(args.url)
    except BridgeError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1
    console.print(f"[green]Bridge URL set to[/green] {stored}")
    return 0


def cmd_test(args: argparse.Namespace, orchestrator: SyncOrchestrator) -> int:
    """Test connection to the bridge."""
    return 0 if orchestrator.test_connection(args.url).success else 1


def cmd_sync(args: argparse.Namespace, orchestrator: SyncOrchestrator) -> int:
    """Sync plugins, optionally saving a new URL first."""
    if args.url:
        report = orchestrator.save_url_and_sync(args.url)
    else:
        report = orchestrator.sync()
    return 0 if report.success else 1


def cmd_watch(args: argparse.Namespace, orchestrator: SyncOrchestrator) -> int:
    """Re-sync every --interval seconds until interrupted."""
    console.print(f"Re-syncing every {args.interval:g}s. Press Ctrl+C to stop.")
    try:
        failures = orchestrator.watch(args.interval, iterations=args.count)
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")
        return 0
    return 0 if not failures else 1


def cmd_plugins(args: argparse.Namespace, orchestrator: SyncOrchestrator) -> int:
    """List persisted plugins."""
    try:
        plugins = orchestrator.repository.load_plugins()
    except BridgeError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1

    if not plugins:
        console.print("[yellow]No plugins installed.[/yellow]")
        console.print("Run [bold]mcpbridge sync[/bold] to sync from the bridge.")
        return 0

    table = Table(title="Plugins")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("UUID", style="dim")
    table.add_column("Source")

    for p in plugins:
        source = "[cyan]mcp[/cyan]" if is_owned(p) else "[dim]other[/dim]"
        table.add_row(p.id, p.title or "", p.uuid, source)

    console.print(table)

    owned = len([p for p in plugins if is_owned(p)])
    console.print(f"\n[bold]Total:[/bold] {len(plugins)} ({owned} mcp, {len(plugins) - owned} other)")
    return 0


def cmd_unsync(args: argparse.Namespace, orchestrator: SyncOrchestrator) -> int:
    """Remove all MCP plugins."""
    if not args.force:
        answer = console.input("Remove all MCP plugins? [y/N] ").strip().lower()
        if answer not in ("y", "yes"):
            console.print("[yellow]Cancelled.[/yellow]")
            return 0
    return 0 if orchestrator.unsync().success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcpbridge", description="Sync MCP bridge tools into host plugins")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    p_url = sub.add_parser("url", help="Show or set the MCP bridge URL")
    p_url.add_argument("url", nargs="?", help="New bridge URL (blank = default)")
    p_url.set_defaults(func=cmd_url)

    p_test = sub.add_parser("test", help="Test connection to the bridge")
    p_test.add_argument("--url", help="Bridge URL to test (default: stored URL)")
    p_test.set_defaults(func=cmd_test)

    p_sync = sub.add_parser("sync", help="Sync bridge tools into plugins")
    p_sync.add_argument("--url", help="Save this bridge URL before syncing")
    p_sync.set_defaults(func=cmd_sync)

    p_watch = sub.add_parser("watch", help="Re-sync periodically")
    p_watch.add_argument("--interval", "-i", type=float, default=300.0, help="Seconds between syncs")
    p_watch.add_argument("--count", "-n", type=int, default=None, help="Stop after this many syncs")
    p_watch.set_defaults(func=cmd_watch)

    p_plugins = sub.add_parser("plugins", help="List installed plugins")
    p_plugins.set_defaults(func=cmd_plugins)

    p_unsync = sub.add_parser("unsync", help="Remove all MCP plugins")
    p_unsync.add_argument("--force", "-f", action="store_true", help="Skip confirmation")
    p_unsync.set_defaults(func=cmd_unsync)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        raise SystemExit(0)

    _setup_logging(args.verbose)
    orchestrator = build_orchestrator(Settings.load())
    raise SystemExit(args.func(args, orchestrator))


if __name__ == "__main__":
    main()
