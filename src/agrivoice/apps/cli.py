"""CLI entry point for agrivoice.

Parses arguments, configures logging, and runs one routing-engine command.
setup_environment() is called before any backend module is imported.

Subcommands:
    route        — route a transcript to an app feature
    init         — download/load the offline model, showing progress
    status       — show backend status and recorded models
    clear-cache  — delete cached model artifacts
    features     — list the feature registry
"""

import argparse
import asyncio
import logging
import os

from agrivoice.core.constants import DEFAULT_LANGUAGE, MODEL_RECORD_PREFIX
from agrivoice.core.features import FEATURE_DESCRIPTIONS, FEATURE_IDS


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommand support."""
    parser = argparse.ArgumentParser(
        description="Route spoken farm-app commands to app features"
    )
    parser.add_argument(
        "--config-file",
        default=None,
        help="JSON config file (default: ~/.config/agrivoice/config.json)",
    )
    parser.add_argument(
        "--backend",
        choices=["mlx", "litellm", "none"],
        default=None,
        help="Override the inference backend from config",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only log errors"
    )

    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    route_parser = subparsers.add_parser(
        "route", help="Route a transcript to an app feature"
    )
    route_parser.add_argument("transcript", help="Transcribed voice command")
    route_parser.add_argument(
        "--language",
        default=None,
        help=f"Transcript language (default: from config or {DEFAULT_LANGUAGE})",
    )
    route_parser.add_argument(
        "--ai",
        action="store_true",
        help="Load the offline model first so it can refine weak matches",
    )
    route_parser.add_argument(
        "--json", action="store_true", help="Print the decision as JSON"
    )

    init_parser = subparsers.add_parser(
        "init", help="Download and load the offline model"
    )
    init_parser.add_argument(
        "--recover",
        action="store_true",
        help="Clear the cache and retry once if a cached model is corrupted",
    )

    subparsers.add_parser("status", help="Show backend status and recorded models")

    clear_parser = subparsers.add_parser(
        "clear-cache", help="Delete cached model artifacts"
    )
    clear_parser.add_argument(
        "-y", "--yes", action="store_true", help="Do not ask for confirmation"
    )

    subparsers.add_parser("features", help="List the feature registry")
    return parser


def _load_router(args: argparse.Namespace):
    """Build a router from config, applying CLI overrides."""
    import dataclasses

    from agrivoice.api import build_router
    from agrivoice.apps.config import load_config

    config = load_config(args.config_file)
    if args.backend:
        config = dataclasses.replace(
            config, backend=dataclasses.replace(config.backend, kind=args.backend)
        )
    return config, build_router(config)


def _print_decision(decision, as_json: bool) -> None:
    from rich.console import Console
    from rich.table import Table

    console = Console()
    if as_json:
        console.print_json(decision.to_json())
        return

    table = Table(title="Voice decision", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("action", decision.action)
    table.add_row("target", decision.target_id or "--")
    if decision.sub_action:
        table.add_row("sub-action", decision.sub_action)
    table.add_row("confidence", f"{decision.confidence:.2f}")
    table.add_row("source", decision.source)
    table.add_row("reason", decision.reason or "--")
    console.print(table)


async def _initialize_with_bar(router, recover: bool) -> bool:
    from rich.progress import BarColumn, Progress, TextColumn

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>5.1f}%"),
    ) as progress:
        task = progress.add_task("Preparing offline model...", total=100)

        def on_progress(event) -> None:
            progress.update(task, completed=event.percentage, description=event.text)

        return await router.initialize(on_progress, recover=recover)


def _run_route(args: argparse.Namespace) -> int:
    config, router = _load_router(args)
    language = args.language or config.router.default_language

    async def run():
        if args.ai:
            await _initialize_with_bar(router, recover=True)
        return await router.route(args.transcript, language)

    _print_decision(asyncio.run(run()), args.json)
    return 0


def _run_init(args: argparse.Namespace) -> int:
    from rich.console import Console

    _, router = _load_router(args)
    ready = asyncio.run(_initialize_with_bar(router, recover=args.recover))
    console = Console()
    if ready:
        console.print(f"[green]AI ready:[/green] {router.status().model_id}")
        return 0
    status = router.status()
    console.print(f"[yellow]Using keyword mode:[/yellow] {status.error}")
    return 1


def _run_status(args: argparse.Namespace) -> int:
    from pathlib import Path

    from rich.console import Console
    from rich.table import Table

    from agrivoice.backends.storage import JsonKeyValueStore
    from agrivoice.core.constants import DEFAULT_STATE_FILE

    config, router = _load_router(args)
    status = router.status()

    table = Table(title="Offline model", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("backend", config.backend.kind)
    table.add_row("mode", status.mode)
    table.add_row("status", status.status_text)
    table.add_row("candidates", "\n".join(config.backend.candidates))

    store = JsonKeyValueStore(Path(config.backend.data_dir).expanduser() / DEFAULT_STATE_FILE)
    recorded = [
        key.removeprefix(MODEL_RECORD_PREFIX)
        for key in store.keys()
        if key.startswith(MODEL_RECORD_PREFIX)
    ]
    table.add_row("loaded before", "\n".join(recorded) or "--")
    Console().print(table)
    return 0


def _run_clear_cache(args: argparse.Namespace) -> int:
    from rich.console import Console
    from rich.prompt import Confirm

    if not args.yes and not Confirm.ask("Delete all cached offline models?"):
        return 1
    _, router = _load_router(args)
    asyncio.run(router.clear_cache())
    Console().print("[green]Model cache cleared[/green]")
    return 0


def _run_features(args: argparse.Namespace) -> int:
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Features")
    table.add_column("ID", style="cyan")
    table.add_column("Description", style="white")
    for feature_id in FEATURE_IDS:
        table.add_row(feature_id, FEATURE_DESCRIPTIONS[feature_id])
    Console().print(table)
    return 0


_COMMANDS = {
    "route": _run_route,
    "init": _run_init,
    "status": _run_status,
    "clear-cache": _run_clear_cache,
    "features": _run_features,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code."""
    # Must run before any backend imports.
    from agrivoice.core.env import setup_environment

    setup_environment()

    from rich.console import Console
    from rich.logging import RichHandler

    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        log_level = "DEBUG"
    elif args.quiet:
        log_level = "ERROR"
    else:
        log_level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                show_time=False,
                show_path=False,
                rich_tracebacks=False,
            )
        ],
    )
    logging.getLogger("huggingface_hub").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    return _COMMANDS[args.subcommand](args)
