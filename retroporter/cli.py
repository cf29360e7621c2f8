"""Command-line front end — export, import and update-cores."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from loguru import logger

from retroporter.config import Config, get_config
from retroporter.context import AppContext
from retroporter.core.exporter import export_game
from retroporter.core.importer import import_game
from retroporter.core.path_resolver import RetroArchConfig, locate_retroarch
from retroporter.core.progress import TransferReporter, silent_progress
from retroporter.core.updater import update_cores
from retroporter.errors import RetroPorterError
from retroporter.logger import setup_logger


def _add_retro_arch_path(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-r",
        "--retro-arch-path",
        type=Path,
        default=None,
        help="Manually override RetroArch path (detected from Steam otherwise)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retroporter",
        description="Move RetroArch games between machines and keep cores up to date.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug output on the console")
    parser.add_argument("--no-progress", action="store_true", help="Do not draw progress bars")
    sub = parser.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", help="Export a game from RetroArch into a package file")
    export.add_argument("playlist", help="Playlist to export from")
    export.add_argument("label", help="Label of the game to export")
    export.add_argument("destination", type=Path, help="Package file, or directory to place it in")
    _add_retro_arch_path(export)

    imp = sub.add_parser("import", help="Import a game package into RetroArch")
    imp.add_argument("origin", type=Path, help="Package file to import")
    imp.add_argument(
        "destination_root",
        type=Path,
        nargs="?",
        default=None,
        help="Root for the content directory of a newly created playlist",
    )
    _add_retro_arch_path(imp)

    update = sub.add_parser("update-cores", help="Update all cores and core info files")
    update.add_argument(
        "version",
        nargs="?",
        default=None,
        help="Version of cores to download (default: nightly)",
    )
    _add_retro_arch_path(update)

    return parser


def create_context(config: Config, retro_arch_path: Path | None, show_progress: bool = True) -> AppContext:
    """Locate RetroArch and wire the services a command needs."""
    install_dir = locate_retroarch(retro_arch_path, config.retroarch_path)
    logger.debug(f"Using RetroArch installation at {install_dir}")
    return AppContext(
        config=config,
        retroarch=RetroArchConfig.load(install_dir),
        progress=TransferReporter if show_progress else silent_progress,
    )


def cmd_export(ctx: AppContext, args: argparse.Namespace) -> None:
    package = export_game(
        args.playlist,
        args.label,
        args.destination.expanduser(),
        ctx.playlists_dir,
        ctx.thumbnails_dir,
        progress=ctx.progress,
        chunk_size=ctx.config.chunk_size,
    )
    logger.success(f"Exported '{args.label}' to {package}")


def cmd_import(ctx: AppContext, args: argparse.Namespace) -> None:
    destination_root = args.destination_root or ctx.config.import_root
    result = import_game(
        args.origin.expanduser(),
        ctx.playlists_dir,
        ctx.thumbnails_dir,
        destination_root.expanduser().absolute(),
        progress=ctx.progress,
        chunk_size=ctx.config.chunk_size,
    )
    logger.success(f"Imported '{result.item.label}' into playlist {result.playlist_name}")


def cmd_update_cores(ctx: AppContext, args: argparse.Namespace) -> None:
    version = args.version or ctx.config.core_version
    asyncio.run(
        update_cores(
            version,
            ctx.cores_dir,
            ctx.core_info_dir,
            ctx.config,
            progress=ctx.progress,
        )
    )


_COMMANDS = {
    "export": cmd_export,
    "import": cmd_import,
    "update-cores": cmd_update_cores,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    config = get_config()
    setup_logger(config.data_dir / "logs", verbose=args.verbose)

    try:
        ctx = create_context(config, args.retro_arch_path, show_progress=not args.no_progress)
        _COMMANDS[args.command](ctx, args)
    except RetroPorterError as e:
        logger.error(str(e))
        return 1
    return 0
