"""CLI entrypoint for drop-folder statute ingestion."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from lovcite.automation.ingestion_service import StatutePipelineResult, run_statute_pipeline
from lovcite.automation.watcher import StatuteCallback, StatuteFolderWatcher
from lovcite.config import LovciteSettings


load_dotenv()

LOGGER = logging.getLogger(__name__)


def _parse_args(settings: LovciteSettings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a folder and ingest Retsinformation XML exports as they arrive")
    parser.add_argument("--watch-dir", required=True, help="Directory to watch for XML exports")
    parser.add_argument("--output-dir", default=str(settings.seed_dir), help="Directory for seed JSON files")
    parser.add_argument("--db-path", default=str(settings.db_path), help="SQLite database path")
    parser.add_argument("--no-load", action="store_true", help="Only write seed files, do not load them")
    parser.add_argument(
        "--include-existing",
        action="store_true",
        help="Also ingest exports already present when the watcher starts",
    )
    parser.add_argument(
        "--legal-basis-ref",
        action="append",
        default=[],
        help="Provision ref whose EU references are primary implementations (repeatable)",
    )
    parser.add_argument(
        "--debounce",
        type=float,
        default=settings.watch_debounce_seconds,
        help="Seconds a file must stay unchanged before it is ingested",
    )
    return parser.parse_args(argv)


def _log_result(file_path: Path, result: StatutePipelineResult) -> None:
    if result.success:
        LOGGER.info(
            "Ingested %s as %s (%d provisions, stage %s)",
            file_path.name,
            result.seed_id or "unknown id",
            result.provision_count,
            result.stage,
        )
    else:
        LOGGER.error("Ingestion failed for %s at %s: %s", file_path, result.stage, result.error or "unknown error")


def _pipeline_callback(args: argparse.Namespace) -> StatuteCallback:
    db_path = None if args.no_load else args.db_path
    legal_basis_refs = tuple(args.legal_basis_ref)

    async def _on_export(file_path: Path) -> None:
        LOGGER.info("Detected export: %s", file_path)
        result = await run_statute_pipeline(
            file_path,
            output_dir=args.output_dir,
            db_path=db_path,
            legal_basis_refs=legal_basis_refs,
        )
        _log_result(file_path, result)

    return _on_export


async def _run_watcher(args: argparse.Namespace) -> int:
    watcher = StatuteFolderWatcher(
        Path(args.watch_dir),
        _pipeline_callback(args),
        debounce_seconds=float(args.debounce),
        include_existing=args.include_existing,
    )
    try:
        await watcher.start()
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 2

    LOGGER.info("Watching %s (debounce %.1fs, load=%s)", args.watch_dir, float(args.debounce), not args.no_load)
    try:
        await asyncio.Event().wait()
    finally:
        watcher.stop()
        LOGGER.info("Watcher stopped")
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = LovciteSettings.from_env()
    logging.basicConfig(level=settings.logging_level, format="%(asctime)s %(levelname)s %(message)s")
    args = _parse_args(settings, argv)
    try:
        return asyncio.run(_run_watcher(args))
    except KeyboardInterrupt:
        LOGGER.info("Shutdown requested")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
