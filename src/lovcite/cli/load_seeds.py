"""CLI command loading seed JSON files into the SQLite provision store."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sqlite3

from dotenv import load_dotenv

from lovcite.config import LovciteSettings
from lovcite.ingestion.seed import read_seed
from lovcite.store.repository import ProvisionRepository


load_dotenv()

LOGGER = logging.getLogger(__name__)


def _collect_seeds(target: Path) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(path for path in target.glob("*.json") if path.is_file())
    return []


def main(argv: list[str] | None = None) -> int:
    settings = LovciteSettings.from_env()
    logging.basicConfig(level=settings.logging_level, format="%(asctime)s %(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Load statute seed files into the provision store")
    parser.add_argument("--path", default=str(settings.seed_dir), help="Seed JSON file or directory")
    parser.add_argument("--db-path", default=str(settings.db_path), help="SQLite database path")
    args = parser.parse_args(argv)

    source_path = Path(args.path)
    loaded: list[dict[str, object]] = []
    errors: list[dict[str, str]] = []

    with ProvisionRepository(args.db_path) as repository:
        for seed_path in _collect_seeds(source_path):
            try:
                seed = read_seed(seed_path)
                provision_count = repository.replace_statute(seed)
            except (OSError, ValueError, sqlite3.IntegrityError) as exc:
                LOGGER.error("Failed to load %s: %s", seed_path, exc)
                errors.append({"seed_path": str(seed_path), "error": str(exc)})
                continue
            loaded.append({"seed_path": str(seed_path), "seed_id": seed.id, "provision_count": provision_count})

    payload = {
        "path": str(source_path),
        "db_path": str(args.db_path),
        "loaded": loaded,
        "errors": errors,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if not errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
