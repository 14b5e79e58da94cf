"""CLI command turning Retsinformation XML exports into seed files."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from lovcite.config import LovciteSettings
from lovcite.ingestion.ingestor import IngestionError, StatuteIngestor
from lovcite.ingestion.seed import default_seed_path, write_seed


load_dotenv()

LOGGER = logging.getLogger(__name__)


def _collect_inputs(target: Path, ingestor: StatuteIngestor) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(path for path in target.rglob("*") if path.is_file() and ingestor.supports(path))
    return []


def main(argv: list[str] | None = None) -> int:
    settings = LovciteSettings.from_env()
    logging.basicConfig(level=settings.logging_level, format="%(asctime)s %(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Ingest statute XML exports and write seed JSON files")
    parser.add_argument("--path", required=True, help="XML file or directory of XML files")
    parser.add_argument("--output-dir", default=str(settings.seed_dir), help="Directory for seed JSON files")
    parser.add_argument(
        "--legal-basis-ref",
        action="append",
        default=[],
        help="Provision ref (e.g. '1' or '1:1') forming the statute's EU legal basis; repeatable",
    )
    args = parser.parse_args(argv)

    source_path = Path(args.path)
    output_dir = Path(args.output_dir)
    ingestor = StatuteIngestor(legal_basis_refs=args.legal_basis_ref)
    files = _collect_inputs(source_path, ingestor)
    if not files:
        LOGGER.warning("No XML inputs found at %s", source_path)

    results: list[dict[str, object]] = []
    errors: list[dict[str, str]] = []

    for file_path in files:
        try:
            ingested = ingestor.ingest(file_path)
        except IngestionError as exc:
            LOGGER.error("%s", exc)
            errors.append({"source_path": str(file_path), "error": str(exc)})
            continue

        seed = ingested.seed
        seed_path = write_seed(seed, default_seed_path(seed.id, output_dir))
        results.append(
            {
                "source_path": str(file_path),
                "seed_id": seed.id,
                "seed_path": str(seed_path),
                "title": seed.title,
                "status": seed.status,
                "provision_count": len(seed.provisions),
                "definition_count": len(seed.definitions),
                "cross_reference_count": len(seed.cross_references),
                "eu_reference_count": len(seed.eu_references),
                "warning_count": len(ingested.warnings),
            }
        )

    payload = {
        "path": str(source_path),
        "processed": len(results),
        "results": results,
        "errors": errors,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if not errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
