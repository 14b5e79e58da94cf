"""CLI entrypoint: parse a citation and check it against the provision store."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

from lovcite.citation.formatter import CITATION_STYLES, format_citation
from lovcite.citation.parser import ParseError, parse_citation
from lovcite.citation.validator import validate_citation
from lovcite.config import LovciteSettings
from lovcite.store.repository import ProvisionRepository


load_dotenv()

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    settings = LovciteSettings.from_env()
    logging.basicConfig(level=settings.logging_level, format="%(asctime)s %(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Validate a Danish legal citation against the provision store")
    parser.add_argument("--citation", required=True, help="Citation text, e.g. '2018:502 § 5, stk. 2'")
    parser.add_argument("--document-id", help="Ambient document id used when the citation names none")
    parser.add_argument("--as-of-date", help="ISO date (YYYY-MM-DD) for the in-force check")
    parser.add_argument("--db-path", default=str(settings.db_path), help="SQLite database path")
    parser.add_argument("--format", default="full", choices=CITATION_STYLES, help="Style for the formatted citation")
    args = parser.parse_args(argv)

    try:
        citation = parse_citation(args.citation, document_id=args.document_id)
    except ParseError as exc:
        print(json.dumps({"citation": args.citation, "error": str(exc)}, ensure_ascii=False, indent=2))
        return 2

    with ProvisionRepository(args.db_path) as repository:
        try:
            result = validate_citation(citation, repository, as_of_date=args.as_of_date)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 2

    payload = {
        "citation": args.citation,
        "document_id": citation.document_id,
        "chapter": citation.chapter,
        "section": citation.section,
        "pinpoint": citation.pinpoint,
        "eu_article": citation.eu_article,
        "formatted": format_citation(citation, args.format),
        "matched": result.matched,
        "resolved_provision": result.resolved_provision,
        "warnings": result.warnings,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
