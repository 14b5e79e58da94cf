"""CLI entrypoint: re-render a citation in one of the display styles."""

from __future__ import annotations

import argparse
import json

from lovcite.citation.formatter import CITATION_STYLES, format_citation
from lovcite.citation.parser import ParseError, parse_citation


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Format a Danish legal citation")
    parser.add_argument("--citation", required=True, help="Citation text")
    parser.add_argument("--format", default="full", choices=CITATION_STYLES, help="Output style")
    parser.add_argument("--document-id", help="Ambient document id used when the citation names none")
    args = parser.parse_args(argv)

    try:
        citation = parse_citation(args.citation, document_id=args.document_id)
    except ParseError as exc:
        print(json.dumps({"citation": args.citation, "error": str(exc)}, ensure_ascii=False, indent=2))
        return 2

    payload = {
        "citation": args.citation,
        "format": args.format,
        "formatted": format_citation(citation, args.format),
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
