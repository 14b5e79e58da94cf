"""Render structured citations in Danish display conventions."""

from __future__ import annotations

from lovcite.citation.models import StructuredCitation

CITATION_STYLES = ("full", "short", "pinpoint")


def _location(citation: StructuredCitation) -> str:
    parts: list[str] = []
    if citation.section is not None:
        if citation.chapter:
            parts.append(f"kap. {citation.chapter}")
        parts.append(f"§ {citation.section}")
    if citation.eu_article is not None:
        parts.append(f"art. {citation.eu_article}")
    return " ".join(parts)


def _with_pinpoint(text: str, citation: StructuredCitation) -> str:
    if citation.pinpoint is None:
        return text
    return f"{text}, stk. {citation.pinpoint}"


def format_citation(citation: StructuredCitation, style: str = "full") -> str:
    """Format *citation* as ``full``, ``short`` or ``pinpoint``.

    ``full`` is meant for the first mention in a document and re-parses to an
    equal citation; ``short`` (``§ 5``) for repeated mentions in the same
    document context; ``pinpoint`` always carries the subsection when known.
    """

    if style not in CITATION_STYLES:
        raise ValueError(f"Unsupported citation style: {style!r} (expected one of {', '.join(CITATION_STYLES)})")
    if not citation.document_id and citation.section is None:
        raise ValueError("Citation carries neither a document id nor a section")

    location = _location(citation)

    if style == "short":
        if citation.section is not None:
            return f"§ {citation.section}"
        if citation.eu_article is not None:
            return f"art. {citation.eu_article}"
        return citation.document_id

    head = " ".join(part for part in (citation.document_id, location) if part)
    return _with_pinpoint(head, citation)
