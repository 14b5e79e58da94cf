"""Free-form citation string to :class:`StructuredCitation`.

Document identifiers are tried in priority order (Danish ``YYYY:NNN``, EU
``type:YYYY/NNN``, short name / opaque id). The remainder is tokenized with the
named matchers from :mod:`lovcite.citation.patterns`; every recognized span is
blanked out, and anything left over is rejected so that no partially
understood citation is ever returned.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from lovcite.citation.models import StructuredCitation
from lovcite.citation.patterns import (
    EU_DOCUMENT_TYPES,
    SpanMatch,
    find_bare_section,
    find_chapter,
    find_chapter_section,
    find_eu_article,
    find_pinpoint,
    find_section_marker,
    match_document_id,
    match_eu_document_id,
    match_short_name,
)
from lovcite.ingestion.normalization import normalize_whitespace

_RESIDUE_RE = re.compile(r"[\w§]")
_DOCUMENT_ID_MATCHERS = (match_document_id, match_eu_document_id, match_short_name)


@dataclass(slots=True)
class ParseError(Exception):
    """Citation text has no resolvable document id or an incomplete section part."""

    raw: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (citation={self.raw!r})"


def _blank(text: str, start: int, end: int) -> str:
    return text[:start] + " " * (end - start) + text[end:]


def _take(text: str, match: SpanMatch | None) -> tuple[str, str | None]:
    if match is None:
        return text, None
    return _blank(text, match.start, match.end), match.value


def _split_document_id(text: str) -> tuple[str | None, str]:
    for matcher in _DOCUMENT_ID_MATCHERS:
        found = matcher(text)
        if found is not None:
            return found.document_id, text[found.end:]
    return None, text


def parse_citation(text: str, *, document_id: str | None = None) -> StructuredCitation:
    """Parse *text* into a structured citation.

    *document_id* is the ambient document supplied by the caller; it is used
    only when the text itself carries no document identifier.
    """

    cleaned = normalize_whitespace(text)
    if not cleaned:
        raise ParseError(text, "Empty citation")

    parsed_document_id, rest = _split_document_id(cleaned)
    is_eu_document = parsed_document_id is not None and parsed_document_id.split(":", 1)[0] in EU_DOCUMENT_TYPES

    rest, pinpoint = _take(rest, find_pinpoint(rest))
    rest, eu_article = _take(rest, find_eu_article(rest))

    chapter: str | None = None
    section: str | None = None

    chapter_match = find_chapter(rest)
    rest, chapter = _take(rest, chapter_match)

    marker = find_section_marker(rest)
    if marker is not None:
        rest, section = _take(rest, marker)

    compact = find_chapter_section(rest)
    if compact is not None:
        rest = _blank(rest, compact.start, compact.end)
        chapter = chapter or compact.chapter
        section = section or compact.section

    if section is None:
        bare = find_bare_section(rest)
        if bare is not None:
            rest = _blank(rest, bare.start, bare.end)
            if is_eu_document and eu_article is None:
                eu_article = bare.value
            else:
                section = bare.value

    if chapter is not None and section is None:
        raise ParseError(text, "Chapter given without a section")

    residue = _RESIDUE_RE.search(rest)
    if residue is not None:
        raise ParseError(text, f"Unrecognized token in citation: {normalize_whitespace(rest)!r}")

    resolved_document_id = parsed_document_id or (normalize_whitespace(document_id) if document_id else None)
    if not resolved_document_id:
        raise ParseError(text, "No document identifier in citation")

    return StructuredCitation(
        document_id=resolved_document_id,
        section=section,
        chapter=chapter,
        pinpoint=pinpoint,
        eu_article=eu_article,
        raw=text,
    )
