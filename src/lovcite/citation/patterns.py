"""Named matchers for the citation grammar.

One matcher per grammar rule so each can be exercised in isolation::

    citation      := doc_id WS section_part [WS pinpoint_part]
    doc_id        := YEAR ":" NUMBER | EU_TYPE ":" YEAR "/" NUMBER | SHORT_NAME
    section_part  := ["§"] SECTION_TOKEN
    pinpoint_part := "stk." digits
    chapter_part  := digits ":" SECTION_TOKEN | "kap." digits

Document-id matchers are anchored at the start of the text and report where
the identifier ends; the ``find_*`` matchers scan anywhere and report spans.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from lovcite.ingestion.normalization import normalize_section_token

EU_DOCUMENT_TYPES = ("directive", "regulation", "decision")

_DANISH_ID_RE = re.compile(r"^(?P<year>\d{4}):(?P<number>\d+)(?![\d:/])")
_EU_ID_RE = re.compile(
    r"^(?P<type>directive|regulation|decision)\s*:\s*(?P<year>\d{4})\s*/\s*(?P<number>\d+)(?![\d/])",
    re.IGNORECASE,
)
_SHORT_NAME_RE = re.compile(r"^[^\W\d_](?:[\w\-]|\.(?=\w))*")
_RESERVED_WORD_RE = re.compile(r"^(?:kap(?:itel)?|stk|art(?:ikel|icle)?|nr|litra)\.?\d*$", re.IGNORECASE)

_SECTION_MARKER_RE = re.compile(r"§\s*(?P<number>\d+)(?:\s*(?P<suffix>(?!i\b)[A-Za-z])(?!\w))?")
_CHAPTER_SECTION_RE = re.compile(
    r"(?<![\w:/])(?P<chapter>\d+[A-Za-z]?):(?P<number>\d+)(?:\s*(?P<suffix>(?!i\b)[A-Za-z])(?!\w))?(?![\d:/])"
)
_CHAPTER_RE = re.compile(r"\bkap(?:itel|\.)?\s*(?P<chapter>\d+[A-Za-z]?)\b", re.IGNORECASE)
_PINPOINT_RE = re.compile(r"\bstk\.?\s*(?P<number>\d+)\b", re.IGNORECASE)
_EU_ARTICLE_RE = re.compile(r"\bart(?:ikel|icle|\.)?\s*(?P<number>\d+[A-Za-z]?)\b", re.IGNORECASE)
_BARE_SECTION_RE = re.compile(r"(?<![\w§:/.])(?P<number>\d+)(?:\s*(?P<suffix>(?!i\b)[A-Za-z])(?!\w))?(?![\w:/])")


@dataclass(frozen=True, slots=True)
class DocumentIdMatch:
    document_id: str
    end: int


@dataclass(frozen=True, slots=True)
class SpanMatch:
    value: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class ChapterSectionMatch:
    chapter: str
    section: str
    start: int
    end: int


def _section_value(match: re.Match[str]) -> str:
    suffix = match.group("suffix") or ""
    return normalize_section_token(f"{match.group('number')}{suffix}")


def match_document_id(text: str) -> DocumentIdMatch | None:
    """Match a leading Danish ``YYYY:NNN`` identifier (number canonicalized)."""

    match = _DANISH_ID_RE.match(text)
    if not match:
        return None
    document_id = f"{int(match.group('year'))}:{int(match.group('number'))}"
    return DocumentIdMatch(document_id=document_id, end=match.end())


def match_eu_document_id(text: str) -> DocumentIdMatch | None:
    """Match a leading EU ``type:YYYY/NNN`` identifier."""

    match = _EU_ID_RE.match(text)
    if not match:
        return None
    eu_type = match.group("type").lower()
    document_id = f"{eu_type}:{int(match.group('year'))}/{int(match.group('number'))}"
    return DocumentIdMatch(document_id=document_id, end=match.end())


def match_short_name(text: str) -> DocumentIdMatch | None:
    """Match a leading short name or opaque source id, passed through untouched."""

    match = _SHORT_NAME_RE.match(text)
    if not match or _RESERVED_WORD_RE.match(match.group(0)):
        return None
    return DocumentIdMatch(document_id=match.group(0), end=match.end())


def find_section_marker(text: str) -> SpanMatch | None:
    """Find ``§ N`` / ``§ N a``."""

    match = _SECTION_MARKER_RE.search(text)
    if not match:
        return None
    return SpanMatch(value=_section_value(match), start=match.start(), end=match.end())


def find_chapter_section(text: str) -> ChapterSectionMatch | None:
    """Find the compact ``chapter:section`` form (``3:5``)."""

    match = _CHAPTER_SECTION_RE.search(text)
    if not match:
        return None
    return ChapterSectionMatch(
        chapter=match.group("chapter").lower(),
        section=_section_value(match),
        start=match.start(),
        end=match.end(),
    )


def find_chapter(text: str) -> SpanMatch | None:
    """Find a ``kap. N`` / ``kapitel N`` / ``kapN`` chapter token."""

    match = _CHAPTER_RE.search(text)
    if not match:
        return None
    return SpanMatch(value=match.group("chapter").lower(), start=match.start(), end=match.end())


def find_pinpoint(text: str) -> SpanMatch | None:
    """Find a ``stk. N`` subsection pinpoint."""

    match = _PINPOINT_RE.search(text)
    if not match:
        return None
    return SpanMatch(value=str(int(match.group("number"))), start=match.start(), end=match.end())


def find_eu_article(text: str) -> SpanMatch | None:
    """Find an ``art. N`` / ``artikel N`` / ``article N`` pinpoint."""

    match = _EU_ARTICLE_RE.search(text)
    if not match:
        return None
    return SpanMatch(value=match.group("number").lower(), start=match.start(), end=match.end())


def find_bare_section(text: str) -> SpanMatch | None:
    """Find a bare numeric section token (``5``, ``5 a``) without a ``§`` marker."""

    match = _BARE_SECTION_RE.search(text)
    if not match:
        return None
    return SpanMatch(value=_section_value(match), start=match.start(), end=match.end())
