"""References from one provision's text to other provisions or statutes.

Patterns are applied in priority order (explicit document ids, ``lov nr.``
references, same-document ``§ N``). Overlapping matches are skipped via
covered-span tracking, so ``§ 5 i lov nr. 502`` is never also read as a
same-document ``§ 5``. Every candidate goes through the citation parser;
anything it rejects is dropped.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import re

from lovcite.citation.models import ProvisionRef, StructuredCitation
from lovcite.citation.parser import ParseError, parse_citation
from lovcite.ingestion.provisions import LegalProvision

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CrossReference:
    """A citation found inside provision text."""

    source_document_id: str
    source_provision_ref: str
    target_document_id: str
    target_provision_ref: str | None
    target_pinpoint: str | None
    raw: str


# ---------------------------------------------------------------------------
# Pattern library
# ---------------------------------------------------------------------------

# "5", "5 a", "5a"; "i" after the number is the preposition, never a suffix.
_SECTION = r"\d+(?:\s?(?!i\b)[a-zA-Z](?!\w))?"
_PINPOINT = r"(?:,\s*stk\.\s*(?P<pinpoint>\d+))?"

# "2018:502 § 5, stk. 2"
_EXPLICIT_RE = re.compile(
    rf"(?<![\d:])(?P<document>\d{{4}}:\d+)\s+§\s*(?P<section>{_SECTION}){_PINPOINT}",
    re.IGNORECASE,
)

# "§ 5, stk. 2, i lov nr. 502 af 23. maj 2018"
_LAW_NUMBER_RE = re.compile(
    rf"§\s*(?P<section>{_SECTION}){_PINPOINT},?\s+i\s+lov\s+nr\.\s*(?P<number>\d+)"
    r"\s+af\s+\d{1,2}\.\s*[^\W\d_]+\s+(?P<year>\d{4})",
    re.IGNORECASE,
)

# "§ 5", "§ 5 a, stk. 3"
_SAME_DOCUMENT_RE = re.compile(rf"(?<!§)§\s*(?P<section>{_SECTION}){_PINPOINT}", re.IGNORECASE)


def _is_covered(start: int, end: int, covered: set[tuple[int, int]]) -> bool:
    for cs, ce in covered:
        if start < ce and end > cs:
            return True
    return False


def _candidate(match: re.Match[str], document: str | None) -> str:
    parts = [document] if document else []
    parts.append(f"§ {match.group('section')}")
    text = " ".join(parts)
    if match.group("pinpoint"):
        text = f"{text}, stk. {match.group('pinpoint')}"
    return text


def _is_self_reference(provision: LegalProvision, citation: StructuredCitation) -> bool:
    if citation.document_id != provision.document_id or citation.section is None:
        return False
    source = ProvisionRef.parse(provision.provision_ref)
    if citation.section != source.section:
        return False
    return citation.chapter is None or citation.chapter == source.chapter


def _provision_references(provision: LegalProvision) -> list[CrossReference]:
    text = provision.content
    covered: set[tuple[int, int]] = set()
    found: list[tuple[int, CrossReference]] = []

    patterns: tuple[tuple[re.Pattern[str], str], ...] = (
        (_EXPLICIT_RE, "explicit"),
        (_LAW_NUMBER_RE, "law_number"),
        (_SAME_DOCUMENT_RE, "same_document"),
    )
    for pattern, kind in patterns:
        for match in pattern.finditer(text):
            if _is_covered(match.start(), match.end(), covered):
                continue
            covered.add((match.start(), match.end()))

            if kind == "explicit":
                candidate = _candidate(match, match.group("document"))
            elif kind == "law_number":
                candidate = _candidate(match, f"{match.group('year')}:{match.group('number')}")
            else:
                candidate = _candidate(match, None)

            try:
                citation = parse_citation(candidate, document_id=provision.document_id)
            except ParseError as exc:
                LOGGER.debug("Discarding cross-reference candidate in %s: %s", provision.provision_ref, exc)
                continue

            if _is_self_reference(provision, citation):
                continue

            ref = citation.provision_ref
            found.append(
                (
                    match.start(),
                    CrossReference(
                        source_document_id=provision.document_id,
                        source_provision_ref=provision.provision_ref,
                        target_document_id=citation.document_id,
                        target_provision_ref=str(ref) if ref is not None else None,
                        target_pinpoint=citation.pinpoint,
                        raw=match.group(0),
                    ),
                )
            )

    found.sort(key=lambda item: item[0])
    return [reference for _, reference in found]


def extract_cross_references(provisions: Iterable[LegalProvision]) -> list[CrossReference]:
    """Return deduplicated cross-references for *provisions*, in text order."""

    seen: set[tuple[str, str, str, str | None, str | None]] = set()
    references: list[CrossReference] = []
    for provision in provisions:
        for reference in _provision_references(provision):
            key = (
                reference.source_document_id,
                reference.source_provision_ref,
                reference.target_document_id,
                reference.target_provision_ref,
                reference.target_pinpoint,
            )
            if key in seen:
                continue
            seen.add(key)
            references.append(reference)
    return references
