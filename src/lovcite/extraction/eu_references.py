"""EU directive / regulation citations in Danish statute text.

Recognized shapes: CELEX numbers (``32016R0679``), directives
(``direktiv 2016/680/EU``, ``Directive (EU) 2019/790``, ``Rådets direktiv
95/46/EF``) and regulations (``Regulation (EU) 2016/679``, ``forordning (EF)
nr. 1907/2006``). Each match is classified by the wording around it.

Whether a reference is the primary implementation is never read from the
text: the caller says which provisions form the statute's legal basis.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
import logging
import re

from lovcite.ingestion.normalization import normalize_whitespace
from lovcite.ingestion.provisions import LegalProvision

LOGGER = logging.getLogger(__name__)

CONTEXT_BEFORE = 160
CONTEXT_AFTER = 80
ARTICLE_GAP = 60


class EUReferenceType(Enum):
    IMPLEMENTS = "implements"
    SUPPLEMENTS = "supplements"
    APPLIES = "applies"
    COMPLIES_WITH = "complies_with"
    DEROGATES_FROM = "derogates_from"


# Higher wins when duplicates merge.
_SPECIFICITY = {
    EUReferenceType.APPLIES: 0,
    EUReferenceType.COMPLIES_WITH: 1,
    EUReferenceType.DEROGATES_FROM: 2,
    EUReferenceType.SUPPLEMENTS: 3,
    EUReferenceType.IMPLEMENTS: 4,
}


@dataclass(frozen=True, slots=True)
class EUDocumentRef:
    """An EU act identified by type, year and number."""

    eu_type: str
    year: int
    number: int
    community: str | None = None

    @property
    def document_id(self) -> str:
        return f"{self.eu_type}:{self.year}/{self.number}"

    @property
    def celex(self) -> str:
        sector_letter = "L" if self.eu_type == "directive" else "R"
        return f"3{self.year}{sector_letter}{self.number:04d}"

    @classmethod
    def parse(cls, value: str) -> "EUDocumentRef":
        """Accept ``regulation:2016/679`` or a CELEX number such as ``32016R0679``."""

        cleaned = value.strip()
        match = _EU_DOCUMENT_ID_RE.match(cleaned)
        if match:
            return cls(eu_type=match.group("type").lower(), year=int(match.group("year")), number=int(match.group("number")))
        match = _CELEX_RE.fullmatch(cleaned.upper())
        if match:
            return cls(
                eu_type="directive" if match.group("sector") == "L" else "regulation",
                year=int(match.group("year")),
                number=int(match.group("number")),
            )
        raise ValueError(f"Not an EU document id or CELEX number: {value!r}")


@dataclass(slots=True)
class EUReference:
    document_id: str
    provision_ref: str | None
    eu_document_id: str
    eu_article: str | None
    reference_type: EUReferenceType
    is_primary_implementation: bool
    context: str


# ---------------------------------------------------------------------------
# Pattern library
# ---------------------------------------------------------------------------

_COMMUNITY = r"EU|EF|EØF|EC|EEC|Euratom"

# 32016R0679, 31995L0046
_CELEX_RE = re.compile(r"\b3(?P<year>\d{4})(?P<sector>[LR])(?P<number>\d{4})\b")
_EU_DOCUMENT_ID_RE = re.compile(r"^(?P<type>directive|regulation):(?P<year>\d{4})/(?P<number>\d+)$", re.IGNORECASE)

# direktiv 2016/680/EU, Directive (EU) 2019/790, Rådets direktiv 95/46/EF
_DIRECTIVE_RE = re.compile(
    rf"(?:direktiv(?:et)?|directive)\s+(?:\((?P<community>{_COMMUNITY})\)\s*)?"
    rf"(?:(?:nr\.|no\.?)\s*)?(?P<year>\d{{2}}|\d{{4}})/(?P<number>\d+)"
    rf"(?:/(?P<suffix>{_COMMUNITY}))?(?![\d/])",
    re.IGNORECASE,
)

# Regulation (EU) 2016/679, forordning (EF) nr. 1907/2006
_REGULATION_RE = re.compile(
    rf"(?:forordning(?:en)?|regulation)\s+(?:\((?P<community>{_COMMUNITY})\)\s*)?"
    r"(?P<numbered>(?:nr\.|no\.?)\s*)?(?P<first>\d+)/(?P<second>\d+)(?![\d/])",
    re.IGNORECASE,
)

_ARTICLE_RE = re.compile(r"\b(?:artikel|article|art\.)\s*(?P<article>\d+[a-z]?)\b", re.IGNORECASE)
_ARTICLE_GAP_RE = re.compile(rf"^[^.;§]{{0,{ARTICLE_GAP}}}$")
# "artikel 6, stk. 1, litra e, i forordning ...": these dots do not end the pinpoint.
_ABBREVIATION_DOT_RE = re.compile(r"\b(stk|nr|pkt|no)\.", re.IGNORECASE)
_SENTENCE_BREAK_RE = re.compile(r"[;\n]|\.\s+(?=[A-ZÆØÅ§])")

_AMENDED_BY_RE = re.compile(r"som\s+ændret\s+ved\s+(?:[\w\-]+\s+){0,6}$", re.IGNORECASE)
_IMPLEMENTS_RE = re.compile(r"gennemfører|implementer|gennemførelse\s+af|\bimplements\b", re.IGNORECASE)
_SUPPLEMENTS_RE = re.compile(r"supplerende|supplerer", re.IGNORECASE)
_COMPLIES_RE = re.compile(r"i\s+overensstemmelse\s+med", re.IGNORECASE)
_DEROGATES_RE = re.compile(r"fravig|undtagelse\s+fra", re.IGNORECASE)


def _full_year(raw: str) -> int:
    value = int(raw)
    if len(raw) == 2:
        return 1900 + value
    return value


def _plausible_year(raw: str) -> bool:
    return len(raw) == 4 and 1950 <= int(raw) <= 2100


def _regulation_numbers(match: re.Match[str]) -> tuple[int, int]:
    """(year, number) for a regulation match.

    ``nr. N/YYYY`` is the pre-2015 number/year order; ``(EU) YYYY/N`` is the
    current year/number order, which also appears with ``nr.``/``No``
    (``forordning (EU) nr. 2019/1020``).
    """

    first, second = match.group("first"), match.group("second")
    community = (match.group("community") or "").upper()
    if match.group("numbered"):
        # EF/EØF acts are always number/year, two-digit years included.
        current_order = community in ("", "EU") and len(second) != 2
        if current_order and _plausible_year(first) and not _plausible_year(second):
            return int(first), int(second)
        return _full_year(second), int(first)
    if community == "EU" and len(first) == 4:
        return int(first), int(second)
    if _plausible_year(first):
        return int(first), int(second)
    return _full_year(second), int(first)


def _document_from(match: re.Match[str], kind: str) -> EUDocumentRef:
    if kind == "celex":
        eu_type = "directive" if match.group("sector") == "L" else "regulation"
        return EUDocumentRef(eu_type=eu_type, year=int(match.group("year")), number=int(match.group("number")))
    if kind == "directive":
        community = match.group("community") or match.group("suffix")
        return EUDocumentRef(
            eu_type="directive",
            year=_full_year(match.group("year")),
            number=int(match.group("number")),
            community=community.upper() if community else None,
        )
    year, number = _regulation_numbers(match)
    community = match.group("community")
    return EUDocumentRef(eu_type="regulation", year=year, number=number, community=community.upper() if community else None)


def _sentence_start(text: str, start: int) -> int:
    window_start = max(0, start - CONTEXT_BEFORE)
    boundary = window_start
    for found in _SENTENCE_BREAK_RE.finditer(text, window_start, start):
        boundary = found.end()
    return boundary


def _sentence_end(text: str, end: int) -> int:
    found = _SENTENCE_BREAK_RE.search(text, end, min(len(text), end + CONTEXT_AFTER))
    if found is None:
        return min(len(text), end + CONTEXT_AFTER)
    return found.start() + 1


def _preceding_article(before: str) -> str | None:
    articles = list(_ARTICLE_RE.finditer(before))
    if not articles:
        return None
    last = articles[-1]
    gap = _ABBREVIATION_DOT_RE.sub(r"\1", before[last.end():])
    if not _ARTICLE_GAP_RE.match(gap):
        return None
    return last.group("article").lower()


def classify_reference(before: str, sentence: str) -> EUReferenceType:
    """Classify a match from the text right before it and its whole sentence."""

    if _AMENDED_BY_RE.search(before):
        return EUReferenceType.SUPPLEMENTS
    if _IMPLEMENTS_RE.search(sentence):
        return EUReferenceType.IMPLEMENTS
    if _SUPPLEMENTS_RE.search(sentence):
        return EUReferenceType.SUPPLEMENTS
    if _COMPLIES_RE.search(sentence):
        return EUReferenceType.COMPLIES_WITH
    if _DEROGATES_RE.search(sentence):
        return EUReferenceType.DEROGATES_FROM
    return EUReferenceType.APPLIES


def _is_covered(start: int, end: int, covered: set[tuple[int, int]]) -> bool:
    for cs, ce in covered:
        if start < ce and end > cs:
            return True
    return False


def _merge(references: list[EUReference]) -> list[EUReference]:
    merged: dict[tuple[str, str | None, str, str | None], EUReference] = {}
    for reference in references:
        key = (reference.document_id, reference.provision_ref, reference.eu_document_id, reference.eu_article)
        existing = merged.get(key)
        if existing is None:
            merged[key] = reference
            continue
        existing.is_primary_implementation = existing.is_primary_implementation or reference.is_primary_implementation
        if _SPECIFICITY[reference.reference_type] > _SPECIFICITY[existing.reference_type]:
            existing.reference_type = reference.reference_type
    return list(merged.values())


def extract_eu_references(
    text: str,
    *,
    document_id: str,
    provision_ref: str | None = None,
    legal_basis: bool = False,
) -> list[EUReference]:
    """Return EU references found in *text*, one per distinct act and article.

    *legal_basis* marks every reference as a primary implementation; it is
    the caller's statement that *text* is the statute's legal-basis section.
    """

    cleaned = normalize_whitespace(text)
    covered: set[tuple[int, int]] = set()
    found: list[tuple[int, EUReference]] = []

    patterns: tuple[tuple[re.Pattern[str], str], ...] = (
        (_CELEX_RE, "celex"),
        (_DIRECTIVE_RE, "directive"),
        (_REGULATION_RE, "regulation"),
    )
    for pattern, kind in patterns:
        for match in pattern.finditer(cleaned):
            if _is_covered(match.start(), match.end(), covered):
                continue
            covered.add((match.start(), match.end()))

            eu_document = _document_from(match, kind)
            sentence_start = _sentence_start(cleaned, match.start())
            sentence_end = _sentence_end(cleaned, match.end())
            before = cleaned[sentence_start:match.start()]
            sentence = cleaned[sentence_start:sentence_end]

            found.append(
                (
                    match.start(),
                    EUReference(
                        document_id=document_id,
                        provision_ref=provision_ref,
                        eu_document_id=eu_document.document_id,
                        eu_article=_preceding_article(before),
                        reference_type=classify_reference(before, sentence),
                        is_primary_implementation=legal_basis,
                        context=normalize_whitespace(sentence),
                    ),
                )
            )

    found.sort(key=lambda item: item[0])
    references = _merge([reference for _, reference in found])
    LOGGER.debug("%s %s: %d EU reference(s)", document_id, provision_ref or "-", len(references))
    return references


def extract_document_eu_references(
    provisions: Iterable[LegalProvision],
    *,
    document_id: str,
    legal_basis_refs: Iterable[str] = (),
) -> list[EUReference]:
    """Run :func:`extract_eu_references` over every provision of one statute."""

    basis = {str(ref) for ref in legal_basis_refs}
    references: list[EUReference] = []
    for provision in provisions:
        references.extend(
            extract_eu_references(
                provision.content,
                document_id=document_id,
                provision_ref=provision.provision_ref,
                legal_basis=provision.provision_ref in basis or provision.section in basis,
            )
        )
    return _merge(references)
