"""Defined terms: ``Ved X forstås Y.`` and the enumerated ``forstås ved:`` list."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import re

from lovcite.ingestion.normalization import normalize_term, normalize_whitespace
from lovcite.ingestion.provisions import LegalProvision


@dataclass(frozen=True, slots=True)
class Definition:
    term: str
    definition: str
    source_provision: str | None = None


# A definition ends at "." or ";" before a capitalized word or the end of
# the text; "nr. 3", "stk. 2" and "jf. § 5" do not end it.
_DEFINITION_END = r"(?<!\bjf)(?<!\bnr)(?<!\bstk)[.;](?=\s+[A-ZÆØÅ§]|\s*$)"

_VED_FORSTAAS_RE = re.compile(
    r"\bVed\s+(?P<term>[^.;:]{1,120}?)\s+forstås\s+"
    r"(?:i\s+denne\s+(?:lov|bekendtgørelse|paragraf|kapitel|del)\s+)?"
    rf"(?!ved\b)(?P<definition>.+?{_DEFINITION_END})",
)

_LIST_INTRO_RE = re.compile(
    r"\b(?:I|Ved\s+anvendelse\s+af)\s+denne\s+(?:lov|bekendtgørelse|paragraf|kapitel|del)\s+forstås\s+ved\s*:?\s*",
    re.IGNORECASE,
)
_LIST_END_RE = re.compile(r"\bStk\.\s*\d+\.")
_LIST_ITEM_RE = re.compile(
    r"(?<!\w)\d+\)\s*(?P<term>[^:;)]{1,120}?)\s*:\s*(?P<definition>.+?)(?=\s+\d+\)\s|$)",
)
_TRAILING_CONJUNCTION_RE = re.compile(r"[;,]?\s*(?:(?<!\w)(?:og|eller))?\s*$")


def _clean_item_definition(raw: str) -> str:
    text = normalize_whitespace(raw)
    if text.endswith("."):
        return text
    return _TRAILING_CONJUNCTION_RE.sub("", text)


def match_ved_definitions(text: str) -> list[tuple[str, str]]:
    """``Ved personoplysninger forstås enhver information.``"""

    found: list[tuple[str, str]] = []
    for match in _VED_FORSTAAS_RE.finditer(text):
        term = normalize_term(match.group("term"))
        definition = normalize_whitespace(match.group("definition"))
        if term and definition:
            found.append((term, definition))
    return found


def match_enumerated_definitions(text: str) -> list[tuple[str, str]]:
    """``I denne lov forstås ved: 1) Behandling: Enhver aktivitet. 2) ...``"""

    found: list[tuple[str, str]] = []
    for intro in _LIST_INTRO_RE.finditer(text):
        tail = text[intro.end():]
        end = _LIST_END_RE.search(tail)
        if end is not None:
            tail = tail[:end.start()]
        for item in _LIST_ITEM_RE.finditer(tail.strip()):
            term = normalize_term(item.group("term"))
            definition = _clean_item_definition(item.group("definition"))
            if term and definition:
                found.append((term, definition))
    return found


def extract_definitions(provisions: Iterable[LegalProvision]) -> list[Definition]:
    """Collect definitions in provision order; the first definition of a term wins."""

    definitions: dict[str, Definition] = {}
    for provision in provisions:
        text = normalize_whitespace(provision.content)
        for term, definition in match_ved_definitions(text) + match_enumerated_definitions(text):
            if term in definitions:
                continue
            definitions[term] = Definition(term=term, definition=definition, source_provision=provision.provision_ref)
    return list(definitions.values())
