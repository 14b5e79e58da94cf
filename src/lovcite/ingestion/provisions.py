"""Flatten a statute tree into a deduplicated, chapter-qualified provision list."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re

from lovcite.citation.models import ProvisionRef
from lovcite.ingestion.normalization import normalize_section_token, normalize_whitespace
from lovcite.ingestion.tree import (
    Chapter,
    DocumentTree,
    Heading,
    HeadingKind,
    Node,
    Section,
    TextLeaf,
    headings,
    node_text,
)

LOGGER = logging.getLogger(__name__)

_CHAPTER_HEADING_RE = re.compile(r"kapitel\s+(\d+\s?[a-zA-Z]?)\b", re.IGNORECASE)
_SECTION_SYMBOL_RE = re.compile(r"§\s*(\d+\s?[a-zA-Z]?)(?![\w])")
_SECTION_PLAIN_RE = re.compile(r"^(\d+\s?[a-zA-Z]?)\.?$")


@dataclass(slots=True)
class LegalProvision:
    """One section of a statute after extraction."""

    document_id: str
    provision_ref: str
    section: str
    content: str
    chapter: str | None = None
    title: str | None = None


@dataclass(frozen=True, slots=True)
class ExtractionWarning:
    """A container heading that could not be resolved to a number."""

    node_kind: str
    message: str
    chapter: str | None = None


@dataclass(slots=True)
class ProvisionExtraction:
    provisions: list[LegalProvision] = field(default_factory=list)
    warnings: list[ExtractionWarning] = field(default_factory=list)


def match_chapter_heading(text: str) -> str | None:
    """``"Kapitel 3"`` -> ``"3"``."""

    match = _CHAPTER_HEADING_RE.search(normalize_whitespace(text))
    if not match:
        return None
    return normalize_section_token(match.group(1))


def match_section_heading(text: str) -> str | None:
    """``"§ 5 a."`` -> ``"5 a"``; a bare ``"12."`` -> ``"12"``."""

    cleaned = normalize_whitespace(text)
    if not cleaned:
        return None
    match = _SECTION_SYMBOL_RE.search(cleaned) or _SECTION_PLAIN_RE.match(cleaned)
    if not match:
        return None
    return normalize_section_token(match.group(1))


def resolve_chapter(node: Chapter) -> str | None:
    if node.local_id:
        return node.local_id
    for heading in headings(node):
        chapter = match_chapter_heading(heading.text)
        if chapter:
            return chapter
    return None


def resolve_section(node: Section) -> str | None:
    if node.local_id:
        return normalize_section_token(node.local_id)
    for heading in headings(node, HeadingKind.EXPLICATUS):
        section = match_section_heading(heading.text)
        if section:
            return section
    return None


def _section_title(node: Section) -> str | None:
    title = normalize_whitespace(" ".join(heading.text for heading in headings(node, HeadingKind.RUBRICA)))
    return title or None


def dedupe_provisions(provisions: list[LegalProvision]) -> list[LegalProvision]:
    """Keep the longest-content provision per (document id, ref).

    Ties keep the first occurrence; output follows first-occurrence order.
    """

    kept: dict[tuple[str, str], LegalProvision] = {}
    for provision in provisions:
        key = (provision.document_id, provision.provision_ref)
        existing = kept.get(key)
        if existing is None or len(provision.content) > len(existing.content):
            kept[key] = provision
    return list(kept.values())


class _ProvisionWalker:
    def __init__(self, document_id: str) -> None:
        self._document_id = document_id
        self.provisions: list[LegalProvision] = []
        self.warnings: list[ExtractionWarning] = []

    def walk(self, nodes: tuple[Node, ...], chapter: str | None) -> None:
        for node in nodes:
            match node:
                case Chapter():
                    self._visit_chapter(node, chapter)
                case Section():
                    self._visit_section(node, chapter)
                case Heading() | TextLeaf():
                    continue
                case _:
                    raise TypeError(f"Unsupported tree node: {type(node).__name__}")

    def _warn(self, node_kind: str, message: str, chapter: str | None) -> None:
        LOGGER.debug("%s: %s (chapter=%s)", self._document_id, message, chapter)
        self.warnings.append(ExtractionWarning(node_kind=node_kind, message=message, chapter=chapter))

    def _visit_chapter(self, node: Chapter, chapter: str | None) -> None:
        resolved = resolve_chapter(node)
        if resolved is None:
            self._warn("chapter", "Chapter heading has no resolvable number", chapter)
        self.walk(node.children, resolved or chapter)

    def _visit_section(self, node: Section, chapter: str | None) -> None:
        section = resolve_section(node)
        if section is None:
            self._warn("section", "Section heading has no resolvable number", chapter)
            self.walk(node.children, chapter)
            return

        content = node_text(node)
        if content:
            ref = ProvisionRef(section=section, chapter=chapter)
            self.provisions.append(
                LegalProvision(
                    document_id=self._document_id,
                    provision_ref=str(ref),
                    section=ref.section,
                    chapter=ref.chapter,
                    title=_section_title(node),
                    content=content,
                )
            )
        self.walk(node.children, chapter)


def extract_provisions(tree: DocumentTree, document_id: str) -> ProvisionExtraction:
    """Walk *tree* and return one provision per resolvable, non-empty section."""

    walker = _ProvisionWalker(document_id)
    walker.walk(tree.children, None)
    return ProvisionExtraction(provisions=dedupe_provisions(walker.provisions), warnings=walker.warnings)
