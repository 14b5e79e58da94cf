"""Closed node types for statute document trees.

Upstream XML (or its JSON rendering) is reduced to four node kinds:

- ``Chapter`` (``Kapitel``) and ``Section`` (``Paragraf``) containers, each with
  an optional locally scoped id,
- ``Heading`` text carriers (``Explicatus`` number lines, ``Rubrica`` titles),
- ``TextLeaf`` for any other character payload.

Elements of any other kind are flattened into their parent: their text becomes
``TextLeaf`` nodes and their Chapter/Section descendants are kept.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Union

from lovcite.ingestion.normalization import normalize_whitespace

CHARACTER_PAYLOAD_KEY = "Char"
# Attribute keys that never carry document text.
NON_CONTENT_KEYS = frozenset({"id", "localId", "SchemaLocation", "REFid", "formaChar", "formaInd"})

CHAPTER_TAG = "Kapitel"
SECTION_TAG = "Paragraf"
META_TAG = "Meta"


class HeadingKind(Enum):
    EXPLICATUS = "Explicatus"
    RUBRICA = "Rubrica"


@dataclass(frozen=True, slots=True)
class TextLeaf:
    text: str


@dataclass(frozen=True, slots=True)
class Heading:
    kind: HeadingKind
    text: str


@dataclass(frozen=True, slots=True)
class Section:
    local_id: str | None
    children: tuple["Node", ...] = ()


@dataclass(frozen=True, slots=True)
class Chapter:
    local_id: str | None
    children: tuple["Node", ...] = ()


Node = Union[Chapter, Section, Heading, TextLeaf]


@dataclass(frozen=True, slots=True)
class DocumentTree:
    children: tuple[Node, ...] = ()


def node_text(node: Node) -> str:
    """All descendant text of *node*, whitespace-normalized."""

    parts: list[str] = []
    _collect_text(node, parts)
    return normalize_whitespace(" ".join(parts))


def _collect_text(node: Node, parts: list[str]) -> None:
    match node:
        case TextLeaf(text=text) | Heading(text=text):
            if text:
                parts.append(text)
        case Chapter(children=children) | Section(children=children):
            for child in children:
                _collect_text(child, parts)
        case _:
            raise TypeError(f"Unsupported tree node: {type(node).__name__}")


def headings(node: Chapter | Section, kind: HeadingKind | None = None) -> list[Heading]:
    """Direct heading children of *node*, optionally of one kind."""

    return [
        child
        for child in node.children
        if isinstance(child, Heading) and (kind is None or child.kind is kind)
    ]


# ---------------------------------------------------------------------------
# Mapping conversion (attribute-prefixed XML-to-JSON shape)
# ---------------------------------------------------------------------------

def _mapping_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return str(value)
    if isinstance(value, list):
        return " ".join(filter(None, (_mapping_text(item) for item in value)))
    if isinstance(value, Mapping):
        payload = value.get(CHARACTER_PAYLOAD_KEY)
        if isinstance(payload, str):
            return payload
        return " ".join(
            filter(None, (_mapping_text(item) for key, item in value.items() if key not in NON_CONTENT_KEYS))
        )
    return ""


def _local_id(mapping: Mapping[str, object]) -> str | None:
    raw = mapping.get("localId")
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def _as_items(value: object) -> list[object]:
    if value is None:
        return []
    return list(value) if isinstance(value, list) else [value]


def _mapping_children(value: object) -> list[Node]:
    nodes: list[Node] = []
    if isinstance(value, list):
        for item in value:
            nodes.extend(_mapping_children(item))
        return nodes
    if not isinstance(value, Mapping):
        text = _mapping_text(value)
        return [TextLeaf(text)] if text.strip() else []

    payload = value.get(CHARACTER_PAYLOAD_KEY)
    if isinstance(payload, str):
        return [TextLeaf(payload)] if payload.strip() else []

    for key, item in value.items():
        if key in NON_CONTENT_KEYS:
            continue
        if key == CHAPTER_TAG:
            nodes.extend(_mapping_container(Chapter, entry) for entry in _as_items(item))
        elif key == SECTION_TAG:
            nodes.extend(_mapping_container(Section, entry) for entry in _as_items(item))
        elif key in (HeadingKind.EXPLICATUS.value, HeadingKind.RUBRICA.value):
            kind = HeadingKind(key)
            for entry in _as_items(item):
                text = normalize_whitespace(_mapping_text(entry))
                if text:
                    nodes.append(Heading(kind=kind, text=text))
        else:
            nodes.extend(_mapping_children(item))
    return nodes


def _mapping_container(factory: type[Chapter] | type[Section], value: object) -> Chapter | Section:
    if not isinstance(value, Mapping):
        return factory(local_id=None, children=tuple(_mapping_children(value)))
    return factory(local_id=_local_id(value), children=tuple(_mapping_children(value)))


def tree_from_mapping(document: Mapping[str, object]) -> DocumentTree:
    """Convert a nested dict/list document (``Dokument`` body) into a tree."""

    body = {key: value for key, value in document.items() if key != META_TAG}
    return DocumentTree(children=tuple(_mapping_children(body)))
