"""Retsinformation XML adapter: ``Dokument`` payload -> metadata + document tree."""

from __future__ import annotations

from dataclasses import dataclass

from lxml import etree

from lovcite.ingestion.metadata import DocumentMetadata, parse_iso_date
from lovcite.ingestion.normalization import normalize_whitespace
from lovcite.ingestion.tree import (
    CHAPTER_TAG,
    META_TAG,
    SECTION_TAG,
    Chapter,
    DocumentTree,
    Heading,
    HeadingKind,
    Node,
    Section,
    TextLeaf,
)

DOCUMENT_TAG = "Dokument"

_HEADING_TAGS = {kind.value: kind for kind in HeadingKind}


@dataclass(slots=True)
class ParsedStatute:
    """One parsed statute export."""

    metadata: DocumentMetadata
    tree: DocumentTree


def _safe_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _local_id(element: etree._Element) -> str | None:
    raw = element.get("localId")
    if raw is None:
        return None
    text = raw.strip()
    return text or None


def _text_leaf(text: str | None) -> list[Node]:
    if text and text.strip():
        return [TextLeaf(text)]
    return []


def _element_children(element: etree._Element) -> list[Node]:
    nodes: list[Node] = _text_leaf(element.text)
    for child in element:
        if isinstance(child.tag, str):
            name = _local_name(child)
            if name == CHAPTER_TAG:
                nodes.append(Chapter(local_id=_local_id(child), children=tuple(_element_children(child))))
            elif name == SECTION_TAG:
                nodes.append(Section(local_id=_local_id(child), children=tuple(_element_children(child))))
            elif name in _HEADING_TAGS:
                text = normalize_whitespace(" ".join(child.itertext()))
                if text:
                    nodes.append(Heading(kind=_HEADING_TAGS[name], text=text))
            elif name != META_TAG:
                nodes.extend(_element_children(child))
        # Comments and processing instructions still carry a tail of parent text.
        nodes.extend(_text_leaf(child.tail))
    return nodes


def tree_from_element(element: etree._Element) -> DocumentTree:
    """Convert a ``Dokument`` element (or any body element) into a tree."""

    return DocumentTree(children=tuple(_element_children(element)))


def _first_text(meta: etree._Element, name: str) -> str | None:
    for node in meta.xpath(f"./*[local-name()='{name}']"):
        text = normalize_whitespace(" ".join(node.itertext()))
        if text:
            return text
    return None


def extract_metadata(meta: etree._Element) -> DocumentMetadata:
    return DocumentMetadata(
        title=_first_text(meta, "DocumentTitle"),
        document_type=_first_text(meta, "DocumentType"),
        document_id=_first_text(meta, "DocumentId"),
        accession=_first_text(meta, "AccessionNumber"),
        year=_first_text(meta, "Year"),
        number=_first_text(meta, "Number"),
        status=_first_text(meta, "Status"),
        issued_date=parse_iso_date(_first_text(meta, "DiesSigni")),
        start_date=parse_iso_date(_first_text(meta, "StartDate")),
        end_date=parse_iso_date(_first_text(meta, "EndDate")),
    )


def parse_statute_xml(payload: bytes) -> ParsedStatute:
    """Parse a Retsinformation XML export.

    Raises ``ValueError`` for malformed XML, a root other than ``Dokument``,
    or a missing ``Meta`` block.
    """

    try:
        root = etree.fromstring(payload, parser=_safe_parser())
    except etree.XMLSyntaxError as exc:
        raise ValueError(f"Malformed XML: {exc}") from exc

    if _local_name(root) != DOCUMENT_TAG:
        raise ValueError(f"Unexpected XML payload: root is {_local_name(root)!r}, expected {DOCUMENT_TAG!r}")

    metas = root.xpath(f"./*[local-name()='{META_TAG}']")
    if not metas:
        raise ValueError(f"Unexpected XML payload: missing {DOCUMENT_TAG}.{META_TAG}")

    return ParsedStatute(metadata=extract_metadata(metas[0]), tree=tree_from_element(root))
