"""Cross-reference, EU-reference and definition extraction from provisions."""

from .cross_references import CrossReference, extract_cross_references
from .definitions import Definition, extract_definitions
from .eu_references import (
    EUDocumentRef,
    EUReference,
    EUReferenceType,
    extract_document_eu_references,
    extract_eu_references,
)

__all__ = [
    "CrossReference",
    "Definition",
    "EUDocumentRef",
    "EUReference",
    "EUReferenceType",
    "extract_cross_references",
    "extract_definitions",
    "extract_document_eu_references",
    "extract_eu_references",
]
