"""Text normalization helpers shared by ingestion, extraction and citation parsing."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]+")
_SECTION_TOKEN_RE = re.compile(r"^(\d+)\s*([A-Za-z])?$")

# Danish letters without a canonical decomposition.
_ASCII_FOLDS = str.maketrans({"æ": "ae", "Æ": "AE", "ø": "oe", "Ø": "OE"})


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace (NBSP included), trim, and compose to NFC."""

    collapsed = _WHITESPACE_RE.sub(" ", text.replace("\u00a0", " ")).strip()
    return unicodedata.normalize("NFC", collapsed)


def normalize_term(text: str) -> str:
    """Lower-cased, whitespace-normalized form used for defined terms."""

    return normalize_whitespace(text.lower())


def to_ascii_key(text: str) -> str:
    """Derive an ASCII-only, lower-cased, underscore-joined key.

    Used for seed filenames and identifier fragments; never for display.
    """

    decomposed = unicodedata.normalize("NFKD", text.translate(_ASCII_FOLDS))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM_RE.sub("_", stripped).strip("_").lower()


def normalize_section_token(text: str) -> str:
    """Canonical section string: ``"5a"``, ``"5 A"`` and ``" 5  a"`` become ``"5 a"``."""

    cleaned = normalize_whitespace(text)
    match = _SECTION_TOKEN_RE.match(cleaned)
    if not match:
        return cleaned
    number, suffix = match.groups()
    number = str(int(number))
    return f"{number} {suffix.lower()}" if suffix else number
