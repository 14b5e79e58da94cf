"""Document-level metadata read from a Retsinformation ``Meta`` block."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import re

DOCUMENT_STATUSES = ("in_force", "amended", "repealed", "not_yet_in_force")
DOCUMENT_TYPES = ("statute", "bill", "sou", "ds", "case_law")

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_STATUTE_PREFIXES = ("LOV", "LBK", "BEK", "FOR")
_RETSINFORMATION_HOST_RE = re.compile(r"^https?://retsinformation\.dk", re.IGNORECASE)


@dataclass(slots=True)
class DocumentMetadata:
    """Raw-but-normalized metadata fields of one statute document."""

    title: str | None = None
    document_type: str | None = None
    document_id: str | None = None
    accession: str | None = None
    year: str | None = None
    number: str | None = None
    status: str | None = None
    issued_date: str | None = None
    start_date: str | None = None
    end_date: str | None = None


def parse_iso_date(value: object) -> str | None:
    """Return the first valid ``YYYY-MM-DD`` date found in *value*."""

    if not isinstance(value, str):
        return None
    match = _ISO_DATE_RE.search(value)
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(0)).isoformat()
    except ValueError:
        return None


def _as_int(value: object) -> int | None:
    if value is None:
        return None
    digits = re.match(r"\s*(\d+)", str(value))
    return int(digits.group(1)) if digits else None


def infer_document_id(year: object, number: object, fallback: str) -> str:
    """``YYYY:N`` when year and number are plausible, otherwise *fallback*."""

    year_value = _as_int(year)
    number_value = _as_int(number)
    if year_value is not None and number_value is not None and year_value > 1900 and number_value > 0:
        return f"{year_value}:{number_value}"
    return fallback


def infer_status(
    raw_status: object,
    start_date: str | None = None,
    end_date: str | None = None,
    *,
    today: date | None = None,
) -> str:
    """Map source status text and validity dates onto ``DOCUMENT_STATUSES``."""

    status_text = str(raw_status or "").lower()
    today_iso = (today or date.today()).isoformat()

    if start_date and start_date > today_iso:
        return "not_yet_in_force"
    if end_date and end_date < today_iso:
        return "repealed"
    if "valid" in status_text or "gældende" in status_text:
        return "in_force"
    if "amend" in status_text:
        return "amended"
    return "in_force"


def infer_document_type(short_name: str | None) -> str:
    upper = (short_name or "").upper()
    if upper.startswith(_STATUTE_PREFIXES):
        return "statute"
    if upper.startswith("L "):
        return "bill"
    return "statute"


def normalize_href(href: str) -> str:
    """Canonicalize Retsinformation links to ``https://www.retsinformation.dk``."""

    return _RETSINFORMATION_HOST_RE.sub("https://www.retsinformation.dk", href.strip())
