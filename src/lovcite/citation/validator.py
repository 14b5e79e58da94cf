"""Check structured citations against a provision-lookup capability.

A match is only ever reported when the lookup answers ``exists=True`` for the
exact provision. Everything else degrades to an unmatched result with
explanatory warnings; in-force checks are advisory and never flip a match.
"""

from __future__ import annotations

from datetime import date
import logging
import re
from typing import Protocol, runtime_checkable

from lovcite.citation.models import CurrencyStatus, LookupResult, ProvisionRef, StructuredCitation, ValidationResult
from lovcite.ingestion.metadata import parse_iso_date

LOGGER = logging.getLogger(__name__)

NEAREST_SIBLING_LIMIT = 3

_LEADING_NUMBER_RE = re.compile(r"(\d+)")


@runtime_checkable
class ProvisionLookup(Protocol):
    """Capability answering whether a document / provision exists."""

    def lookup(
        self,
        document_id: str,
        provision_ref: str | None = None,
        as_of_date: str | None = None,
    ) -> LookupResult:
        """Return existence, in-force window and sibling provision refs."""


def _section_number(ref: str) -> int | None:
    section = ref.rsplit(":", 1)[-1]
    match = _LEADING_NUMBER_RE.match(section)
    return int(match.group(1)) if match else None


def nearest_siblings(provision_ref: str, sibling_refs: tuple[str, ...] | list[str], *, limit: int = NEAREST_SIBLING_LIMIT) -> list[str]:
    """Best-effort hint: sibling refs closest to *provision_ref* by section number."""

    target = _section_number(provision_ref)
    if target is None:
        return list(sibling_refs[:limit])

    ranked: list[tuple[int, int, str]] = []
    for position, ref in enumerate(sibling_refs):
        number = _section_number(ref)
        if number is None:
            continue
        ranked.append((abs(number - target), position, ref))
    ranked.sort()
    return [ref for _, _, ref in ranked[:limit]]


def _checked_date(as_of_date: str | None) -> str | None:
    if as_of_date is None:
        return None
    parsed = parse_iso_date(as_of_date)
    if parsed is None:
        raise ValueError(f"as_of_date must be an ISO date (YYYY-MM-DD): {as_of_date!r}")
    return parsed


def validate_citation(
    citation: StructuredCitation,
    lookup: ProvisionLookup,
    *,
    as_of_date: str | None = None,
) -> ValidationResult:
    """Validate *citation* against *lookup*."""

    checked_date = _checked_date(as_of_date)
    document = lookup.lookup(citation.document_id, None, checked_date)
    if not document.exists:
        LOGGER.debug("Citation %r: document %s not found", citation.raw, citation.document_id)
        return ValidationResult(
            citation=citation,
            matched=False,
            warnings=[f"document not found: {citation.document_id}"],
        )

    warnings: list[str] = []
    resolved: str | None = None
    ref = citation.provision_ref

    if ref is not None:
        provision = lookup.lookup(citation.document_id, str(ref), checked_date)
        if not provision.exists:
            warnings.append(f"document exists, provision not found: {ref}")
            hints = nearest_siblings(str(ref), provision.sibling_refs or document.sibling_refs)
            if hints:
                warnings.append(f"nearest sections: {', '.join(hints)}")
            return ValidationResult(citation=citation, matched=False, warnings=warnings)
        resolved = str(ref)

    if citation.eu_article is not None:
        warnings.append(f"EU article pinpoint not verified: art. {citation.eu_article}")

    window = document.in_force_window
    if checked_date is not None and window is not None and not window.contains(checked_date):
        warnings.append(
            f"currency warning: {citation.document_id} is not in force on {checked_date} "
            f"(in force {window.valid_from or '?'} to {window.valid_to or 'present'})"
        )

    return ValidationResult(citation=citation, matched=True, warnings=warnings, resolved_provision=resolved)


def check_currency(
    lookup: ProvisionLookup,
    document_id: str,
    provision_ref: str | None = None,
    as_of_date: str | None = None,
    *,
    today: date | None = None,
) -> CurrencyStatus:
    """Report whether a document (and optionally one provision) is in force on a date."""

    checked_date = _checked_date(as_of_date) or (today or date.today()).isoformat()
    ref = str(ProvisionRef.parse(provision_ref)) if provision_ref else None

    document = lookup.lookup(document_id, None, checked_date)
    if not document.exists:
        return CurrencyStatus(
            document_id=document_id,
            provision_ref=ref,
            found=False,
            in_force=None,
            as_of_date=checked_date,
            warnings=[f"document not found: {document_id}"],
        )

    warnings: list[str] = []
    if ref is not None and not lookup.lookup(document_id, ref, checked_date).exists:
        return CurrencyStatus(
            document_id=document_id,
            provision_ref=ref,
            found=False,
            in_force=None,
            as_of_date=checked_date,
            window=document.in_force_window,
            warnings=[f"document exists, provision not found: {ref}"],
        )

    window = document.in_force_window
    in_force: bool | None = None
    if window is not None:
        in_force = window.contains(checked_date)
        if not in_force:
            warnings.append(f"currency warning: {document_id} is not in force on {checked_date}")
    else:
        warnings.append("in-force window unknown")

    return CurrencyStatus(
        document_id=document_id,
        provision_ref=ref,
        found=True,
        in_force=in_force,
        as_of_date=checked_date,
        window=window,
        warnings=warnings,
    )
