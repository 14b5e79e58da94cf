"""Seed records: the JSON shape handed from ingestion to the provision store."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
import json
import logging
from pathlib import Path
import re

from lovcite.extraction.cross_references import CrossReference, extract_cross_references
from lovcite.extraction.definitions import Definition, extract_definitions
from lovcite.extraction.eu_references import EUReference, EUReferenceType, extract_document_eu_references
from lovcite.ingestion.metadata import infer_document_id, infer_document_type, infer_status
from lovcite.ingestion.normalization import normalize_whitespace, to_ascii_key
from lovcite.ingestion.provisions import ExtractionWarning, LegalProvision, extract_provisions
from lovcite.ingestion.xml_tree import ParsedStatute

LOGGER = logging.getLogger(__name__)

UNTITLED = "Untitled Retsinformation document"

_NUMERIC_ID_RE = re.compile(r"^\d{4}:\d+$")


@dataclass(slots=True)
class ProvisionSeed:
    provision_ref: str
    section: str
    content: str
    chapter: str | None = None
    title: str | None = None


@dataclass(slots=True)
class ProvisionVersionSeed:
    provision_ref: str
    section: str
    content: str
    chapter: str | None = None
    title: str | None = None
    valid_from: str | None = None
    valid_to: str | None = None


@dataclass(slots=True)
class StatuteSeed:
    """One statute with everything extracted from it."""

    id: str
    type: str
    title: str
    status: str
    short_name: str | None = None
    issued_date: str | None = None
    in_force_date: str | None = None
    end_date: str | None = None
    url: str | None = None
    description: str | None = None
    provisions: list[ProvisionSeed] = field(default_factory=list)
    provision_versions: list[ProvisionVersionSeed] = field(default_factory=list)
    definitions: list[Definition] = field(default_factory=list)
    cross_references: list[CrossReference] = field(default_factory=list)
    eu_references: list[EUReference] = field(default_factory=list)


@dataclass(slots=True)
class SeedBuild:
    seed: StatuteSeed
    warnings: list[ExtractionWarning] = field(default_factory=list)


def _provision_seed(provision: LegalProvision) -> ProvisionSeed:
    return ProvisionSeed(
        provision_ref=provision.provision_ref,
        chapter=provision.chapter,
        section=provision.section,
        title=provision.title,
        content=provision.content,
    )


def build_seed(
    parsed: ParsedStatute,
    *,
    legal_basis_refs: Iterable[str] = (),
    today: date | None = None,
    url: str | None = None,
    source_name: str | None = None,
) -> SeedBuild:
    """Run every extractor over *parsed* and assemble its seed record."""

    meta = parsed.metadata
    source_document_id = meta.document_id or "unknown"
    accession = meta.accession or source_name or source_document_id
    seed_id = infer_document_id(meta.year, meta.number, source_document_id)

    extraction = extract_provisions(parsed.tree, seed_id)
    provisions = extraction.provisions
    valid_from = meta.start_date or meta.issued_date

    seed = StatuteSeed(
        id=seed_id,
        type=infer_document_type(meta.document_type),
        title=meta.title or UNTITLED,
        short_name=meta.document_type,
        status=infer_status(meta.status, meta.start_date, meta.end_date, today=today),
        issued_date=meta.issued_date,
        in_force_date=meta.start_date,
        end_date=meta.end_date,
        url=url,
        description=normalize_whitespace(
            f"Retsinformation source. DocumentId={source_document_id}; AccessionNumber={accession}."
        ),
        provisions=[_provision_seed(provision) for provision in provisions],
        provision_versions=[
            ProvisionVersionSeed(
                provision_ref=provision.provision_ref,
                chapter=provision.chapter,
                section=provision.section,
                title=provision.title,
                content=provision.content,
                valid_from=valid_from,
                valid_to=meta.end_date,
            )
            for provision in provisions
        ],
        definitions=extract_definitions(provisions),
        cross_references=extract_cross_references(provisions),
        eu_references=extract_document_eu_references(
            provisions,
            document_id=seed_id,
            legal_basis_refs=legal_basis_refs,
        ),
    )

    LOGGER.info(
        "Built seed %s: %d provisions, %d definitions, %d cross-references, %d EU references, %d warnings",
        seed.id,
        len(seed.provisions),
        len(seed.definitions),
        len(seed.cross_references),
        len(seed.eu_references),
        len(extraction.warnings),
    )
    return SeedBuild(seed=seed, warnings=extraction.warnings)


# ---------------------------------------------------------------------------
# JSON round trip
# ---------------------------------------------------------------------------

def seed_to_dict(seed: StatuteSeed) -> dict[str, object]:
    return {
        "id": seed.id,
        "type": seed.type,
        "title": seed.title,
        "short_name": seed.short_name,
        "status": seed.status,
        "issued_date": seed.issued_date,
        "in_force_date": seed.in_force_date,
        "end_date": seed.end_date,
        "url": seed.url,
        "description": seed.description,
        "provisions": [
            {
                "provision_ref": item.provision_ref,
                "chapter": item.chapter,
                "section": item.section,
                "title": item.title,
                "content": item.content,
            }
            for item in seed.provisions
        ],
        "provision_versions": [
            {
                "provision_ref": item.provision_ref,
                "chapter": item.chapter,
                "section": item.section,
                "title": item.title,
                "content": item.content,
                "valid_from": item.valid_from,
                "valid_to": item.valid_to,
            }
            for item in seed.provision_versions
        ],
        "definitions": [
            {"term": item.term, "definition": item.definition, "source_provision": item.source_provision}
            for item in seed.definitions
        ],
        "cross_references": [
            {
                "source_provision_ref": item.source_provision_ref,
                "target_document_id": item.target_document_id,
                "target_provision_ref": item.target_provision_ref,
                "target_pinpoint": item.target_pinpoint,
                "raw": item.raw,
            }
            for item in seed.cross_references
        ],
        "eu_references": [
            {
                "provision_ref": item.provision_ref,
                "eu_document_id": item.eu_document_id,
                "eu_article": item.eu_article,
                "reference_type": item.reference_type.value,
                "is_primary_implementation": item.is_primary_implementation,
                "context": item.context,
            }
            for item in seed.eu_references
        ],
    }


def _optional(payload: Mapping[str, object], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required(payload: Mapping[str, object], key: str) -> str:
    value = _optional(payload, key)
    if value is None:
        raise ValueError(f"Seed record is missing required field {key!r}")
    return value


def _records(payload: Mapping[str, object], key: str) -> list[Mapping[str, object]]:
    value = payload.get(key) or []
    if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
        raise ValueError(f"Seed field {key!r} must be a list of objects")
    return value


def seed_from_dict(payload: Mapping[str, object]) -> StatuteSeed:
    """Rebuild a :class:`StatuteSeed`; raises ``ValueError`` on malformed input."""

    seed_id = _required(payload, "id")
    return StatuteSeed(
        id=seed_id,
        type=_optional(payload, "type") or "statute",
        title=_optional(payload, "title") or UNTITLED,
        short_name=_optional(payload, "short_name"),
        status=_optional(payload, "status") or "in_force",
        issued_date=_optional(payload, "issued_date"),
        in_force_date=_optional(payload, "in_force_date"),
        end_date=_optional(payload, "end_date"),
        url=_optional(payload, "url"),
        description=_optional(payload, "description"),
        provisions=[
            ProvisionSeed(
                provision_ref=_required(item, "provision_ref"),
                chapter=_optional(item, "chapter"),
                section=_required(item, "section"),
                title=_optional(item, "title"),
                content=_required(item, "content"),
            )
            for item in _records(payload, "provisions")
        ],
        provision_versions=[
            ProvisionVersionSeed(
                provision_ref=_required(item, "provision_ref"),
                chapter=_optional(item, "chapter"),
                section=_required(item, "section"),
                title=_optional(item, "title"),
                content=_required(item, "content"),
                valid_from=_optional(item, "valid_from"),
                valid_to=_optional(item, "valid_to"),
            )
            for item in _records(payload, "provision_versions")
        ],
        definitions=[
            Definition(
                term=_required(item, "term"),
                definition=_required(item, "definition"),
                source_provision=_optional(item, "source_provision"),
            )
            for item in _records(payload, "definitions")
        ],
        cross_references=[
            CrossReference(
                source_document_id=seed_id,
                source_provision_ref=_required(item, "source_provision_ref"),
                target_document_id=_required(item, "target_document_id"),
                target_provision_ref=_optional(item, "target_provision_ref"),
                target_pinpoint=_optional(item, "target_pinpoint"),
                raw=_optional(item, "raw") or "",
            )
            for item in _records(payload, "cross_references")
        ],
        eu_references=[
            EUReference(
                document_id=seed_id,
                provision_ref=_optional(item, "provision_ref"),
                eu_document_id=_required(item, "eu_document_id"),
                eu_article=_optional(item, "eu_article"),
                reference_type=EUReferenceType(_optional(item, "reference_type") or "applies"),
                is_primary_implementation=bool(item.get("is_primary_implementation", False)),
                context=_optional(item, "context") or "",
            )
            for item in _records(payload, "eu_references")
        ],
    )


def default_seed_path(seed_id: str, seed_dir: str | Path) -> Path:
    """``2018:502`` -> ``<seed_dir>/2018_502.json``; other ids use their ASCII key."""

    if _NUMERIC_ID_RE.match(seed_id):
        name = seed_id.replace(":", "_")
    else:
        name = to_ascii_key(seed_id) or "unknown"
    return Path(seed_dir) / f"{name}.json"


def write_seed(seed: StatuteSeed, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(seed_to_dict(seed), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return target


def read_seed(path: str | Path) -> StatuteSeed:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping):
        raise ValueError(f"Seed file {path} does not hold a JSON object")
    return seed_from_dict(payload)
