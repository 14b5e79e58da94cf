"""Entry point turning a Retsinformation XML export into a seed record."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
import logging
from pathlib import Path

from lovcite.ingestion.provisions import ExtractionWarning
from lovcite.ingestion.seed import StatuteSeed, build_seed
from lovcite.ingestion.xml_tree import parse_statute_xml

LOGGER = logging.getLogger(__name__)

XML_SUFFIXES = frozenset({".xml"})


@dataclass(slots=True)
class IngestionError(Exception):
    """Domain error for unreadable or malformed statute exports."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


@dataclass(slots=True)
class IngestionResult:
    source_path: Path
    seed: StatuteSeed
    warnings: list[ExtractionWarning] = field(default_factory=list)


class StatuteIngestor:
    """Parse statute XML and build seeds; all failures surface as :class:`IngestionError`."""

    def __init__(
        self,
        *,
        legal_basis_refs: Iterable[str] = (),
        today: date | None = None,
    ) -> None:
        self._legal_basis_refs = tuple(legal_basis_refs)
        self._today = today

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() in XML_SUFFIXES

    def ingest(self, path: str | Path) -> IngestionResult:
        source = Path(path)
        if not self.supports(source):
            raise IngestionError(source, "Unsupported file type, expected a Retsinformation .xml export")
        return self.ingest_bytes(self._read_bytes(source), source=source)

    def ingest_bytes(self, payload: bytes, *, source: str | Path = "<bytes>") -> IngestionResult:
        source_path = Path(source)
        try:
            parsed = parse_statute_xml(payload)
        except ValueError as exc:
            raise IngestionError(source_path, f"Statute XML rejected: {exc}") from exc

        build = build_seed(
            parsed,
            legal_basis_refs=self._legal_basis_refs,
            today=self._today,
            source_name=source_path.stem,
        )
        if not build.seed.provisions:
            LOGGER.warning("No provisions extracted from %s", source_path)
        return IngestionResult(source_path=source_path, seed=build.seed, warnings=build.warnings)

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise IngestionError(path, f"Failed to read source file: {exc}") from exc
