from __future__ import annotations

from datetime import date
import logging
from pathlib import Path

import pytest

from lovcite.ingestion.ingestor import IngestionError, StatuteIngestor
from lovcite.ingestion.seed import UNTITLED

_FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "lov_2018_502.xml"


def test_ingest_xml_file(tmp_path: Path) -> None:
    source = tmp_path / "lov-2018-502.xml"
    source.write_bytes(_FIXTURE.read_bytes())
    ingestor = StatuteIngestor(today=date(2024, 1, 1))

    result = ingestor.ingest(source)

    assert result.source_path == source
    assert result.seed.id == "2018:502"
    assert len(result.seed.provisions) == 4
    assert result.warnings == []
    assert ingestor.supports(Path("LOV.XML"))


def test_ingest_rejects_unsupported_suffix(tmp_path: Path) -> None:
    source = tmp_path / "lov.pdf"
    source.write_bytes(b"%PDF")

    with pytest.raises(IngestionError, match="Unsupported file type"):
        StatuteIngestor().ingest(source)


def test_ingest_reports_unreadable_file(tmp_path: Path) -> None:
    with pytest.raises(IngestionError, match="Failed to read source file") as excinfo:
        StatuteIngestor().ingest(tmp_path / "missing.xml")

    assert excinfo.value.path == tmp_path / "missing.xml"
    assert "path=" in str(excinfo.value)


def test_ingest_bytes_wraps_malformed_xml() -> None:
    with pytest.raises(IngestionError, match="Statute XML rejected: Malformed XML"):
        StatuteIngestor().ingest_bytes(b"<Dokument><Meta>", source="upload.xml")


def test_ingest_bytes_wraps_missing_meta() -> None:
    with pytest.raises(IngestionError, match="missing Dokument.Meta"):
        StatuteIngestor().ingest_bytes(b"<Dokument><DokumentIndhold/></Dokument>")


def test_document_without_provisions_logs_warning(caplog: pytest.LogCaptureFixture) -> None:
    payload = b"<Dokument><Meta><Year>2019</Year><Number>7</Number></Meta></Dokument>"

    with caplog.at_level(logging.WARNING, logger="lovcite.ingestion.ingestor"):
        result = StatuteIngestor().ingest_bytes(payload, source="empty.xml")

    assert result.seed.id == "2019:7"
    assert result.seed.title == UNTITLED
    assert result.seed.provisions == []
    assert "No provisions extracted" in caplog.text
