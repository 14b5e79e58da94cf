from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from lovcite.extraction.eu_references import EUReferenceType
from lovcite.ingestion.seed import (
    UNTITLED,
    build_seed,
    default_seed_path,
    read_seed,
    seed_from_dict,
    seed_to_dict,
    write_seed,
)
from lovcite.ingestion.xml_tree import parse_statute_xml

_FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "lov_2018_502.xml"


def _build(**kwargs: object):
    return build_seed(parse_statute_xml(_FIXTURE.read_bytes()), today=date(2024, 1, 1), **kwargs)


def test_build_seed_document_fields() -> None:
    seed = _build(url="https://www.retsinformation.dk/eli/lta/2018/502").seed

    assert seed.id == "2018:502"
    assert seed.type == "statute"
    assert seed.short_name == "LOV"
    assert seed.status == "in_force"
    assert seed.issued_date == "2018-05-23"
    assert seed.in_force_date == "2018-05-25"
    assert seed.end_date is None
    assert seed.url == "https://www.retsinformation.dk/eli/lta/2018/502"
    assert seed.description == "Retsinformation source. DocumentId=LOV-2018-502; AccessionNumber=A20180050229."


def test_build_seed_runs_every_extractor() -> None:
    build = _build(legal_basis_refs=("1:1",))
    seed = build.seed

    assert build.warnings == []
    assert [item.provision_ref for item in seed.provisions] == ["1:1", "1:2", "2:3", "2:3 a"]
    assert seed.provisions[2].title == "Behandling af oplysninger"
    assert [(item.valid_from, item.valid_to) for item in seed.provision_versions] == [("2018-05-25", None)] * 4

    assert [item.term for item in seed.definitions] == ["tilsynsmyndighed", "behandling", "den dataansvarlige"]

    targets = [(item.target_document_id, item.target_provision_ref, item.target_pinpoint) for item in seed.cross_references]
    assert targets == [("2018:502", "2", "1"), ("2017:410", "5", "2")]

    eu = {item.eu_document_id: item for item in seed.eu_references}
    assert eu["regulation:2016/679"].reference_type is EUReferenceType.IMPLEMENTS
    assert eu["regulation:2016/679"].is_primary_implementation is True
    assert eu["directive:2016/680"].reference_type is EUReferenceType.DEROGATES_FROM
    assert eu["directive:2016/680"].is_primary_implementation is False


def test_seed_dict_round_trip(tmp_path: Path) -> None:
    seed = _build(legal_basis_refs=("1:1",)).seed

    assert seed_from_dict(seed_to_dict(seed)) == seed

    written = write_seed(seed, tmp_path / "nested" / "seed.json")
    assert written.read_text(encoding="utf-8").endswith("\n")
    assert "databeskyttelsesloven" in written.read_text(encoding="utf-8")
    assert read_seed(written) == seed


def test_seed_from_dict_defaults_and_validation() -> None:
    seed = seed_from_dict({"id": "LOV-1"})

    assert seed.title == UNTITLED
    assert seed.type == "statute"
    assert seed.status == "in_force"
    assert seed.provisions == []

    with pytest.raises(ValueError, match="'id'"):
        seed_from_dict({"title": "Uden id"})
    with pytest.raises(ValueError, match="list of objects"):
        seed_from_dict({"id": "LOV-1", "provisions": "nope"})
    with pytest.raises(ValueError, match="'content'"):
        seed_from_dict({"id": "LOV-1", "provisions": [{"provision_ref": "1", "section": "1"}]})


def test_read_seed_rejects_non_object(tmp_path: Path) -> None:
    path = tmp_path / "seed.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON object"):
        read_seed(path)


def test_default_seed_path() -> None:
    assert default_seed_path("2018:502", "data/seed") == Path("data/seed/2018_502.json")
    assert default_seed_path("LOV-Ærø", "data/seed") == Path("data/seed/lov_aeroe.json")
    assert default_seed_path("§", "data/seed") == Path("data/seed/unknown.json")
