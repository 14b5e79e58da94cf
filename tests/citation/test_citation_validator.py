from __future__ import annotations

from datetime import date

import pytest

from lovcite.citation.models import InForceWindow, LookupResult, StructuredCitation
from lovcite.citation.validator import check_currency, nearest_siblings, validate_citation


class _StubLookup:
    def __init__(self, documents: dict[str, tuple[InForceWindow | None, tuple[str, ...]]]) -> None:
        self._documents = documents
        self.calls: list[tuple[str, str | None, str | None]] = []

    def lookup(self, document_id: str, provision_ref: str | None = None, as_of_date: str | None = None) -> LookupResult:
        self.calls.append((document_id, provision_ref, as_of_date))
        entry = self._documents.get(document_id)
        if entry is None:
            return LookupResult(exists=False)
        window, refs = entry
        exists = provision_ref is None or provision_ref in refs
        return LookupResult(exists=exists, in_force_window=window, sibling_refs=refs)


def _lookup() -> _StubLookup:
    return _StubLookup(
        {
            "2018:502": (InForceWindow(valid_from="2018-05-25"), ("1", "2", "5", "98", "100")),
            "2001:10": (None, ("1",)),
        }
    )


def test_existing_provision_is_matched() -> None:
    result = validate_citation(StructuredCitation(document_id="2018:502", section="5", pinpoint="2"), _lookup())

    assert result.matched is True
    assert result.resolved_provision == "5"
    assert result.warnings == []


def test_unknown_document_is_reported() -> None:
    result = validate_citation(StructuredCitation(document_id="9999:1", section="1"), _lookup())

    assert result.matched is False
    assert result.warnings == ["document not found: 9999:1"]


def test_missing_provision_reports_nearest_sections() -> None:
    result = validate_citation(StructuredCitation(document_id="2018:502", section="99"), _lookup())

    assert result.matched is False
    assert result.resolved_provision is None
    assert result.warnings == [
        "document exists, provision not found: 99",
        "nearest sections: 98, 100, 5",
    ]


def test_document_only_citation_matches_document() -> None:
    result = validate_citation(StructuredCitation(document_id="2018:502"), _lookup())

    assert result.matched is True
    assert result.resolved_provision is None


def test_out_of_window_date_warns_but_still_matches() -> None:
    lookup = _lookup()
    result = validate_citation(
        StructuredCitation(document_id="2018:502", section="1"),
        lookup,
        as_of_date="2017-01-01",
    )

    assert result.matched is True
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("currency warning: 2018:502 is not in force on 2017-01-01")
    assert all(call[2] == "2017-01-01" for call in lookup.calls)


def test_invalid_as_of_date_is_rejected() -> None:
    with pytest.raises(ValueError, match="ISO date"):
        validate_citation(StructuredCitation(document_id="2018:502", section="1"), _lookup(), as_of_date="yesterday")


def test_eu_article_is_flagged_as_unverified() -> None:
    lookup = _StubLookup({"regulation:2016/679": (None, ())})
    result = validate_citation(StructuredCitation(document_id="regulation:2016/679", eu_article="6"), lookup)

    assert result.matched is True
    assert result.warnings == ["EU article pinpoint not verified: art. 6"]


def test_nearest_siblings_limits_hints() -> None:
    assert nearest_siblings("3:7", ("3:1", "3:6", "3:8", "3:20"), limit=2) == ["3:6", "3:8"]


def test_check_currency_in_force_today() -> None:
    status = check_currency(_lookup(), "2018:502", "5", today=date(2024, 1, 1))

    assert status.found is True
    assert status.in_force is True
    assert status.as_of_date == "2024-01-01"
    assert status.provision_ref == "5"
    assert status.warnings == []


def test_check_currency_before_window() -> None:
    status = check_currency(_lookup(), "2018:502", as_of_date="2010-06-01")

    assert status.in_force is False
    assert status.warnings == ["currency warning: 2018:502 is not in force on 2010-06-01"]


def test_check_currency_unknown_window_and_missing_items() -> None:
    unknown = check_currency(_lookup(), "2001:10", today=date(2024, 1, 1))
    missing_document = check_currency(_lookup(), "1999:1", today=date(2024, 1, 1))
    missing_provision = check_currency(_lookup(), "2018:502", "77", today=date(2024, 1, 1))

    assert unknown.found is True
    assert unknown.in_force is None
    assert unknown.warnings == ["in-force window unknown"]
    assert missing_document.found is False
    assert missing_document.warnings == ["document not found: 1999:1"]
    assert missing_provision.found is False
    assert missing_provision.warnings == ["document exists, provision not found: 77"]
