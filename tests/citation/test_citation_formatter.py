from __future__ import annotations

import pytest

from lovcite.citation.formatter import format_citation
from lovcite.citation.models import StructuredCitation


def test_full_style_includes_chapter_section_and_pinpoint() -> None:
    citation = StructuredCitation(document_id="2018:502", section="5", chapter="3", pinpoint="2")

    assert format_citation(citation) == "2018:502 kap. 3 § 5, stk. 2"


def test_short_style_drops_document_and_pinpoint() -> None:
    citation = StructuredCitation(document_id="2018:502", section="5 a", pinpoint="2")

    assert format_citation(citation, "short") == "§ 5 a"


def test_short_style_falls_back_to_article_then_document() -> None:
    assert format_citation(StructuredCitation(document_id="regulation:2016/679", eu_article="6"), "short") == "art. 6"
    assert format_citation(StructuredCitation(document_id="2018:502"), "short") == "2018:502"


def test_pinpoint_style_keeps_subsection() -> None:
    citation = StructuredCitation(document_id="2018:502", section="5", pinpoint="2")

    assert format_citation(citation, "pinpoint") == "2018:502 § 5, stk. 2"


def test_unknown_style_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported citation style"):
        format_citation(StructuredCitation(document_id="2018:502", section="5"), "bluebook")
