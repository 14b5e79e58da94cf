from __future__ import annotations

from lovcite.ingestion.provisions import (
    LegalProvision,
    dedupe_provisions,
    extract_provisions,
    match_chapter_heading,
    match_section_heading,
)
from lovcite.ingestion.tree import Chapter, DocumentTree, Heading, HeadingKind, Section, TextLeaf


def _explicatus(text: str) -> Heading:
    return Heading(kind=HeadingKind.EXPLICATUS, text=text)


def test_heading_matchers() -> None:
    assert match_section_heading("§ 5 a.") == "5 a"
    assert match_section_heading("§ 12") == "12"
    assert match_section_heading("12.") == "12"
    assert match_section_heading("Stk. 2.") is None
    assert match_chapter_heading("KAPITEL 3 A") == "3 a"
    assert match_chapter_heading("Afsnit I") is None


def test_extracts_chapter_qualified_provisions_with_titles() -> None:
    tree = DocumentTree(
        children=(
            Chapter(
                local_id=None,
                children=(
                    _explicatus("Kapitel 4"),
                    Section(
                        local_id=None,
                        children=(
                            _explicatus("§ 10."),
                            Heading(kind=HeadingKind.RUBRICA, text="Oplysningspligt"),
                            TextLeaf("Den dataansvarlige skal give oplysninger."),
                        ),
                    ),
                ),
            ),
        )
    )

    extraction = extract_provisions(tree, "2018:502")

    assert extraction.warnings == []
    [provision] = extraction.provisions
    assert provision.provision_ref == "4:10"
    assert provision.chapter == "4"
    assert provision.section == "10"
    assert provision.title == "Oplysningspligt"
    assert provision.content == "§ 10. Oplysningspligt Den dataansvarlige skal give oplysninger."


def test_unnumbered_chapter_warns_and_inherits_parent_chapter() -> None:
    tree = DocumentTree(
        children=(
            Chapter(
                local_id="2",
                children=(
                    Chapter(
                        local_id=None,
                        children=(
                            Heading(kind=HeadingKind.RUBRICA, text="Særlige regler"),
                            Section(local_id=None, children=(_explicatus("§ 4."), TextLeaf("Tekst."))),
                        ),
                    ),
                ),
            ),
        )
    )

    extraction = extract_provisions(tree, "2018:502")

    assert [provision.provision_ref for provision in extraction.provisions] == ["2:4"]
    assert len(extraction.warnings) == 1
    assert extraction.warnings[0].node_kind == "chapter"
    assert extraction.warnings[0].chapter == "2"


def test_unnumbered_section_warns_but_keeps_nested_sections() -> None:
    tree = DocumentTree(
        children=(
            Section(
                local_id=None,
                children=(
                    TextLeaf("Overgangsbestemmelser uden nummer."),
                    Section(local_id="7", children=(TextLeaf("Indre bestemmelse."),)),
                ),
            ),
        )
    )

    extraction = extract_provisions(tree, "2018:502")

    assert [provision.provision_ref for provision in extraction.provisions] == ["7"]
    assert extraction.warnings[0].message == "Section heading has no resolvable number"


def test_local_id_is_canonicalized_and_empty_sections_are_skipped() -> None:
    tree = DocumentTree(
        children=(
            Section(local_id="5A", children=(TextLeaf("Tekst."),)),
            Section(local_id="6", children=()),
        )
    )

    extraction = extract_provisions(tree, "2018:502")

    assert [provision.provision_ref for provision in extraction.provisions] == ["5 a"]


def test_duplicate_sections_keep_longest_content_in_first_position() -> None:
    tree = DocumentTree(
        children=(
            Section(local_id="5", children=(TextLeaf("kort"),)),
            Section(local_id="6", children=(TextLeaf("seks"),)),
            Section(local_id="5", children=(TextLeaf("en væsentligt længere tekst"),)),
        )
    )

    extraction = extract_provisions(tree, "2018:502")

    assert [provision.provision_ref for provision in extraction.provisions] == ["5", "6"]
    assert extraction.provisions[0].content == "en væsentligt længere tekst"


def test_dedupe_ties_keep_first_occurrence() -> None:
    first = LegalProvision(document_id="2018:502", provision_ref="1", section="1", content="a" * 10)
    longer = LegalProvision(document_id="2018:502", provision_ref="1", section="1", content="b" * 50)
    same_length = LegalProvision(document_id="2018:502", provision_ref="1", section="1", content="c" * 50)

    assert dedupe_provisions([first, longer, same_length]) == [longer]
