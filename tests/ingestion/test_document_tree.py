from __future__ import annotations

from lovcite.ingestion.tree import (
    Chapter,
    Heading,
    HeadingKind,
    Section,
    TextLeaf,
    headings,
    node_text,
    tree_from_mapping,
)


def _mapping_document() -> dict[str, object]:
    return {
        "Meta": {"Year": "2018", "Number": "502"},
        "DokumentIndhold": {
            "Kapitel": [
                {
                    "localId": "1",
                    "Explicatus": {"Char": "Kapitel 1"},
                    "Paragraf": {
                        "Explicatus": "§ 1.",
                        "Exitus": {"Char": "Loven gælder for behandling."},
                    },
                }
            ]
        },
    }


def test_tree_from_mapping_builds_closed_node_types() -> None:
    tree = tree_from_mapping(_mapping_document())

    assert len(tree.children) == 1
    chapter = tree.children[0]
    assert isinstance(chapter, Chapter)
    assert chapter.local_id == "1"
    assert chapter.children[0] == Heading(kind=HeadingKind.EXPLICATUS, text="Kapitel 1")

    section = chapter.children[1]
    assert isinstance(section, Section)
    assert section.local_id is None
    assert section.children == (
        Heading(kind=HeadingKind.EXPLICATUS, text="§ 1."),
        TextLeaf("Loven gælder for behandling."),
    )


def test_tree_from_mapping_skips_meta_block() -> None:
    tree = tree_from_mapping({"Meta": {"DocumentTitle": "Skjult"}})

    assert tree.children == ()


def test_node_text_and_direct_headings() -> None:
    tree = tree_from_mapping(_mapping_document())
    chapter = tree.children[0]

    assert node_text(chapter) == "Kapitel 1 § 1. Loven gælder for behandling."
    assert headings(chapter) == [Heading(kind=HeadingKind.EXPLICATUS, text="Kapitel 1")]
    assert headings(chapter, HeadingKind.RUBRICA) == []
