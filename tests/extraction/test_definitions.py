from __future__ import annotations

from lovcite.extraction.definitions import (
    Definition,
    extract_definitions,
    match_enumerated_definitions,
    match_ved_definitions,
)
from lovcite.ingestion.provisions import LegalProvision


def test_ved_forstaas_sentence() -> None:
    text = "Ved personoplysninger forstås enhver form for information om en identificeret fysisk person. Stk. 2. Loven gælder."

    assert match_ved_definitions(text) == [
        ("personoplysninger", "enhver form for information om en identificeret fysisk person."),
    ]


def test_ved_forstaas_with_scope_phrase() -> None:
    text = "Ved offentlig myndighed forstås i denne lov en forvaltningsmyndighed, jf. § 2, stk. 1."

    assert match_ved_definitions(text) == [
        ("offentlig myndighed", "en forvaltningsmyndighed, jf. § 2, stk. 1."),
    ]


def test_enumerated_definitions_strip_list_punctuation() -> None:
    text = (
        "I denne lov forstås ved: "
        "1) Behandling: Enhver aktivitet med personoplysninger; "
        "2) Register: En struktureret samling af oplysninger, og "
        "3) Den dataansvarlige: En fysisk eller juridisk person. "
        "Stk. 2. Ved tilsynsmyndighed forstås Datatilsynet."
    )

    assert match_enumerated_definitions(text) == [
        ("behandling", "Enhver aktivitet med personoplysninger"),
        ("register", "En struktureret samling af oplysninger"),
        ("den dataansvarlige", "En fysisk eller juridisk person."),
    ]


def test_trailing_word_ending_in_og_is_kept() -> None:
    text = "Ved anvendelse af denne bekendtgørelse forstås ved: 1) Fortegnelse: Et katalog"

    assert match_enumerated_definitions(text) == [("fortegnelse", "Et katalog")]


def test_extract_definitions_first_term_wins() -> None:
    provisions = [
        LegalProvision(
            document_id="2018:502",
            provision_ref="1:2",
            section="2",
            content="Ved Behandling forstås enhver aktivitet.",
        ),
        LegalProvision(
            document_id="2018:502",
            provision_ref="1:3",
            section="3",
            content="Ved behandling forstås noget andet. Ved samtykke forstås en frivillig viljetilkendegivelse.",
        ),
    ]

    assert extract_definitions(provisions) == [
        Definition(term="behandling", definition="enhver aktivitet.", source_provision="1:2"),
        Definition(term="samtykke", definition="en frivillig viljetilkendegivelse.", source_provision="1:3"),
    ]


def test_short_ved_forstaas_definition() -> None:
    assert match_ved_definitions("Ved personoplysninger forstås enhver information.") == [
        ("personoplysninger", "enhver information."),
    ]
