"""Structured citation types shared by parsing, formatting and validation."""

from __future__ import annotations

from dataclasses import dataclass, field

from lovcite.ingestion.normalization import normalize_section_token, normalize_whitespace


@dataclass(frozen=True, slots=True)
class ProvisionRef:
    """Canonical key into a statute: ``chapter:section`` or bare ``section``."""

    section: str
    chapter: str | None = None

    def __post_init__(self) -> None:
        section = normalize_section_token(self.section)
        if not section:
            raise ValueError("ProvisionRef requires a section")
        object.__setattr__(self, "section", section)
        if self.chapter is not None:
            chapter = normalize_whitespace(self.chapter)
            object.__setattr__(self, "chapter", chapter or None)

    def __str__(self) -> str:
        if self.chapter:
            return f"{self.chapter}:{self.section}"
        return self.section

    @classmethod
    def parse(cls, raw: str) -> "ProvisionRef":
        """Parse the rendered ``chapter:section`` / ``section`` form."""

        cleaned = normalize_whitespace(raw)
        if ":" in cleaned:
            chapter, section = cleaned.split(":", 1)
            return cls(section=section, chapter=chapter)
        return cls(section=cleaned)


@dataclass(frozen=True, slots=True)
class StructuredCitation:
    """A fully parsed citation.

    ``raw`` keeps the original input for diagnostics and is excluded from
    equality so that a formatted-then-reparsed citation compares equal.
    """

    document_id: str
    section: str | None = None
    chapter: str | None = None
    pinpoint: str | None = None
    eu_article: str | None = None
    raw: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if self.chapter is not None and self.section is None:
            raise ValueError("A citation with a chapter must also carry a section")

    @property
    def provision_ref(self) -> ProvisionRef | None:
        if self.section is None:
            return None
        return ProvisionRef(section=self.section, chapter=self.chapter)


@dataclass(frozen=True, slots=True)
class InForceWindow:
    """Inclusive ISO-date window during which a document is in force."""

    valid_from: str | None = None
    valid_to: str | None = None

    def contains(self, as_of_date: str) -> bool:
        if self.valid_from and as_of_date < self.valid_from:
            return False
        if self.valid_to and as_of_date > self.valid_to:
            return False
        return True


@dataclass(frozen=True, slots=True)
class LookupResult:
    """Answer from a provision-lookup capability."""

    exists: bool
    in_force_window: InForceWindow | None = None
    sibling_refs: tuple[str, ...] = ()


@dataclass(slots=True)
class ValidationResult:
    citation: StructuredCitation
    matched: bool
    warnings: list[str] = field(default_factory=list)
    resolved_provision: str | None = None


@dataclass(slots=True)
class CurrencyStatus:
    document_id: str
    provision_ref: str | None
    found: bool
    in_force: bool | None
    as_of_date: str | None
    window: InForceWindow | None = None
    warnings: list[str] = field(default_factory=list)
