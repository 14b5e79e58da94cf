"""SQLite-backed provision store; also the validator's lookup capability."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
from pathlib import Path
import sqlite3

from lovcite.citation.models import InForceWindow, LookupResult, ProvisionRef
from lovcite.extraction.definitions import Definition
from lovcite.extraction.eu_references import EUDocumentRef, EUReference, EUReferenceType
from lovcite.ingestion.normalization import normalize_term
from lovcite.ingestion.seed import StatuteSeed
from lovcite.store.schema import apply_runtime_pragmas, ensure_schema

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DocumentRow:
    id: str
    type: str
    title: str
    status: str
    short_name: str | None
    issued_date: str | None
    in_force_date: str | None
    end_date: str | None
    url: str | None

    @property
    def in_force_window(self) -> InForceWindow | None:
        valid_from = self.in_force_date or self.issued_date
        if valid_from is None and self.end_date is None:
            return None
        return InForceWindow(valid_from=valid_from, valid_to=self.end_date)


@dataclass(slots=True)
class ProvisionRow:
    document_id: str
    provision_ref: str
    chapter: str | None
    section: str
    title: str | None
    content: str
    valid_from: str | None = None
    valid_to: str | None = None


@dataclass(slots=True)
class ImplementationRow:
    """A Danish statute referring to one EU act."""

    document_id: str
    title: str
    status: str
    is_primary_implementation: bool
    reference_types: tuple[str, ...]


class ProvisionRepository:
    """Thin transactional layer over the SQLite provision schema."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "ProvisionRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def replace_statute(self, seed: StatuteSeed) -> int:
        """Replace one statute and everything extracted from it in one transaction.

        Returns the number of provisions stored.
        """

        with self._connection:
            self._connection.execute(
                """
                INSERT INTO documents(
                    id, type, title, short_name, status, issued_date, in_force_date, end_date, url, description
                )
                VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    type=excluded.type,
                    title=excluded.title,
                    short_name=excluded.short_name,
                    status=excluded.status,
                    issued_date=excluded.issued_date,
                    in_force_date=excluded.in_force_date,
                    end_date=excluded.end_date,
                    url=excluded.url,
                    description=excluded.description,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (
                    seed.id,
                    seed.type,
                    seed.title,
                    seed.short_name,
                    seed.status,
                    seed.issued_date,
                    seed.in_force_date,
                    seed.end_date,
                    seed.url,
                    seed.description,
                ),
            )

            for table, column in (
                ("provisions", "document_id"),
                ("provision_versions", "document_id"),
                ("definitions", "document_id"),
                ("eu_references", "document_id"),
                ("cross_references", "source_document_id"),
            ):
                self._connection.execute(f"DELETE FROM {table} WHERE {column} = ?", (seed.id,))

            self._connection.executemany(
                """
                INSERT INTO provisions(document_id, provision_ref, chapter, section, title, content)
                VALUES(?, ?, ?, ?, ?, ?)
                """,
                [
                    (seed.id, item.provision_ref, item.chapter, item.section, item.title, item.content)
                    for item in seed.provisions
                ],
            )
            self._connection.executemany(
                """
                INSERT INTO provision_versions(
                    document_id, provision_ref, chapter, section, title, content, valid_from, valid_to
                )
                VALUES(?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        seed.id,
                        item.provision_ref,
                        item.chapter,
                        item.section,
                        item.title,
                        item.content,
                        item.valid_from,
                        item.valid_to,
                    )
                    for item in seed.provision_versions
                ],
            )
            self._connection.executemany(
                """
                INSERT INTO definitions(document_id, term, definition, source_provision)
                VALUES(?, ?, ?, ?)
                ON CONFLICT(document_id, term) DO NOTHING
                """,
                [(seed.id, item.term, item.definition, item.source_provision) for item in seed.definitions],
            )
            self._connection.executemany(
                """
                INSERT INTO cross_references(
                    source_document_id, source_provision_ref, target_document_id,
                    target_provision_ref, target_pinpoint, raw
                )
                VALUES(?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        seed.id,
                        item.source_provision_ref,
                        item.target_document_id,
                        item.target_provision_ref,
                        item.target_pinpoint,
                        item.raw,
                    )
                    for item in seed.cross_references
                ],
            )
            self._store_eu_references(seed.id, seed.eu_references)

        LOGGER.info("Stored %s with %d provisions", seed.id, len(seed.provisions))
        return len(seed.provisions)

    def _store_eu_references(self, document_id: str, references: Iterable[EUReference]) -> None:
        for reference in references:
            eu_document = EUDocumentRef.parse(reference.eu_document_id)
            self._connection.execute(
                """
                INSERT INTO eu_documents(id, eu_type, year, number, celex)
                VALUES(?, ?, ?, ?, ?)
                ON CONFLICT(id) DO NOTHING
                """,
                (eu_document.document_id, eu_document.eu_type, eu_document.year, eu_document.number, eu_document.celex),
            )
            self._connection.execute(
                """
                INSERT INTO eu_references(
                    document_id, provision_ref, eu_document_id, eu_article,
                    reference_type, is_primary_implementation, context
                )
                VALUES(?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    document_id,
                    reference.provision_ref,
                    eu_document.document_id,
                    reference.eu_article,
                    reference.reference_type.value,
                    int(reference.is_primary_implementation),
                    reference.context,
                ),
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_document(self, document_id: str) -> DocumentRow | None:
        row = self._connection.execute(
            """
            SELECT id, type, title, status, short_name, issued_date, in_force_date, end_date, url
            FROM documents
            WHERE id = ?
            """,
            (document_id,),
        ).fetchone()
        if row is None:
            return None
        return DocumentRow(
            id=row["id"],
            type=row["type"],
            title=row["title"],
            status=row["status"],
            short_name=row["short_name"],
            issued_date=row["issued_date"],
            in_force_date=row["in_force_date"],
            end_date=row["end_date"],
            url=row["url"],
        )

    def list_provision_refs(self, document_id: str) -> list[str]:
        rows = self._connection.execute(
            "SELECT provision_ref FROM provisions WHERE document_id = ? ORDER BY id ASC",
            (document_id,),
        ).fetchall()
        return [row["provision_ref"] for row in rows]

    def _resolve_ref(self, document_id: str, provision_ref: str) -> str | None:
        """Stored ref for *provision_ref*; a chapter-less ref matches by section."""

        ref = ProvisionRef.parse(provision_ref)
        row = self._connection.execute(
            "SELECT provision_ref FROM provisions WHERE document_id = ? AND provision_ref = ?",
            (document_id, str(ref)),
        ).fetchone()
        if row is None and ref.chapter is None:
            row = self._connection.execute(
                "SELECT provision_ref FROM provisions WHERE document_id = ? AND section = ? ORDER BY id ASC LIMIT 1",
                (document_id, ref.section),
            ).fetchone()
        return row["provision_ref"] if row is not None else None

    def lookup(
        self,
        document_id: str,
        provision_ref: str | None = None,
        as_of_date: str | None = None,
    ) -> LookupResult:
        document = self.get_document(document_id)
        if document is None:
            return LookupResult(exists=False)

        siblings = tuple(self.list_provision_refs(document_id))
        window = document.in_force_window
        if not provision_ref:
            return LookupResult(exists=True, in_force_window=window, sibling_refs=siblings)

        resolved = self._resolve_ref(document_id, provision_ref)
        return LookupResult(exists=resolved is not None, in_force_window=window, sibling_refs=siblings)

    def get_provision(
        self,
        document_id: str,
        provision_ref: str,
        as_of_date: str | None = None,
    ) -> ProvisionRow | None:
        """Current provision text, or the version valid on *as_of_date*."""

        resolved = self._resolve_ref(document_id, provision_ref)
        if resolved is None:
            return None

        if as_of_date is None:
            row = self._connection.execute(
                """
                SELECT document_id, provision_ref, chapter, section, title, content
                FROM provisions
                WHERE document_id = ? AND provision_ref = ?
                """,
                (document_id, resolved),
            ).fetchone()
            return ProvisionRow(
                document_id=row["document_id"],
                provision_ref=row["provision_ref"],
                chapter=row["chapter"],
                section=row["section"],
                title=row["title"],
                content=row["content"],
            )

        row = self._connection.execute(
            """
            SELECT document_id, provision_ref, chapter, section, title, content, valid_from, valid_to
            FROM provision_versions
            WHERE document_id = ?
              AND provision_ref = ?
              AND (valid_from IS NULL OR valid_from <= ?)
              AND (valid_to IS NULL OR valid_to >= ?)
            ORDER BY valid_from DESC
            LIMIT 1
            """,
            (document_id, resolved, as_of_date, as_of_date),
        ).fetchone()
        if row is None:
            return None
        return ProvisionRow(
            document_id=row["document_id"],
            provision_ref=row["provision_ref"],
            chapter=row["chapter"],
            section=row["section"],
            title=row["title"],
            content=row["content"],
            valid_from=row["valid_from"],
            valid_to=row["valid_to"],
        )

    def list_definitions(self, document_id: str, term: str | None = None) -> list[Definition]:
        if term:
            rows = self._connection.execute(
                """
                SELECT term, definition, source_provision
                FROM definitions
                WHERE document_id = ? AND term LIKE ?
                ORDER BY id ASC
                """,
                (document_id, f"%{normalize_term(term)}%"),
            ).fetchall()
        else:
            rows = self._connection.execute(
                "SELECT term, definition, source_provision FROM definitions WHERE document_id = ? ORDER BY id ASC",
                (document_id,),
            ).fetchall()
        return [
            Definition(term=row["term"], definition=row["definition"], source_provision=row["source_provision"])
            for row in rows
        ]

    def _eu_reference_rows(self, where: str, params: tuple[object, ...]) -> list[EUReference]:
        rows = self._connection.execute(
            f"""
            SELECT document_id, provision_ref, eu_document_id, eu_article,
                   reference_type, is_primary_implementation, context
            FROM eu_references
            WHERE {where}
            ORDER BY id ASC
            """,
            params,
        ).fetchall()
        return [
            EUReference(
                document_id=row["document_id"],
                provision_ref=row["provision_ref"],
                eu_document_id=row["eu_document_id"],
                eu_article=row["eu_article"],
                reference_type=EUReferenceType(row["reference_type"]),
                is_primary_implementation=bool(row["is_primary_implementation"]),
                context=row["context"],
            )
            for row in rows
        ]

    def get_eu_basis(
        self,
        document_id: str,
        reference_types: Iterable[EUReferenceType | str] | None = None,
    ) -> list[EUReference]:
        """EU acts a statute refers to, optionally limited to some reference types."""

        if reference_types is None:
            return self._eu_reference_rows("document_id = ?", (document_id,))

        values = [EUReferenceType(value).value for value in reference_types]
        if not values:
            return []
        placeholders = ", ".join("?" for _ in values)
        return self._eu_reference_rows(
            f"document_id = ? AND reference_type IN ({placeholders})",
            (document_id, *values),
        )

    def get_provision_eu_basis(self, document_id: str, provision_ref: str) -> list[EUReference]:
        resolved = self._resolve_ref(document_id, provision_ref)
        if resolved is None:
            return []
        return self._eu_reference_rows("document_id = ? AND provision_ref = ?", (document_id, resolved))

    def get_danish_implementations(
        self,
        eu_document_id: str,
        *,
        primary_only: bool = False,
        in_force_only: bool = False,
    ) -> list[ImplementationRow]:
        """Danish statutes referring to one EU act (``type:YYYY/N`` or CELEX)."""

        eu_document = EUDocumentRef.parse(eu_document_id)
        rows = self._connection.execute(
            """
            SELECT d.id AS document_id,
                   d.title AS title,
                   d.status AS status,
                   MAX(r.is_primary_implementation) AS is_primary,
                   GROUP_CONCAT(DISTINCT r.reference_type) AS reference_types
            FROM eu_references r
            JOIN documents d ON d.id = r.document_id
            WHERE r.eu_document_id = ?
            GROUP BY d.id
            ORDER BY is_primary DESC, d.id ASC
            """,
            (eu_document.document_id,),
        ).fetchall()

        implementations: list[ImplementationRow] = []
        for row in rows:
            is_primary = bool(row["is_primary"])
            if primary_only and not is_primary:
                continue
            if in_force_only and row["status"] != "in_force":
                continue
            implementations.append(
                ImplementationRow(
                    document_id=row["document_id"],
                    title=row["title"],
                    status=row["status"],
                    is_primary_implementation=is_primary,
                    reference_types=tuple(sorted((row["reference_types"] or "").split(","))),
                )
            )
        return implementations
