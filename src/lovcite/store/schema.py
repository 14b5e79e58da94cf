"""SQLite schema and pragmas for the provision store."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create statute, provision and reference tables if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS documents (
            id TEXT PRIMARY KEY,
            type TEXT NOT NULL CHECK(type IN ('statute','bill','sou','ds','case_law')),
            title TEXT NOT NULL,
            short_name TEXT,
            status TEXT NOT NULL CHECK(status IN ('in_force','amended','repealed','not_yet_in_force')),
            issued_date TEXT,
            in_force_date TEXT,
            end_date TEXT,
            url TEXT,
            description TEXT,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS provisions (
            id INTEGER PRIMARY KEY,
            document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            provision_ref TEXT NOT NULL,
            chapter TEXT,
            section TEXT NOT NULL,
            title TEXT,
            content TEXT NOT NULL,
            UNIQUE(document_id, provision_ref)
        );

        CREATE TABLE IF NOT EXISTS provision_versions (
            id INTEGER PRIMARY KEY,
            document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            provision_ref TEXT NOT NULL,
            chapter TEXT,
            section TEXT NOT NULL,
            title TEXT,
            content TEXT NOT NULL,
            valid_from TEXT,
            valid_to TEXT
        );

        CREATE TABLE IF NOT EXISTS definitions (
            id INTEGER PRIMARY KEY,
            document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            term TEXT NOT NULL,
            definition TEXT NOT NULL,
            source_provision TEXT,
            UNIQUE(document_id, term)
        );

        CREATE TABLE IF NOT EXISTS eu_documents (
            id TEXT PRIMARY KEY,
            eu_type TEXT NOT NULL CHECK(eu_type IN ('directive','regulation')),
            year INTEGER NOT NULL,
            number INTEGER NOT NULL,
            celex TEXT NOT NULL UNIQUE
        );

        CREATE TABLE IF NOT EXISTS eu_references (
            id INTEGER PRIMARY KEY,
            document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            provision_ref TEXT,
            eu_document_id TEXT NOT NULL REFERENCES eu_documents(id),
            eu_article TEXT,
            reference_type TEXT NOT NULL CHECK(
                reference_type IN ('implements','supplements','applies','complies_with','derogates_from')
            ),
            is_primary_implementation INTEGER NOT NULL DEFAULT 0 CHECK(is_primary_implementation IN (0,1)),
            context TEXT NOT NULL DEFAULT ''
        );

        CREATE TABLE IF NOT EXISTS cross_references (
            id INTEGER PRIMARY KEY,
            source_document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            source_provision_ref TEXT NOT NULL,
            target_document_id TEXT NOT NULL,
            target_provision_ref TEXT,
            target_pinpoint TEXT,
            raw TEXT NOT NULL DEFAULT ''
        );

        CREATE INDEX IF NOT EXISTS idx_provisions_section ON provisions(document_id, section);
        CREATE INDEX IF NOT EXISTS idx_provision_versions_ref ON provision_versions(document_id, provision_ref);
        CREATE UNIQUE INDEX IF NOT EXISTS idx_eu_references_unique ON eu_references(
            document_id, COALESCE(provision_ref, ''), eu_document_id, COALESCE(eu_article, '')
        );
        CREATE INDEX IF NOT EXISTS idx_eu_references_eu_document ON eu_references(eu_document_id);
        CREATE INDEX IF NOT EXISTS idx_cross_references_target ON cross_references(target_document_id);
        """
    )
