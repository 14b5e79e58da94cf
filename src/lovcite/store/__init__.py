"""SQLite provision store."""

from .repository import DocumentRow, ImplementationRow, ProvisionRepository, ProvisionRow

__all__ = ["DocumentRow", "ImplementationRow", "ProvisionRepository", "ProvisionRow"]
