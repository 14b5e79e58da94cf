"""Citation parsing, formatting and validation."""

from .formatter import CITATION_STYLES, format_citation
from .models import (
    CurrencyStatus,
    InForceWindow,
    LookupResult,
    ProvisionRef,
    StructuredCitation,
    ValidationResult,
)
from .parser import ParseError, parse_citation
from .validator import ProvisionLookup, check_currency, validate_citation

__all__ = [
    "CITATION_STYLES",
    "CurrencyStatus",
    "InForceWindow",
    "LookupResult",
    "ParseError",
    "ProvisionLookup",
    "ProvisionRef",
    "StructuredCitation",
    "ValidationResult",
    "check_currency",
    "format_citation",
    "parse_citation",
    "validate_citation",
]
