"""Service abstractions for the refcheck application."""

from .providers import (
    CrossrefProvider,
    MetadataProvider,
    OpenAlexProvider,
    PROVIDERS,
    build_providers,
)
from .similarity import is_match, keyword_coverage
from .verification import ReferenceVerifier, aggregate_status, verify

__all__ = [
    "CrossrefProvider",
    "MetadataProvider",
    "OpenAlexProvider",
    "PROVIDERS",
    "build_providers",
    "is_match",
    "keyword_coverage",
    "ReferenceVerifier",
    "aggregate_status",
    "verify",
]
