"""refcheck: cross-check citation lists against OpenAlex and Crossref."""

from refcheck.models import ProviderResult, VerificationRecord, VerificationStatus
from refcheck.services.similarity import is_match
from refcheck.services.verification import ReferenceVerifier, verify
from refcheck.utils import normalize_citation

__version__ = "0.1.0"

__all__ = [
    "ProviderResult",
    "ReferenceVerifier",
    "VerificationRecord",
    "VerificationStatus",
    "is_match",
    "normalize_citation",
    "verify",
]
