"""
Verification System

Trust checkers and root list parsing used by the VerificationOrchestrator.
"""

from .checkers import (
    CertificateTransparencyChecker,
    Checker,
    TrustedRootListChecker,
    get_default_checkers,
)
from .root_list import (
    RootListParseError,
    normalize_fingerprint,
    parse_root_fingerprints,
)

__all__ = [
    # Checkers
    "Checker",
    "CertificateTransparencyChecker",
    "TrustedRootListChecker",
    "get_default_checkers",
    # Root list
    "RootListParseError",
    "normalize_fingerprint",
    "parse_root_fingerprints",
]
