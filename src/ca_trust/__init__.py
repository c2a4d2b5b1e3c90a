"""
CA Trust

Lists X.509 root certificates and verifies them against independent
public trust sources (certificate transparency logs and the Mozilla
root program), reducing per-source verdicts to an overall verdict.
"""

__version__ = "1.0.0"

# Types and configuration
from .main import TrustConfig, VerificationStatus, aggregate_status

# Certificates
from .certificates import (
    CertificateInfo,
    CertificateParseError,
    load_certificates,
    split_pem_bundle,
    system_ca_path,
)
from .filters import CertificateFilter

# Verification
from .verification import (
    CertificateTransparencyChecker,
    Checker,
    RootListParseError,
    TrustedRootListChecker,
    get_default_checkers,
)
from .orchestrator import OrchestratorError, VerificationOrchestrator

__all__ = [
    # Types
    "TrustConfig",
    "VerificationStatus",
    "aggregate_status",
    # Certificates
    "CertificateInfo",
    "CertificateParseError",
    "CertificateFilter",
    "load_certificates",
    "split_pem_bundle",
    "system_ca_path",
    # Checkers
    "Checker",
    "CertificateTransparencyChecker",
    "TrustedRootListChecker",
    "RootListParseError",
    "get_default_checkers",
    # Orchestration
    "VerificationOrchestrator",
    "OrchestratorError",
    # Meta
    "__version__",
]
