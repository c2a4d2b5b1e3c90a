"""
Configuration and Types for CA Trust

Verdict values, the aggregation rule and runtime configuration.
"""

import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


DEFAULT_CRTSH_ENDPOINT = "https://crt.sh/"
DEFAULT_ROOT_LIST_URL = (
    "https://ccadb-public.secure.force.com/mozilla/IncludedCACertificateReportPEMCSV"
)
DEFAULT_CHECKERS = ["crt.sh", "Mozilla"]


class VerificationStatus(Enum):
    """Verdict returned by a checker"""
    PASSED = "passed"
    FAILED = "failed"
    UNCERTAIN = "uncertain"

    @property
    def label(self) -> str:
        """Display label"""
        return self.value.capitalize()

    @property
    def rank(self) -> int:
        """Position in the aggregation order: passed > uncertain > failed"""
        return _STATUS_RANK[self]


_STATUS_RANK = {
    VerificationStatus.FAILED: 0,
    VerificationStatus.UNCERTAIN: 1,
    VerificationStatus.PASSED: 2,
}


def aggregate_status(statuses: Iterable[VerificationStatus]) -> VerificationStatus:
    """
    Reduce per-checker verdicts into the overall verdict.

    Any PASSED wins; otherwise any UNCERTAIN; otherwise FAILED.
    An empty input yields FAILED.
    """
    overall = VerificationStatus.FAILED
    for status in statuses:
        if status is VerificationStatus.PASSED:
            return status
        if status.rank > overall.rank:
            overall = status
    return overall


@dataclass
class TrustConfig:
    """
    Configuration for certificate trust verification.

    Controls remote endpoints, timeouts and which checkers run.
    """
    # Remote sources
    crtsh_endpoint: str = DEFAULT_CRTSH_ENDPOINT
    root_list_url: str = DEFAULT_ROOT_LIST_URL

    # Network
    request_timeout_ms: int = 10000  # 10 seconds

    # Certificate bundle (system bundle when unset)
    ca_file: Optional[str] = None

    # Checkers, in run order
    checkers: List[str] = field(default_factory=lambda: list(DEFAULT_CHECKERS))

    @property
    def request_timeout(self) -> float:
        """Request timeout in seconds"""
        return self.request_timeout_ms / 1000

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return asdict(self)

    @classmethod
    def from_yaml(cls, path: str) -> "TrustConfig":
        """Load config from YAML file"""
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env(cls) -> "TrustConfig":
        """Load config from environment variables"""
        checkers = os.getenv("CA_TRUST_CHECKERS")
        return cls(
            crtsh_endpoint=os.getenv("CA_TRUST_CRTSH_URL", DEFAULT_CRTSH_ENDPOINT),
            root_list_url=os.getenv("CA_TRUST_ROOT_LIST_URL", DEFAULT_ROOT_LIST_URL),
            request_timeout_ms=int(os.getenv("CA_TRUST_TIMEOUT_MS", "10000")),
            ca_file=os.getenv("CA_TRUST_CA_FILE") or None,
            checkers=(
                [name.strip() for name in checkers.split(",") if name.strip()]
                if checkers
                else list(DEFAULT_CHECKERS)
            ),
        )
