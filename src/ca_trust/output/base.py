"""
Base Output Interfaces

Progress reporting and certificate result formatting.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..certificates import CertificateInfo
from ..main import VerificationStatus

CertificateResults = Dict[str, VerificationStatus]
BatchResults = Dict[str, CertificateResults]


class OutputLevel(Enum):
    """Output verbosity levels"""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class ProgressReporter(ABC):
    """Sink for overwritable, single-line status updates"""

    @abstractmethod
    def overwrite(self, message: str) -> None:
        """Replace the current status line with message"""
        pass

    def clear(self) -> None:
        """Remove the status line before other output is written"""
        pass


class NullProgress(ProgressReporter):
    """Discards progress updates"""

    def overwrite(self, message: str) -> None:
        pass


class BaseFormatter(ABC):
    """Base class for certificate table formatters"""

    HEADERS = [
        "#",
        "Organization",
        "Issuer",
        "Domain",
        "Fingerprint",
        "Valid From",
        "Valid To",
        "Signature Algorithm",
    ]

    def __init__(self, checker_names: Sequence[str], level: OutputLevel = OutputLevel.NORMAL):
        self.checker_names = list(checker_names)
        self.level = level

    @property
    def verbose(self) -> bool:
        """Verbose levels add the SHA-256 fingerprint column"""
        return self.level in (OutputLevel.VERBOSE, OutputLevel.DEBUG)

    def certificate_headers(self) -> List[str]:
        """Headers of the certificate columns"""
        headers = list(self.HEADERS)
        if self.verbose:
            headers.insert(headers.index("Fingerprint") + 1, "SHA-256 Fingerprint")
        return headers

    def headers(self, include_verification: bool = True) -> List[str]:
        """Column headers, with one column per checker plus the overall verdict"""
        headers = self.certificate_headers()
        if include_verification:
            headers.extend(f"{name} Verification" for name in self.checker_names)
            headers.append("Overall")
        return headers

    @abstractmethod
    def start(self, certificates: Sequence[CertificateInfo]) -> None:
        """Begin an incrementally rendered table"""
        pass

    @abstractmethod
    def append_row(
        self,
        index: int,
        certificate: CertificateInfo,
        results: CertificateResults,
        overall: VerificationStatus,
    ) -> None:
        """Append one verified certificate to the table started by start()"""
        pass

    @abstractmethod
    def render(
        self,
        certificates: Sequence[CertificateInfo],
        results: Optional[BatchResults] = None,
    ) -> None:
        """Render a complete table in one pass"""
        pass
