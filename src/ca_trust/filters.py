"""
Certificate Filtering

Keyword, signature algorithm and expiry filters for the listing command.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from .certificates import CertificateInfo


@dataclass
class CertificateFilter:
    """Selects certificates for listing and verification"""
    keyword: Optional[str] = None
    signature: Optional[str] = None
    show_expired: bool = False

    def matches(self, cert: CertificateInfo, now: Optional[datetime] = None) -> bool:
        """Check if a certificate passes every configured filter"""
        if not self.show_expired and cert.is_expired(now):
            return False

        if self.keyword is not None and not self._matches_keyword(cert, self.keyword):
            return False

        if self.signature is not None and not self._matches_signature(cert, self.signature):
            return False

        return True

    def apply(
        self,
        certificates: Iterable[CertificateInfo],
        now: Optional[datetime] = None,
    ) -> List[CertificateInfo]:
        """Return the matching certificates, preserving order"""
        return [cert for cert in certificates if self.matches(cert, now)]

    @staticmethod
    def _matches_keyword(cert: CertificateInfo, keyword: str) -> bool:
        """Case-insensitive search over issuer, organization and domains"""
        keyword = keyword.lower()

        if keyword in cert.issuer.lower():
            return True
        if keyword in cert.organization.lower():
            return True
        return any(keyword in domain.lower() for domain in cert.domains)

    @staticmethod
    def _matches_signature(cert: CertificateInfo, signature: str) -> bool:
        if not cert.signature_algorithm:
            return False
        return signature.lower() in cert.signature_algorithm.lower()
