"""
Certificate Model

Parsed, read-only view of X.509 certificates and helpers for loading
them from PEM bundles.
"""

import logging
import re
import ssl
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa
from cryptography.x509.oid import NameOID

from .main import TrustConfig

logger = logging.getLogger(__name__)

PEM_CERTIFICATE_PATTERN = re.compile(
    r"-----BEGIN CERTIFICATE-----.*?-----END CERTIFICATE-----",
    re.DOTALL,
)


class CertificateParseError(ValueError):
    """PEM text could not be parsed as an X.509 certificate"""
    pass


@dataclass(frozen=True)
class CertificateInfo:
    """
    Immutable certificate summary.

    `fingerprint` (SHA-1 hex) keys verification results;
    `fingerprint_sha256` is what root lists publish.
    """
    organization: str
    issuer: str
    domain: str
    domains: Tuple[str, ...]
    valid_from: datetime
    valid_to: datetime
    signature_algorithm: str
    fingerprint: str
    fingerprint_sha256: str

    @classmethod
    def from_pem(cls, pem: str) -> "CertificateInfo":
        """Parse a single PEM certificate"""
        try:
            cert = x509.load_pem_x509_certificate(pem.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as e:
            raise CertificateParseError(f"Invalid certificate: {e}") from e

        # fields are decoded lazily, so unknown algorithms and malformed
        # extensions only surface here
        try:
            return cls.from_x509(cert)
        except (ValueError, UnsupportedAlgorithm) as e:
            raise CertificateParseError(f"Unsupported certificate: {e}") from e

    @classmethod
    def from_x509(cls, cert: x509.Certificate) -> "CertificateInfo":
        """Build from a cryptography certificate object"""
        domain = _name_attribute(cert.subject, NameOID.COMMON_NAME)

        domains: List[str] = [domain] if domain else []
        try:
            san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
            for name in san.get_values_for_type(x509.DNSName):
                if name not in domains:
                    domains.append(name)
        except x509.ExtensionNotFound:
            pass

        return cls(
            organization=_name_attribute(cert.issuer, NameOID.ORGANIZATION_NAME),
            issuer=_name_attribute(cert.issuer, NameOID.COMMON_NAME),
            domain=domain,
            domains=tuple(domains),
            valid_from=cert.not_valid_before_utc,
            valid_to=cert.not_valid_after_utc,
            signature_algorithm=_signature_algorithm(cert),
            fingerprint=cert.fingerprint(hashes.SHA1()).hex(),  # noqa: S303
            fingerprint_sha256=cert.fingerprint(hashes.SHA256()).hex(),
        )

    @property
    def display_name(self) -> str:
        """Name used in progress messages"""
        return self.domain or self.issuer or "Unknown certificate"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Check if the certificate is past its validity window"""
        now = now or datetime.now(timezone.utc)
        return self.valid_to < now


def _name_attribute(name: x509.Name, oid: x509.ObjectIdentifier) -> str:
    """First value of an attribute in a distinguished name, or empty string"""
    attributes = name.get_attributes_for_oid(oid)
    if not attributes:
        return ""
    value = attributes[0].value
    return value if isinstance(value, str) else value.decode("utf-8", "replace")


def _signature_algorithm(cert: x509.Certificate) -> str:
    """Short signature algorithm name, e.g. RSA-SHA256"""
    public_key = cert.public_key()
    if isinstance(public_key, rsa.RSAPublicKey):
        key_type = "RSA"
    elif isinstance(public_key, ec.EllipticCurvePublicKey):
        key_type = "ECDSA"
    elif isinstance(public_key, dsa.DSAPublicKey):
        key_type = "DSA"
    elif isinstance(public_key, ed25519.Ed25519PublicKey):
        return "ED25519"
    elif isinstance(public_key, ed448.Ed448PublicKey):
        return "ED448"
    else:
        return cert.signature_algorithm_oid.dotted_string

    hash_algorithm = cert.signature_hash_algorithm
    if hash_algorithm is None:
        return key_type
    return f"{key_type}-{hash_algorithm.name.upper().replace('-', '')}"


def split_pem_bundle(pem_contents: str) -> List[str]:
    """Split a PEM bundle into individual certificate blocks"""
    return PEM_CERTIFICATE_PATTERN.findall(pem_contents)


def load_certificates(pem_blocks: Iterable[str]) -> List[CertificateInfo]:
    """Parse PEM blocks, skipping any that cannot be parsed"""
    certificates = []
    for index, block in enumerate(pem_blocks):
        try:
            certificates.append(CertificateInfo.from_pem(block))
        except CertificateParseError as e:
            logger.debug(f"Skipping certificate #{index + 1}: {e}")
    return certificates


def system_ca_path(config: Optional[TrustConfig] = None) -> str:
    """
    Locate the certificate bundle to inspect.

    Uses the configured file first, then the interpreter's default
    OpenSSL verify paths. Returns an empty string when nothing is found.
    """
    if config and config.ca_file:
        return config.ca_file

    paths = ssl.get_default_verify_paths()
    return paths.cafile or paths.openssl_cafile or ""
