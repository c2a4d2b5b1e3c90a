"""
Shared fixtures for the CA Trust tests.

Certificates are generated on the fly with cryptography; HTTP traffic
goes through httpx.MockTransport so no test touches the network.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Sequence, Union

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from ca_trust.certificates import CertificateInfo
from ca_trust.main import VerificationStatus
from ca_trust.output.base import ProgressReporter
from ca_trust.verification.checkers import Checker


def build_certificate_pem(
    common_name: Optional[str] = "Test Root CA",
    organization: Optional[str] = "Test Org",
    san: Sequence[str] = (),
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
) -> str:
    """Self-signed ECDSA certificate as PEM text"""
    key = ec.generate_private_key(ec.SECP256R1())

    attributes = []
    if common_name:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    if organization:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    name = x509.Name(attributes)

    now = datetime.now(timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - timedelta(days=1))
        .not_valid_after(not_after or now + timedelta(days=3650))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
    )
    if san:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(d) for d in san]),
            critical=False,
        )

    cert = builder.sign(key, hashes.SHA256())
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


class RecordingProgress(ProgressReporter):
    """Keeps every progress update in order"""

    def __init__(self):
        self.messages: List[str] = []
        self.clears = 0

    def overwrite(self, message: str) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.clears += 1


class StubChecker(Checker):
    """Checker returning scripted verdicts and recording what it saw"""

    def __init__(
        self,
        name: str,
        statuses: Union[VerificationStatus, Iterable[VerificationStatus]] = VerificationStatus.PASSED,
        error: Optional[Exception] = None,
    ):
        self._name = name
        if isinstance(statuses, VerificationStatus):
            self._fixed: Optional[VerificationStatus] = statuses
            self._queue: List[VerificationStatus] = []
        else:
            self._fixed = None
            self._queue = list(statuses)
        self._error = error
        self.seen: List[str] = []

    @property
    def name(self) -> str:
        return self._name

    async def verify(self, certificate: CertificateInfo) -> VerificationStatus:
        self.seen.append(certificate.fingerprint)
        if self._error is not None:
            raise self._error
        if self._fixed is not None:
            return self._fixed
        return self._queue.pop(0)


@pytest.fixture
def make_pem() -> Callable[..., str]:
    """Factory for PEM certificates"""
    return build_certificate_pem


@pytest.fixture
def make_cert() -> Callable[..., CertificateInfo]:
    """Factory for parsed certificates"""
    def _make(**kwargs) -> CertificateInfo:
        return CertificateInfo.from_pem(build_certificate_pem(**kwargs))
    return _make


@pytest.fixture
def cert(make_cert) -> CertificateInfo:
    return make_cert(common_name="Example Root CA", organization="Example Trust")


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def stub_checker() -> Callable[..., StubChecker]:
    return StubChecker


@pytest.fixture
def mock_client() -> Callable[[Callable], httpx.AsyncClient]:
    """Factory for httpx clients backed by a request handler"""
    def _make(handler: Callable) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _make
