"""
Trust Checkers

Checkers decide whether a single trust source considers a certificate
legitimate. Every checker is total: network, parse and input failures
all resolve to UNCERTAIN instead of raising.

Checkers are composed into an ordered list handed to the
VerificationOrchestrator.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, FrozenSet, List, Optional

import httpx

from ..certificates import CertificateInfo
from ..main import (
    DEFAULT_CRTSH_ENDPOINT,
    DEFAULT_ROOT_LIST_URL,
    TrustConfig,
    VerificationStatus,
)
from .root_list import normalize_fingerprint, parse_root_fingerprints

logger = logging.getLogger(__name__)


class Checker(ABC):
    """Interface for trust sources"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable identifier, unique within one orchestrator run"""
        pass

    @abstractmethod
    async def verify(self, certificate: CertificateInfo) -> VerificationStatus:
        """
        Decide whether this source trusts the certificate.

        Must never raise; failures resolve to UNCERTAIN.
        """
        pass


@asynccontextmanager
async def _http_session(
    client: Optional[httpx.AsyncClient],
    factory: Callable[[], httpx.AsyncClient],
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a fresh one closed on exit"""
    if client is not None:
        yield client
        return
    async with factory() as created:
        yield created


class CertificateTransparencyChecker(Checker):
    """
    Certificate transparency log checker.

    Searches crt.sh for the certificate fingerprint; an indexed
    certificate counts as trusted.
    """

    FOUND_MARKER = "crt.sh ID"

    def __init__(
        self,
        endpoint: str = DEFAULT_CRTSH_ENDPOINT,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "crt.sh"

    def _create_client(self) -> httpx.AsyncClient:
        """Create the HTTP client; override to substitute transports"""
        return httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)

    async def verify(self, certificate: CertificateInfo) -> VerificationStatus:
        fingerprint = certificate.fingerprint
        if not fingerprint:
            logger.info(
                f"Certificate fingerprint is empty "
                f"domain={certificate.domain!r} issuer={certificate.issuer!r}"
            )
            return VerificationStatus.UNCERTAIN

        start_time = time.time()
        logger.info(f"crt.sh request started method=GET url={self.endpoint} q={fingerprint}")

        try:
            async with _http_session(self._client, self._create_client) as client:
                response = await client.get(self.endpoint, params={"q": fingerprint})

            response_time = time.time() - start_time
            logger.info(
                f"crt.sh response received status_code={response.status_code} "
                f"response_time={response_time:.3f}s fingerprint={fingerprint}"
            )

            if response.status_code != 200:
                logger.warning(
                    f"crt.sh returned non-200 status_code={response.status_code} "
                    f"fingerprint={fingerprint}"
                )
                return VerificationStatus.UNCERTAIN

            body = response.text
            found = self.FOUND_MARKER in body
            status = VerificationStatus.PASSED if found else VerificationStatus.FAILED

            logger.info(
                f"crt.sh verification completed fingerprint={fingerprint} "
                f"status={status.value} found={found} response_size={len(body)}"
            )
            return status

        except httpx.HTTPError as e:
            logger.error(
                f"crt.sh request failed fingerprint={fingerprint} "
                f"error={e!r} response_time={time.time() - start_time:.3f}s"
            )
            return VerificationStatus.UNCERTAIN
        except Exception:
            logger.exception(f"Unexpected error during crt.sh verification fingerprint={fingerprint}")
            return VerificationStatus.UNCERTAIN


class TrustedRootListChecker(Checker):
    """
    Trusted root list checker.

    Downloads the Mozilla root certificate report once per instance and
    checks SHA-256 fingerprints against it. A failed download is not
    remembered: the next verification tries again.
    """

    def __init__(
        self,
        url: str = DEFAULT_ROOT_LIST_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client
        self._root_fingerprints: Optional[FrozenSet[str]] = None
        self._load_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "Mozilla"

    @property
    def root_fingerprints(self) -> Optional[FrozenSet[str]]:
        """Cached fingerprints, or None until a load succeeds"""
        return self._root_fingerprints

    def _create_client(self) -> httpx.AsyncClient:
        """Create the HTTP client; override to substitute transports"""
        return httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)

    async def verify(self, certificate: CertificateInfo) -> VerificationStatus:
        try:
            if not certificate.fingerprint_sha256:
                logger.info(
                    f"Certificate SHA-256 fingerprint is empty "
                    f"domain={certificate.domain!r} issuer={certificate.issuer!r}"
                )
                return VerificationStatus.UNCERTAIN

            fingerprint = normalize_fingerprint(certificate.fingerprint_sha256)
            logger.info(f"Mozilla verification started fingerprint={fingerprint}")

            if not await self._ensure_loaded():
                logger.warning("Mozilla root fingerprints unavailable")
                return VerificationStatus.UNCERTAIN

            roots = self._root_fingerprints or frozenset()
            found = fingerprint in roots
            status = VerificationStatus.PASSED if found else VerificationStatus.FAILED

            logger.info(
                f"Mozilla verification completed fingerprint={fingerprint} "
                f"status={status.value} found={found} total_root_certs={len(roots)}"
            )
            return status

        except Exception:
            logger.exception("Unexpected error during Mozilla verification")
            return VerificationStatus.UNCERTAIN

    async def _ensure_loaded(self) -> bool:
        """Populate the cache at most once, even under concurrent first use"""
        if self._root_fingerprints is not None:
            return True

        async with self._load_lock:
            if self._root_fingerprints is not None:
                return True
            return await self._load_root_fingerprints()

    async def _load_root_fingerprints(self) -> bool:
        """Fetch and parse the root list; False on any failure"""
        start_time = time.time()
        logger.info(f"Mozilla root list request started method=GET url={self.url}")

        try:
            async with _http_session(self._client, self._create_client) as client:
                response = await client.get(self.url)

            response_time = time.time() - start_time
            logger.info(
                f"Mozilla root list response received status_code={response.status_code} "
                f"response_time={response_time:.3f}s"
            )

            if response.status_code != 200:
                logger.error(f"Mozilla root list returned non-200 status_code={response.status_code}")
                return False

            content = response.text
            self._root_fingerprints = parse_root_fingerprints(content)

            logger.info(
                f"Mozilla root fingerprints loaded count={len(self._root_fingerprints)} "
                f"content_size={len(content)} response_time={response_time:.3f}s"
            )
            return True

        except httpx.HTTPError as e:
            logger.error(
                f"Mozilla root list request failed error={e!r} "
                f"response_time={time.time() - start_time:.3f}s"
            )
            return False
        except ValueError as e:
            logger.error(f"Mozilla root list could not be parsed: {e}")
            return False
        except Exception:
            logger.exception("Unexpected error loading Mozilla root fingerprints")
            return False


CHECKER_FACTORIES: Dict[str, Callable[[TrustConfig], Checker]] = {
    "crt.sh": lambda config: CertificateTransparencyChecker(
        endpoint=config.crtsh_endpoint,
        timeout=config.request_timeout,
    ),
    "Mozilla": lambda config: TrustedRootListChecker(
        url=config.root_list_url,
        timeout=config.request_timeout,
    ),
}


def get_default_checkers(config: Optional[TrustConfig] = None) -> List[Checker]:
    """Build the configured checkers in run order"""
    config = config or TrustConfig()
    checkers = []
    for name in config.checkers:
        factory = CHECKER_FACTORIES.get(name)
        if factory is None:
            raise ValueError(
                f"Unknown checker: {name} (available: {', '.join(CHECKER_FACTORIES)})"
            )
        checkers.append(factory(config))
    return checkers
