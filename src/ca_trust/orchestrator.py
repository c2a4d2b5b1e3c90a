"""
Verification Orchestrator - Core Orchestration Logic

Runs every configured checker against every certificate in a batch,
reduces the per-checker verdicts to an overall verdict and reports
progress while doing so.

Certificates and checkers run strictly in order, so progress messages
are ordered and results are deterministic for deterministic checkers.
"""

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from .certificates import CertificateInfo
from .main import VerificationStatus, aggregate_status
from .output.base import BaseFormatter, BatchResults, CertificateResults, ProgressReporter
from .verification.checkers import Checker

logger = logging.getLogger(__name__)


class OrchestratorError(Exception):
    """Base exception for orchestrator errors"""
    pass


class VerificationOrchestrator:
    """
    Batch verification across a fixed, ordered set of checkers.

    Per certificate: Pending -> Verifying(checker i of N) -> Aggregated
    -> Reported. A certificate is Reported once its result entry exists
    and its final progress update has been issued.

    Events (register with on()):
        certificate.started, checker.started, checker.finished,
        certificate.verified, batch.completed
    """

    def __init__(self, checkers: Sequence[Checker]):
        if not checkers:
            raise OrchestratorError("At least one checker is required")

        names = [checker.name for checker in checkers]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise OrchestratorError(f"Duplicate checker names: {', '.join(duplicates)}")

        self._checkers: List[Checker] = list(checkers)
        self._event_handlers: Dict[str, List[Callable]] = {}
        self._results: BatchResults = {}

        logger.info(f"Verification orchestrator initialized with checkers: {', '.join(names)}")

    @property
    def checkers(self) -> List[Checker]:
        return list(self._checkers)

    @property
    def checker_names(self) -> List[str]:
        return [checker.name for checker in self._checkers]

    # =========================================================================
    # Batch Verification
    # =========================================================================

    async def verify_batch(
        self,
        certificates: Sequence[CertificateInfo],
        progress: ProgressReporter,
        table: Optional[BaseFormatter] = None,
    ) -> BatchResults:
        """
        Verify every certificate with every checker.

        Args:
            certificates: Certificates in report order
            progress: Sink for overwritable status updates
            table: Optional formatter receiving one row per certificate

        Returns:
            Mapping of certificate fingerprint to {checker name: status}
        """
        results: BatchResults = {}
        total = len(certificates)

        if table is not None:
            progress.clear()
            table.start(certificates)

        for index, cert in enumerate(certificates):
            await self._emit_event("certificate.started", cert, index=index, total=total)

            if cert.fingerprint in results:
                # same certificate listed twice; cells are written once per run
                cert_results = results[cert.fingerprint]
            else:
                cert_results = await self._verify_certificate(cert, index, total, progress)
                results[cert.fingerprint] = cert_results

            overall = aggregate_status(cert_results.values())
            logger.info(
                f"Certificate verified fingerprint={cert.fingerprint} "
                f"overall={overall.value}"
            )

            if table is not None:
                progress.clear()
                table.append_row(index, cert, cert_results, overall)

            await self._emit_event(
                "certificate.verified",
                cert,
                index=index,
                total=total,
                results=cert_results,
                overall=overall,
            )

            progress.overwrite(f"Finished [{index + 1}/{total}] {cert.display_name}")

        progress.overwrite("Verification complete!")
        await self._emit_event("batch.completed", None, results=results)

        self._results = results
        return results

    async def _verify_certificate(
        self,
        cert: CertificateInfo,
        index: int,
        total: int,
        progress: ProgressReporter,
    ) -> CertificateResults:
        """Run each checker in configured order"""
        cert_results: CertificateResults = {}
        position = f"[{index + 1}/{total}] {cert.display_name}"

        for checker in self._checkers:
            name = checker.name

            progress.overwrite(f"Verifying {position} - using {name} checker")
            await self._emit_event("checker.started", cert, checker=name)

            status = await self._run_checker(checker, cert)
            cert_results[name] = status

            progress.overwrite(f"Verifying {position} - {name}: {status.label}")
            await self._emit_event("checker.finished", cert, checker=name, status=status)

        return cert_results

    async def _run_checker(self, checker: Checker, cert: CertificateInfo) -> VerificationStatus:
        """Invoke a checker; anything it raises counts as UNCERTAIN"""
        try:
            status = await checker.verify(cert)
        except Exception:
            logger.exception(f"Checker {checker.name} raised for {cert.fingerprint}")
            return VerificationStatus.UNCERTAIN

        if not isinstance(status, VerificationStatus):
            logger.error(f"Checker {checker.name} returned {status!r}, treating as uncertain")
            return VerificationStatus.UNCERTAIN
        return status

    # =========================================================================
    # Results
    # =========================================================================

    def get_results(self) -> BatchResults:
        """Results of the most recent run"""
        return {fp: dict(statuses) for fp, statuses in self._results.items()}

    def overall_status(self, fingerprint: str) -> Optional[VerificationStatus]:
        """Overall verdict for a certificate from the most recent run"""
        cert_results = self._results.get(fingerprint)
        if cert_results is None:
            return None
        return aggregate_status(cert_results.values())

    # =========================================================================
    # Event System
    # =========================================================================

    def on(self, event: str, handler: Callable) -> None:
        """Register event handler"""
        if event not in self._event_handlers:
            self._event_handlers[event] = []
        self._event_handlers[event].append(handler)

    async def _emit_event(
        self,
        event: str,
        certificate: Optional[CertificateInfo],
        **kwargs: Any,
    ) -> None:
        """Emit an event to registered handlers"""
        handlers = self._event_handlers.get(event, [])
        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(event, certificate, **kwargs)
                else:
                    handler(event, certificate, **kwargs)
            except Exception as e:
                logger.error(f"Event handler error ({event}): {e}")
