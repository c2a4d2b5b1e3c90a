"""
Console Output

Terminal progress line and certificate tables with colored verdicts.
"""

import sys
from typing import Dict, List, Optional, Sequence, TextIO

from .base import (
    BaseFormatter,
    BatchResults,
    CertificateResults,
    OutputLevel,
    ProgressReporter,
)
from ..certificates import CertificateInfo
from ..main import VerificationStatus, aggregate_status

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "red": "\033[31m",
}

STATUS_COLORS = {
    VerificationStatus.PASSED: "green",
    VerificationStatus.FAILED: "red",
    VerificationStatus.UNCERTAIN: "yellow",
}

ERASE_LINE = "\r\033[K"


def colorize(color: str, text: str, enabled: bool = True) -> str:
    """Apply color to text"""
    if enabled:
        return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"
    return text


def format_status(status: VerificationStatus, use_colors: bool = True) -> str:
    """Colored display label for a verdict"""
    return colorize(STATUS_COLORS[status], status.label, use_colors)


class ConsoleProgress(ProgressReporter):
    """
    Single-line progress display.

    On a TTY each update overwrites the previous one; otherwise every
    update is written as its own line.
    """

    def __init__(self, stream: Optional[TextIO] = None, use_colors: bool = True):
        self._stream = stream
        self._line_open = False
        self.use_colors = use_colors and self.interactive

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    @property
    def interactive(self) -> bool:
        return self.stream.isatty()

    def overwrite(self, message: str) -> None:
        if self.interactive:
            self.stream.write(f"{ERASE_LINE}{message}")
            self._line_open = True
        else:
            self.stream.write(f"{message}\n")
        self.stream.flush()

    def clear(self) -> None:
        if self._line_open:
            self.stream.write(ERASE_LINE)
            self.stream.flush()
            self._line_open = False

    def close(self) -> None:
        """Terminate the status line so later output starts on a new line"""
        if self._line_open:
            self.stream.write("\n")
            self.stream.flush()
            self._line_open = False


class ConsoleTableFormatter(BaseFormatter):
    """
    Plain-text certificate table.

    Column widths are fixed when the table starts so rows can be
    appended one at a time while verification runs.
    """

    def __init__(
        self,
        checker_names: Sequence[str],
        level: OutputLevel = OutputLevel.NORMAL,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(checker_names, level)
        self._stream = stream
        self.use_colors = use_colors and self.stream.isatty()
        self._widths: List[int] = []

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _certificate_cells(self, index: int, cert: CertificateInfo) -> List[str]:
        fingerprints = [cert.fingerprint]
        if self.verbose:
            fingerprints.append(cert.fingerprint_sha256)
        return [
            str(index + 1),
            cert.organization or "Unknown",
            cert.issuer or "Unknown",
            cert.domain,
            *fingerprints,
            cert.valid_from.strftime("%Y-%m-%d"),
            cert.valid_to.strftime("%Y-%m-%d"),
            cert.signature_algorithm,
        ]

    def _verification_cells(
        self,
        results: Optional[CertificateResults],
        overall: Optional[VerificationStatus] = None,
    ) -> List[Optional[VerificationStatus]]:
        if results is None:
            return [None] * (len(self.checker_names) + 1)
        cells: List[Optional[VerificationStatus]] = [
            results.get(name, VerificationStatus.UNCERTAIN) for name in self.checker_names
        ]
        cells.append(overall or aggregate_status(results.values()))
        return cells

    def _compute_widths(
        self,
        certificates: Sequence[CertificateInfo],
        include_verification: bool,
    ) -> List[int]:
        headers = self.headers(include_verification)
        widths = [len(header) for header in headers]
        for index, cert in enumerate(certificates):
            for column, cell in enumerate(self._certificate_cells(index, cert)):
                widths[column] = max(widths[column], len(cell))
        if include_verification:
            label_width = max(len(status.label) for status in VerificationStatus)
            for column in range(len(self.certificate_headers()), len(headers)):
                widths[column] = max(widths[column], label_width)
        return widths

    def _write_line(self, cells: Sequence[str], raw_lengths: Sequence[int]) -> None:
        padded = [
            cell + " " * (width - length)
            for cell, length, width in zip(cells, raw_lengths, self._widths)
        ]
        print("| " + " | ".join(padded) + " |", file=self.stream)

    def _write_separator(self) -> None:
        print("+" + "+".join("-" * (width + 2) for width in self._widths) + "+", file=self.stream)

    def _write_header(self, include_verification: bool) -> None:
        headers = self.headers(include_verification)
        self._write_separator()
        self._write_line(
            [colorize("bold", header, self.use_colors) for header in headers],
            [len(header) for header in headers],
        )
        self._write_separator()

    def _write_row(
        self,
        index: int,
        cert: CertificateInfo,
        statuses: Optional[List[Optional[VerificationStatus]]] = None,
    ) -> None:
        cells = self._certificate_cells(index, cert)
        lengths = [len(cell) for cell in cells]
        for status in statuses or []:
            if status is None:
                cells.append("")
                lengths.append(0)
            else:
                cells.append(format_status(status, self.use_colors))
                lengths.append(len(status.label))
        self._write_line(cells, lengths)

    def start(self, certificates: Sequence[CertificateInfo]) -> None:
        self._widths = self._compute_widths(certificates, include_verification=True)
        self._write_header(include_verification=True)
        self.stream.flush()

    def append_row(
        self,
        index: int,
        certificate: CertificateInfo,
        results: CertificateResults,
        overall: VerificationStatus,
    ) -> None:
        self._write_row(index, certificate, self._verification_cells(results, overall))
        self.stream.flush()

    def finish(self) -> None:
        """Close an incrementally rendered table"""
        self._write_separator()
        self.stream.flush()

    def render(
        self,
        certificates: Sequence[CertificateInfo],
        results: Optional[BatchResults] = None,
    ) -> None:
        include_verification = results is not None
        self._widths = self._compute_widths(certificates, include_verification)
        self._write_header(include_verification)

        for index, cert in enumerate(certificates):
            statuses = (
                self._verification_cells(results.get(cert.fingerprint))
                if results is not None
                else None
            )
            self._write_row(index, cert, statuses)

        self._write_separator()

        if results is not None and len(results) < len(certificates):
            print(
                colorize("green", f"Verification progress: {len(results)}/{len(certificates)}", self.use_colors),
                file=self.stream,
            )

    def summary(self, results: BatchResults) -> None:
        """Print overall verdict counts"""
        counts: Dict[VerificationStatus, int] = {status: 0 for status in VerificationStatus}
        for cert_results in results.values():
            counts[aggregate_status(cert_results.values())] += 1

        print(file=self.stream)
        print(colorize("bold", "Summary:", self.use_colors), file=self.stream)
        for status in (VerificationStatus.PASSED, VerificationStatus.UNCERTAIN, VerificationStatus.FAILED):
            label = f"{status.label + ':':<11}"
            count = colorize(STATUS_COLORS[status], str(counts[status]), self.use_colors)
            print(f"  {label}{count}", file=self.stream)
