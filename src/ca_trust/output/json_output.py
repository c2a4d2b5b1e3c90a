"""
JSON Output

Structured certificate listing for machine consumption.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from .base import BatchResults
from ..certificates import CertificateInfo
from ..main import aggregate_status


class JsonFormatter:
    """Formats certificates (and optional verdicts) as a JSON array"""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def to_records(
        self,
        certificates: Sequence[CertificateInfo],
        results: Optional[BatchResults] = None,
    ) -> List[Dict[str, Any]]:
        records = []
        for cert in certificates:
            record: Dict[str, Any] = {
                "organization": cert.organization or "Unknown",
                "issuer": cert.issuer or "Unknown",
                "domain": cert.domain,
                "valid_from": cert.valid_from.strftime("%Y-%m-%d"),
                "valid_to": cert.valid_to.strftime("%Y-%m-%d"),
                "signature_algorithm": cert.signature_algorithm,
                "fingerprint": cert.fingerprint,
                "domains": list(cert.domains),
            }

            if results is not None and cert.fingerprint in results:
                cert_results = results[cert.fingerprint]
                verification = {name: status.value for name, status in cert_results.items()}
                verification["overall"] = aggregate_status(cert_results.values()).value
                record["verification"] = verification

            records.append(record)
        return records

    def format(
        self,
        certificates: Sequence[CertificateInfo],
        results: Optional[BatchResults] = None,
    ) -> str:
        return json.dumps(
            self.to_records(certificates, results),
            indent=self.indent,
            ensure_ascii=False,
        )
