"""
Trusted Root List Parsing

Extracts SHA-256 fingerprints from the CSV root certificate report.
"""

import csv
import io
from typing import FrozenSet, List

FINGERPRINT_COLUMN = "sha-256 fingerprint"


class RootListParseError(ValueError):
    """Root list CSV has no usable fingerprint data"""
    pass


def normalize_fingerprint(fingerprint: str) -> str:
    """Lower-case hex with colons and spaces removed"""
    return fingerprint.strip().lower().replace(":", "").replace(" ", "")


def find_fingerprint_column(headers: List[str]) -> int:
    """Index of the first header mentioning the SHA-256 fingerprint, or -1"""
    for index, header in enumerate(headers):
        if FINGERPRINT_COLUMN in (header or "").lower():
            return index
    return -1


def parse_root_fingerprints(csv_content: str) -> FrozenSet[str]:
    """
    Parse the root list CSV into a set of normalized fingerprints.

    The first record is the header. Records that are blank or too short
    to reach the fingerprint column are skipped. Quoted fields may hold
    commas and newlines (the report embeds PEM text).

    Raises:
        RootListParseError: no fingerprint column, or no fingerprints found
    """
    reader = csv.reader(io.StringIO(csv_content), quotechar='"', escapechar="\\")

    headers = next(reader, [])
    column = find_fingerprint_column(headers)
    if column == -1:
        raise RootListParseError("SHA-256 Fingerprint column not found in header")

    fingerprints = set()
    for row in reader:
        if not any(value.strip() for value in row):
            continue
        if len(row) <= column:
            continue

        fingerprint = normalize_fingerprint(row[column])
        if fingerprint:
            fingerprints.add(fingerprint)

    if not fingerprints:
        raise RootListParseError("Root list contains no fingerprints")

    return frozenset(fingerprints)
