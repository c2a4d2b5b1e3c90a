"""
Tests for console and JSON output
"""

import io
import json

import pytest

from ca_trust.main import VerificationStatus
from ca_trust.output.base import NullProgress, OutputLevel
from ca_trust.output.console import (
    ERASE_LINE,
    ConsoleProgress,
    ConsoleTableFormatter,
    colorize,
    format_status,
)
from ca_trust.output.json_output import JsonFormatter

PASSED = VerificationStatus.PASSED
FAILED = VerificationStatus.FAILED
UNCERTAIN = VerificationStatus.UNCERTAIN


class TtyStream(io.StringIO):
    def isatty(self):
        return True


class TestColors:
    """Tests for color helpers"""

    def test_colorize(self):
        assert colorize("green", "ok") == "\033[32mok\033[0m"
        assert colorize("green", "ok", enabled=False) == "ok"

    def test_format_status(self):
        assert format_status(FAILED, use_colors=False) == "Failed"
        assert format_status(PASSED).startswith("\033[32m")


class TestConsoleProgress:
    """Tests for ConsoleProgress"""

    def test_pipe_writes_lines(self):
        stream = io.StringIO()
        progress = ConsoleProgress(stream=stream)

        progress.overwrite("first")
        progress.overwrite("second")
        progress.clear()

        assert stream.getvalue() == "first\nsecond\n"

    def test_tty_overwrites_line(self):
        stream = TtyStream()
        progress = ConsoleProgress(stream=stream)

        progress.overwrite("first")
        progress.overwrite("second")
        progress.clear()
        progress.clear()

        assert stream.getvalue() == f"{ERASE_LINE}first{ERASE_LINE}second{ERASE_LINE}"

    def test_close_ends_line(self):
        stream = TtyStream()
        progress = ConsoleProgress(stream=stream)

        progress.overwrite("Verification complete!")
        progress.close()

        assert stream.getvalue().endswith("Verification complete!\n")

    def test_null_progress(self):
        progress = NullProgress()
        progress.overwrite("ignored")
        progress.clear()


class TestConsoleTableFormatter:
    """Tests for ConsoleTableFormatter"""

    def test_headers(self):
        table = ConsoleTableFormatter(["crt.sh", "Mozilla"], stream=io.StringIO())

        assert table.headers()[-3:] == ["crt.sh Verification", "Mozilla Verification", "Overall"]
        assert table.headers(include_verification=False) == table.HEADERS

    @pytest.mark.parametrize("level", [OutputLevel.VERBOSE, OutputLevel.DEBUG])
    def test_verbose_adds_sha256_column(self, cert, level):
        stream = io.StringIO()
        table = ConsoleTableFormatter(["crt.sh"], level=level, stream=stream)

        assert table.headers()[4:6] == ["Fingerprint", "SHA-256 Fingerprint"]

        table.start([cert])
        table.append_row(0, cert, {"crt.sh": PASSED}, PASSED)
        table.finish()

        lines = stream.getvalue().splitlines()
        assert cert.fingerprint_sha256 in lines[3]
        assert len({len(line) for line in lines}) == 1

    @pytest.mark.parametrize("level", [OutputLevel.QUIET, OutputLevel.NORMAL])
    def test_sha256_column_hidden_by_default(self, cert, level):
        stream = io.StringIO()
        ConsoleTableFormatter([], level=level, stream=stream).render([cert])

        assert "SHA-256" not in stream.getvalue()
        assert cert.fingerprint_sha256 not in stream.getvalue()

    def test_render_listing(self, cert):
        stream = io.StringIO()
        ConsoleTableFormatter([], stream=stream).render([cert])
        lines = stream.getvalue().splitlines()

        assert lines[0].startswith("+")
        assert "Signature Algorithm" in lines[1]
        assert "Example Trust" in lines[3]
        assert cert.fingerprint in lines[3]
        assert cert.valid_to.strftime("%Y-%m-%d") in lines[3]
        assert "Verification" not in stream.getvalue()
        assert len(lines) == 5

    def test_rows_align(self, make_cert):
        stream = io.StringIO()
        certs = [make_cert(common_name="A"), make_cert(common_name="A much longer name")]
        ConsoleTableFormatter([], stream=stream).render(certs)

        widths = {len(line) for line in stream.getvalue().splitlines()}
        assert len(widths) == 1

    def test_unknown_names(self, make_cert):
        stream = io.StringIO()
        cert = make_cert(common_name=None, organization=None)
        ConsoleTableFormatter([], stream=stream).render([cert])

        assert "| 1 | Unknown " in stream.getvalue()

    def test_incremental_rows(self, make_cert):
        stream = io.StringIO()
        first = make_cert(common_name="First")
        second = make_cert(common_name="Second")
        table = ConsoleTableFormatter(["crt.sh", "Mozilla"], stream=stream)

        table.start([first, second])
        table.append_row(0, first, {"crt.sh": FAILED, "Mozilla": PASSED}, PASSED)
        table.append_row(1, second, {"crt.sh": FAILED}, UNCERTAIN)
        table.finish()

        lines = stream.getvalue().splitlines()
        assert len(lines) == 6
        assert lines[3].rstrip(" |").endswith("Passed")
        # missing checker result renders as uncertain
        assert lines[4].count("Uncertain") == 2
        assert len({len(line) for line in lines}) == 1

    def test_render_partial_results(self, make_cert):
        stream = io.StringIO()
        first = make_cert(common_name="First")
        second = make_cert(common_name="Second")

        ConsoleTableFormatter(["crt.sh"], stream=stream).render(
            [first, second], {first.fingerprint: {"crt.sh": PASSED}}
        )

        output = stream.getvalue()
        assert "Verification progress: 1/2" in output
        assert output.count("Passed") == 2

    def test_colors_disabled_for_pipes(self):
        table = ConsoleTableFormatter([], use_colors=True, stream=io.StringIO())
        assert table.use_colors is False

    def test_summary(self, make_cert):
        stream = io.StringIO()
        results = {
            "a": {"crt.sh": PASSED},
            "b": {"crt.sh": UNCERTAIN},
            "c": {"crt.sh": FAILED},
            "d": {"crt.sh": FAILED},
        }
        ConsoleTableFormatter(["crt.sh"], level=OutputLevel.NORMAL, stream=stream).summary(results)

        output = stream.getvalue()
        assert "Summary:" in output
        assert "Passed:    1" in output
        assert "Uncertain: 1" in output
        assert "Failed:    2" in output


class TestJsonFormatter:
    """Tests for JsonFormatter"""

    def test_listing_records(self, make_cert):
        cert = make_cert(common_name="example.com", organization=None, san=["www.example.com"])
        records = json.loads(JsonFormatter().format([cert]))

        assert records == [{
            "organization": "Unknown",
            "issuer": "example.com",
            "domain": "example.com",
            "valid_from": cert.valid_from.strftime("%Y-%m-%d"),
            "valid_to": cert.valid_to.strftime("%Y-%m-%d"),
            "signature_algorithm": "ECDSA-SHA256",
            "fingerprint": cert.fingerprint,
            "domains": ["example.com", "www.example.com"],
        }]

    def test_verification_block(self, cert):
        results = {cert.fingerprint: {"crt.sh": FAILED, "Mozilla": UNCERTAIN}}
        record = JsonFormatter().to_records([cert], results)[0]

        assert record["verification"] == {
            "crt.sh": "failed",
            "Mozilla": "uncertain",
            "overall": "uncertain",
        }

    def test_unverified_certificate_has_no_block(self, cert):
        assert "verification" not in JsonFormatter().to_records([cert], {})[0]

    @pytest.mark.parametrize("indent", [None, 4])
    def test_indent(self, cert, indent):
        output = JsonFormatter(indent=indent).format([cert])
        assert ("\n" in output) == (indent is not None)
