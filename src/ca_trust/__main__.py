"""
CA Trust CLI

Command-line interface for listing and verifying root certificates.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from . import __version__
from .certificates import CertificateInfo, load_certificates, split_pem_bundle, system_ca_path
from .filters import CertificateFilter
from .logging_config import level_for_verbosity, setup_logging
from .main import TrustConfig
from .orchestrator import VerificationOrchestrator
from .output.base import OutputLevel
from .output.console import ConsoleProgress, ConsoleTableFormatter, colorize
from .output.json_output import JsonFormatter
from .verification import get_default_checkers

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "ca-trust.yml"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="ca-trust",
        description="List system root certificates and verify them against public trust sources",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet mode",
    )
    parser.add_argument(
        "--log-file",
        help="Log to file",
    )
    parser.add_argument(
        "--config",
        help="Config file path",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # List command
    list_parser = subparsers.add_parser("list-certs", help="List root certificates")
    list_parser.add_argument(
        "--keyword", "-k",
        help="Only certificates whose issuer, organization or domains contain KEYWORD",
    )
    list_parser.add_argument(
        "--signature", "-s",
        help="Only certificates whose signature algorithm contains SIGNATURE",
    )
    list_parser.add_argument(
        "--format", "-f",
        choices=["table", "json"],
        default="table",
        help="Output format",
    )
    list_parser.add_argument(
        "--show-expired",
        action="store_true",
        help="Include expired certificates",
    )
    list_parser.add_argument(
        "--verify", "-c",
        action="store_true",
        help="Verify certificates against trust sources",
    )
    list_parser.add_argument(
        "--ca-file",
        help="PEM bundle to inspect (defaults to the system bundle)",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Show/initialize configuration")
    config_parser.add_argument("--show", action="store_true", help="Show current config")
    config_parser.add_argument("--init", action="store_true", help="Initialize config file")

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> TrustConfig:
    """Load config from --config, falling back to the environment"""
    if args.config:
        if Path(args.config).exists():
            return TrustConfig.from_yaml(args.config)
        logger.warning(f"Config file not found: {args.config}, using environment")
    return TrustConfig.from_env()


def _info(args: argparse.Namespace, message: str) -> None:
    """Status text; kept off stdout so JSON output stays parseable"""
    if not args.quiet:
        print(message, file=sys.stderr)


async def list_certs(args: argparse.Namespace, config: TrustConfig, level: OutputLevel) -> int:
    """List, filter and optionally verify certificates"""
    use_colors = not args.no_color

    ca_path = args.ca_file or system_ca_path(config)
    if not ca_path or not Path(ca_path).is_file():
        print(
            colorize("red", f"Error: cannot find certificate bundle: {ca_path or '(none)'}", use_colors),
            file=sys.stderr,
        )
        return 1

    try:
        pem_contents = Path(ca_path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"Error: cannot read certificate bundle: {e}", file=sys.stderr)
        return 1

    _info(args, f"Certificate store: {ca_path}")

    blocks = split_pem_bundle(pem_contents)
    _info(args, f"Found {len(blocks)} certificates")

    cert_filter = CertificateFilter(
        keyword=args.keyword,
        signature=args.signature,
        show_expired=args.show_expired,
    )
    certificates = cert_filter.apply(load_certificates(blocks))
    _info(args, f"{len(certificates)} certificates after filtering")

    if not certificates:
        _info(args, colorize("yellow", "No matching certificates found", use_colors))
        return 0

    if args.verify:
        await verify_certs(args, config, level, certificates)
    elif args.format == "json":
        print(JsonFormatter().format(certificates))
    else:
        ConsoleTableFormatter([], level=level, use_colors=use_colors).render(certificates)

    return 0


async def verify_certs(
    args: argparse.Namespace,
    config: TrustConfig,
    level: OutputLevel,
    certificates: List[CertificateInfo],
) -> None:
    """Run the orchestrator and render results"""
    use_colors = not args.no_color
    orchestrator = VerificationOrchestrator(get_default_checkers(config))
    progress = ConsoleProgress(use_colors=use_colors)

    if args.format == "json":
        results = await orchestrator.verify_batch(certificates, progress)
        progress.close()
        print(JsonFormatter().format(certificates, results))
        return

    table = ConsoleTableFormatter(orchestrator.checker_names, level=level, use_colors=use_colors)
    results = await orchestrator.verify_batch(certificates, progress, table)
    progress.clear()
    table.finish()
    if level != OutputLevel.QUIET:
        table.summary(results)


def show_config(args: argparse.Namespace, config: TrustConfig) -> int:
    """Show or initialize configuration"""
    if args.init:
        config_path = Path(args.config or DEFAULT_CONFIG_FILE)
        if config_path.exists():
            print(f"Config already exists: {config_path}")
            return 1

        header = "# CA Trust Configuration\n\n"
        config_path.write_text(header + yaml.safe_dump(TrustConfig().to_dict(), sort_keys=False))
        print(f"Created config: {config_path}")
        return 0

    if args.show:
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    setup_logging(
        level=level_for_verbosity(args.verbose, args.quiet),
        log_file=args.log_file,
        use_colors=not args.no_color,
    )

    output_level = OutputLevel.DEBUG if args.verbose >= 2 else (
        OutputLevel.VERBOSE if args.verbose >= 1 else (
            OutputLevel.QUIET if args.quiet else OutputLevel.NORMAL
        )
    )

    try:
        if args.command == "list-certs":
            config = load_config(args)
            return asyncio.run(list_certs(args, config, output_level))
        elif args.command == "config":
            config = load_config(args) if not args.init else TrustConfig()
            return show_config(args, config)
        else:
            print("Use --help for usage information")
            return 1
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
