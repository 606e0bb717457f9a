"""Main CLI entry point for csprojgraph.

Provides commands: scan
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from csprojgraph.cli.scan import scan_command

logger = logging.getLogger("csprojgraph.cli")


def setup_logging(
    verbose: bool = False,
    console: Optional[Console] = None,
    log_file: Optional[str] = None,
) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
        log_file: Also write log records to this file (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )
    handlers: list = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] [%(levelname)s] %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def main() -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = argparse.ArgumentParser(
        description="csprojgraph - .NET project graph and reference resolver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan_parser = subparsers.add_parser(
        "scan",
        help="Resolve the project graph and library paths of a working directory",
    )
    scan_parser.add_argument(
        "workdir",
        nargs="?",
        default=".",
        help="Directory holding the root project file (default: current directory)",
    )
    scan_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional resolver configuration. Can be a path to a TOML/JSON "
            "file (e.g. config.toml, config.json) or an inline TOML/JSON "
            "string. When omitted, built-in defaults are used."
        ),
    )
    scan_parser.add_argument(
        "-o",
        "--output",
        help="Write the resolution to this JSON file (optional)",
    )
    scan_parser.add_argument(
        "--log-file",
        help="Output log to file (optional). When specified, logs are written to this file in addition to console.",
    )

    args = parser.parse_args()

    setup_logging(args.verbose, log_file=getattr(args, "log_file", None))

    if args.command == "scan":
        return scan_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
