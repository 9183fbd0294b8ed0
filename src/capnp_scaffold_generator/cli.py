"""Command-line interface for generating RPC scaffolding from *.capnp schemas.

Notes:
    - Every run regenerates all outputs; existing files, including the constants sample, are overwritten.
"""

from __future__ import annotations

import argparse
import logging
import os.path
from collections.abc import Sequence

from capnp_scaffold_generator.run import run

logger = logging.getLogger(__name__)


def _add_recursive_argument(parser: argparse.ArgumentParser):
    """Add a recursive argument to a parser.

    Args:
        parser (argparse.ArgumentParser): The parser to add the argument to.
    """
    parser.add_argument(
        "-r",
        "--recursive",
        dest="recursive",
        default=False,
        action="store_true",
        help="recursively search for *.capnp files with a given glob expression.",
    )


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(
        description="Generate Java service scaffolding and JavaScript client stubs for capnp schema files."
    )

    parser.add_argument(
        "-p",
        "--paths",
        type=str,
        nargs="+",
        default=["**/*.capnp"],
        help="path or glob expressions that match *.capnp files for generation.",
    )

    parser.add_argument(
        "-e",
        "--excludes",
        type=str,
        nargs="+",
        default=[],
        help="path or glob expressions to exclude from path matches.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default="",
        help="directory to write all generated outputs to; defaults to the working directory.",
    )

    parser.add_argument(
        "-I",
        "--import-path",
        dest="import_paths",
        type=str,
        nargs="+",
        default=[],
        help="additional import paths for resolving absolute imports (e.g., /capnp/c++.capnp).",
    )

    parser.add_argument(
        "--nano",
        dest="legacy_dialect",
        default=False,
        action="store_true",
        help="generate into the legacy 'nano' sub-package.",
    )

    parser.add_argument(
        "--js-path",
        dest="js_path",
        type=str,
        default=None,
        help="root directory of the generated JavaScript tree; defaults to 'src/main/webapp/'.",
    )

    parser.add_argument(
        "--java-package",
        dest="java_package",
        type=str,
        default=None,
        help="Java package of the generated classes; defaults to the directory of each schema.",
    )

    parser.add_argument(
        "--runtime-package",
        dest="runtime_package",
        type=str,
        default=None,
        help="Java package that provides AbstractRpcService and RpcCallHandler.",
    )

    parser.add_argument(
        "--parameter",
        type=str,
        default="",
        help="comma-separated generator options, e.g. 'nano=true,js_path=web/'; explicit flags take precedence.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        default=False,
        action="store_true",
        help="log every generated file.",
    )

    _add_recursive_argument(parser)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the scaffold generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    root_directory = os.getcwd()
    logging.info("Working from root directory: %s", root_directory)

    failures = run(args, root_directory)
    if failures:
        logger.error("Generation failed for %d schema file(s).", failures)
        return 1

    return 0
