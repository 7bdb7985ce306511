"""Command-line interface for enclave-partitioner."""

import argparse
import asyncio
import logging
import sys

from enclave_partitioner.config import DEFAULT_PACKAGE, PartitionerConfig
from enclave_partitioner.errors import PartitionerError
from enclave_partitioner.extractor import isolate_main_source
from enclave_partitioner.models import GuestLanguage
from enclave_partitioner.partitioner import build_full_image, partition_program
from enclave_partitioner.registry import load_registry

logger = logging.getLogger(__name__)

COMMANDS = ("partition", "main-source", "full-image")


def setup_logging(verbose: bool = False):
    """Configure logging to stderr."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _add_language_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--language",
        "-l",
        choices=[lang.value for lang in GuestLanguage],
        default=GuestLanguage.JS.value,
        help="Guest language of the source (default: js)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="enclave-partitioner",
        description="Partition a program into trusted and untrusted images",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # partition subcommand
    partition_parser = subparsers.add_parser(
        "partition",
        help="Generate both partitions and their glue (default)",
    )
    partition_parser.add_argument(
        "tracker",
        help="Taint tracker output (JSON)",
    )
    partition_parser.add_argument(
        "source",
        help="Guest program source file",
    )
    _add_language_argument(partition_parser)
    partition_parser.add_argument(
        "--output",
        "-o",
        default="./generated",
        help="Output directory (default: ./generated)",
    )
    partition_parser.add_argument(
        "--package",
        default=DEFAULT_PACKAGE,
        help=f"Java package of the partitions (default: {DEFAULT_PACKAGE})",
    )

    # main-source subcommand
    main_parser = subparsers.add_parser(
        "main-source",
        help="Print the program's top-level statements",
    )
    main_parser.add_argument(
        "source",
        help="Guest program source file",
    )
    _add_language_argument(main_parser)

    # full-image subcommand
    full_parser = subparsers.add_parser(
        "full-image",
        help="Generate a single unpartitioned image",
    )
    full_parser.add_argument(
        "source",
        help="Guest program source file",
    )
    _add_language_argument(full_parser)
    full_parser.add_argument(
        "--output",
        "-o",
        default="./generated",
        help="Output directory (default: ./generated)",
    )

    return parser


def parse_args(args: list[str]) -> argparse.Namespace:
    """Parse command-line arguments, defaulting to 'partition'."""
    parser = create_parser()

    # A bare tracker path without subcommand means 'partition'
    if args and not args[0].startswith("-") and args[0] not in COMMANDS:
        args = ["partition"] + args

    return parser.parse_args(args)


def _config_from_args(parsed: argparse.Namespace) -> PartitionerConfig:
    data = {"language": parsed.language, "output_dir": parsed.output}
    if getattr(parsed, "package", None):
        data["package"] = parsed.package
    return PartitionerConfig.from_dict(data)


async def run_partition(parsed: argparse.Namespace) -> int:
    """Run the partition command.

    Partial failures are reported in the JSON and still exit 0.

    Returns:
        Exit code (1 when nothing could be written)
    """
    config = _config_from_args(parsed)
    try:
        registry = load_registry(parsed.tracker)
    except PartitionerError as e:
        logger.error(f"Could not load tracker output: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = await partition_program(registry, parsed.source, config)
    print(result.to_json())
    return 0 if result.written else 1


async def run_main_source(parsed: argparse.Namespace) -> int:
    """Run the main-source command."""
    try:
        main_source = isolate_main_source(parsed.source, GuestLanguage(parsed.language))
    except PartitionerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(main_source)
    return 0


async def run_full_image(parsed: argparse.Namespace) -> int:
    """Run the full-image command."""
    config = _config_from_args(parsed)
    result = await build_full_image(parsed.source, config)
    print(result.to_json())
    return 0 if result.written else 1


async def run_cli(args: list[str]) -> int:
    """Run the CLI with the given arguments.

    Args:
        args: Command-line arguments (without program name)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        parsed = parse_args(args)
    except SystemExit as e:
        return e.code if e.code else 1

    setup_logging(parsed.verbose)

    if parsed.command is None:
        # No command and no args - show help
        create_parser().print_help(sys.stderr)
        return 1

    if parsed.command == "partition":
        return await run_partition(parsed)
    elif parsed.command == "main-source":
        return await run_main_source(parsed)
    elif parsed.command == "full-image":
        return await run_full_image(parsed)

    return 1


def main():
    """Entry point for the CLI."""
    exit_code = asyncio.run(run_cli(sys.argv[1:]))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
