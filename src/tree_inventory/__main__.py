from __future__ import annotations

import argparse
import logging
import os

from tree_inventory.inventory import Inventory
from tree_inventory.inventory import InventoryError
from tree_inventory.inventory import base_folder_name
from tree_inventory.inventoryconfig import InventoryConfig
from tree_inventory.inventoryconfig import write_new_config

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("tree_inventory")


def sanitize_path(path: str) -> str:
    """
    Strip whitespace and return the absolute, normalized form of path.

    Raises:
        ValueError: The path is empty or contains null bytes.
    """
    sanitized = path.strip()

    if "\0" in sanitized:
        raise ValueError("Invalid path: contains null bytes")

    if not sanitized:
        raise ValueError("Invalid path: empty")

    return os.path.abspath(os.path.normpath(sanitized))


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="tree-inventory",
        description=(
            "Recursively list every file under a directory with its name, "
            "absolute path, creation date, last modified date and size in bytes. "
            "Paths that cannot be read are logged to errors_parsing_<name>.txt."
        ),
    )
    parser.add_argument(
        "basepath",
        type=str,
        nargs="?",
        help="The base directory to scan.",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for the report and error files. Default: working directory.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="The path to an optional configuration file.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of threads reading file attributes. Default: one per CPU.",
    )
    parser.add_argument(
        "--utc",
        help="Write timestamps in UTC instead of the local time zone.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log-file",
        help="Enable logging to a file next to the report.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--make-config",
        type=str,
        metavar="FILE",
        default=None,
        help="Create a default configuration file and exit.",
    )
    return parser.parse_args(args)


def add_file_handler_to_logging(output_directory: str, base_name: str) -> None:
    """Add a file handler to the root logger next to the report."""
    log_filepath = os.path.join(output_directory, f"{base_name}.log")
    file_handler = logging.FileHandler(log_filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)


def build_inventory(args: argparse.Namespace) -> Inventory:
    """
    Build the Inventory described by the arguments and configuration file.

    Raises:
        ValueError: An argument or the configuration is invalid.
    """
    config = InventoryConfig(args.config)
    basepath = sanitize_path(args.basepath)
    output_dir = args.output_dir or config.output_directory
    output_dir = sanitize_path(output_dir) if output_dir else None

    if args.workers is not None and args.workers < 1:
        raise ValueError(f"--workers must be at least 1, got {args.workers}")

    return Inventory.from_config(
        basepath,
        config,
        output_directory=output_dir,
        max_workers=args.workers,
        use_utc=args.utc,
    )


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.make_config:
        write_new_config(args.make_config)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    if not args.basepath:
        logger.error("Please specify the base path to scan.")
        return 1

    try:
        inventory = build_inventory(args)

    except ValueError as error:
        logger.error("Invalid argument: %s", error)
        return 1

    try:
        if args.log_file:
            os.makedirs(inventory.output_directory, exist_ok=True)
            add_file_handler_to_logging(
                inventory.output_directory,
                base_folder_name(inventory.root),
            )

        inventory.run()

    except (InventoryError, OSError) as error:
        logger.error("%s", error)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
