"""Translate text fragments from the command line.

Reads one fragment per line from a file or stdin, translates them in batches through the
configured endpoint and prints one translation per line in input order.
Lines from batches that fail are printed untranslated and the error is logged.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import ConfigLoader, ConfigLoaderError
from core.trans.interface import ConfigurationError, Result, TranslationWarning
from core.trans.manager import TransManager
from core.version import VERSION
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

CFG_FILE: Final[str] = "batch_translate.ini"

logger: logging.Logger = LoggerUtils.get_logger(__name__)


def check_python_version() -> None:
    """Check if Python version is 3.12 or later.

    Raises:
        RuntimeError: If Python version is below 3.12.
    """
    if sys.version_info < (3, 12):
        msg = "Python 3.12 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Translate text fragments with a remote language model",
        epilog="Example: python translate_texts.py --input lines.txt",
    )
    parser.add_argument("--config", dest="config", metavar="INI_FILE", default=CFG_FILE, help="Configuration file")
    parser.add_argument("--input", dest="input", metavar="TEXT_FILE", help="UTF-8 file, one fragment per line")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ConfigLoader:
    """Load the configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If the configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).name
    return ConfigLoader(config_filename=args.config, script_name=script_name, debug=args.debug)


def setup_logging(loader: ConfigLoader) -> None:
    general = loader.config.GENERAL
    log_utils = LoggerUtils(general.LOG_FILE, always_show=(TranslationWarning,))
    log_utils.set_level("DEBUG" if general.DEBUG else general.LOG_LEVEL)


def read_fragments(path: str | None) -> list[str]:
    """Read non-empty lines from ``path``, or from stdin when no path is given."""
    if path is None:
        lines: list[str] = sys.stdin.read().splitlines()
    else:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [line for line in lines if line.strip()]


def render_results(results: list[Result]) -> list[str]:
    """Flatten per-call results into output lines, keeping the source text of failed calls."""
    output: list[str] = []
    for result in results:
        if result.succeeded and result.texts is not None:
            output.extend(result.texts)
        else:
            logger.error("Batch failed, printing source text: %s", result.error)
            output.extend(result.sources)
    return output


async def run(loader: ConfigLoader, fragments: list[str]) -> int:
    """Translate ``fragments`` and print the outcome.

    Returns:
        int: Exit status. 1 if initialization or any batch failed.
    """
    manager = TransManager(loader.config, loader)
    try:
        try:
            await manager.initialize()
        except (ConfigurationError, ConfigLoaderError) as err:
            logger.critical("Translation engine could not be started: %s", err)
            return 1

        results: list[Result] = await manager.translate(fragments) if fragments else []
    finally:
        await manager.close()

    for line in render_results(results):
        print(line)
    return 0 if all(result.succeeded for result in results) else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Performs the following steps:
    1. Check Python version
    2. Parse command-line arguments
    3. Load configuration and configure logging
    4. Translate the input and print the result
    """
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        loader: ConfigLoader = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    setup_logging(loader)
    try:
        fragments: list[str] = read_fragments(args.input)
    except OSError as err:
        print(f"\nError: Failed to read input: {err}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(run(loader, fragments))
    except KeyboardInterrupt:
        print("\n\nTranslation cancelled by user.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
