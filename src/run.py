"""
Command line entry point.

    pullfinder "C:/Program Files/Genshin Impact/Genshin Impact game"

Prints the pull history URL on stdout. Diagnostics go to stderr.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Allow running from a source checkout: python src/run.py <path>
src_dir = Path(__file__).resolve().parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from core.app_version import get_app_version
from core.config import load_app_config
from core.logging import configure_logging, get_logger
from extractors.exceptions import ExtractorError
from extractors.gacha import (
    GAME_PROFILES,
    PullUrlExtractor,
    build_validator,
    merge_profiles,
    profile_from_mapping,
)

LOGGER = get_logger("run")


def positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pullfinder",
        description="Find the pull history URL in a game's web cache.",
    )
    parser.add_argument("install_path", type=Path, help="Game install directory (holding *_Data)")
    parser.add_argument("--no-validate", action="store_true",
                        help="Print the first candidate without contacting the API")
    parser.add_argument("--all", action="store_true", dest="show_all",
                        help="Print every candidate URL found in the cache (no validation)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Path of a config.yml (default: ./config/config.yml)")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        type=str.upper, help="Console log level")
    parser.add_argument("--timeout", type=positive_float, default=None,
                        help="Validation request timeout in seconds")
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {get_app_version()}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_app_config(args.config)
        extra_profiles = [profile_from_mapping(entry) for entry in config.profiles]
    except ExtractorError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    try:
        configure_logging(
            level=args.log_level or config.logging.level,
            log_file=config.logging.file,
            max_bytes=config.logging.max_mb * 1024 * 1024,
            backup_count=config.logging.backup_count,
        )
    except OSError as exc:
        print(f"Invalid configuration: cannot open log file: {exc}", file=sys.stderr)
        return 1

    install_path: Path = args.install_path
    if not install_path.exists():
        print(f"{install_path} does not exist")
        return 1

    profiles = merge_profiles(GAME_PROFILES, extra_profiles)
    try:
        extractor = PullUrlExtractor(install_path, profiles)
        if args.show_all:
            for candidate in extractor.extract_candidates():
                print(candidate)
            return 0

        validator = build_validator(
            extractor.profile,
            enabled=config.validation.enabled and not args.no_validate,
            timeout_s=args.timeout if args.timeout is not None else config.validation.timeout_s,
        )
        result = extractor.find_url(validator)
    except ExtractorError as exc:
        LOGGER.debug("Extraction failed", exc_info=True)
        print(f"Failed to find gacha URL: {exc}")
        return 1

    print(result.url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
