"""CLI entrypoints for artindex commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .consumer import IndexBuildError
from .logging import configure_logging, get_logger
from .orchestrator import IndexOrchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artindex",
        description="Build a JSON search index from a directory of articles.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Scan the articles directory and write the index file.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "--config",
        default=".",
        help="Path to .artindex.yml or the directory holding it (defaults to current directory).",
    )
    build_parser.add_argument(
        "--articles-dir",
        default=None,
        help="Directory to scan for articles (overrides config).",
    )
    build_parser.add_argument(
        "--public-dir",
        default=None,
        help="Directory that indexed paths are made relative to (overrides config).",
    )
    build_parser.add_argument(
        "--output",
        default=None,
        help="Index file to write (overrides config).",
    )
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the index to stdout instead of writing it.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for artindex commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    if args.command == "build":
        dry_run = bool(getattr(args, "dry_run", False))
        try:
            config = load_config(Path(args.config)).with_overrides(
                articles_dir=args.articles_dir,
                public_dir=args.public_dir,
                output=args.output,
            )
            outcome = IndexOrchestrator().run(config, dry_run=dry_run)
        except ConfigError as exc:
            logger.error("Invalid configuration: %s", exc)
            parser.exit(1)
        except (FileNotFoundError, NotADirectoryError) as exc:
            logger.error("%s", exc)
            parser.exit(1)
        except IndexBuildError as exc:
            logger.error("%s", exc)
            parser.exit(1, "Run with --verbose for more details.\n")
        if dry_run:
            print(outcome.result)
        elif outcome.written:
            print(f"Indexed {outcome.files} articles into {_relativize(outcome.output_path)}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
