"""CLI entrypoints for autoreg commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, parse_options
from .errors import AutoRegError
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoreg",
        description="Generate spring.factories and META-INF/services registries from Java sources.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Scan sources and write registry files.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output root for registry files (defaults to output_dir from .autoreg.yml).",
    )
    build_parser.add_argument(
        "-A",
        dest="options",
        action="append",
        default=[],
        metavar="KEY[=VALUE]",
        help="Processor option, e.g. -A debug=true. May be repeated.",
    )
    build_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print registry contents instead of writing them.",
    )

    explain_parser = subparsers.add_parser(
        "explain",
        help="Show how a type resolves against the configured markers.",
    )
    _add_verbose_option(explain_parser, suppress_default=True)
    _add_path_argument(explain_parser)
    explain_parser.add_argument(
        "--type",
        dest="type_name",
        required=True,
        help="Qualified name of the type to explain.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for autoreg commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = Orchestrator()

    if args.command == "build":
        dry_run = bool(getattr(args, "dry_run", False))
        try:
            outcome = orchestrator.run_build(
                args.path,
                output=args.output,
                options=parse_options(args.options),
                dry_run=dry_run,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except (AutoRegError, ConfigError) as exc:
            parser.exit(1, f"autoreg build failed: {exc}\nRun with --verbose for more details.\n")
        if not outcome.written:
            print("No registrations found; nothing written")
        elif dry_run:
            for name in outcome.written:
                print(f"--- {name}")
                print(outcome.contents[name], end="")
        else:
            for name in outcome.written:
                print(_relativize(outcome.output_root / name))
    elif args.command == "explain":
        try:
            explanation = orchestrator.explain(args.path, args.type_name)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except (AutoRegError, ConfigError) as exc:
            parser.exit(1, f"autoreg explain failed: {exc}\n")
        print(f"{explanation.name} ({explanation.kind})")
        for key, chain in explanation.factories.items():
            if chain is None:
                print(f"  {key}: not registered")
            else:
                print(f"  {key}: @{' -> @'.join(chain)}")
        for check in explanation.services:
            if check.accepted:
                print(f"  service {check.contract}: provided")
            else:
                print(f"  service {check.contract}: excluded ({check.mismatch.reason})")  # type: ignore[union-attr]
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
