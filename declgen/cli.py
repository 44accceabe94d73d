"""CLI entrypoints for declgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import DeclgenError
from .extractors import DeclarationExtractor, discover_extractors
from .generator import Generator
from .logging import configure_logging
from .runtime import current_fingerprint


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
        prog="declgen",
        description="Generate binding source from C/C++ headers using template directives.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Render a template, substituting every directive block.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument("template", help="Path to the template file.")
    generate_parser.add_argument(
        "-I",
        "--include",
        dest="include_paths",
        action="append",
        default=[],
        help="Add an include path for header parsing (repeatable).",
    )
    generate_parser.add_argument(
        "--config",
        default=None,
        help="Path to .declgen.yml or its directory (defaults to the template's directory).",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the artifact to this file instead of standard output.",
    )
    generate_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file.",
    )

    fingerprint_parser = subparsers.add_parser(
        "fingerprint",
        help="Print the fingerprint of the running platform.",
    )
    _add_verbose_option(fingerprint_parser, suppress_default=True)

    extractors_parser = subparsers.add_parser(
        "extractors",
        help="List the available extraction modules.",
    )
    _add_verbose_option(extractors_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for declgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(verbose=bool(args.verbose), log_file=Path(log_file) if log_file else None)

    if args.command == "generate":
        template_path = Path(args.template)
        config_path = Path(args.config) if args.config else template_path.parent
        try:
            config = load_config(config_path)
            config.clang.include_paths.extend(
                str(Path(path).expanduser().resolve()) for path in args.include_paths
            )
            artifact = Generator(config).generate(template_path)
        except (ConfigError, DeclgenError) as exc:
            parser.exit(1, f"declgen: {exc}\n")
        except OSError as exc:
            parser.exit(1, f"declgen: {exc}\n")
        if args.output:
            Path(args.output).write_text(artifact, encoding="utf-8")
        else:
            sys.stdout.write(artifact)
    elif args.command == "fingerprint":
        print(current_fingerprint())
    elif args.command == "extractors":
        for name, extractor in sorted(discover_extractors().items()):
            if isinstance(extractor, DeclarationExtractor):
                detail = f"{extractor.cardinality.value}, default kind {extractor.default_kind}"
            else:
                detail = "no declaration matching"
            print(f"{name}\t{detail}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
