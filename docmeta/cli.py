"""CLI entrypoints for docmeta commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .annotations import AnnotationRegistry, build_registry
from .config import ConfigError, DocMetaConfig, load_config
from .descriptor import ClassDescriptor
from .errors import AnnotationError, AnnotationErrorGroup, ParseError
from .logging import configure_logging, get_logger
from .manifest import descriptors_to_dict, load_manifest
from .models import TargetKind
from .processor import AnnotationProcessor
from .syntax import evaluate_arguments, scan_directives

logger = get_logger("cli")


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


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .docmeta.yml or the directory holding it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docmeta",
        description="Parse !Annotation directives and expand them into class metadata.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser(
        "parse",
        help="Show the directives and parameters found in a comment.",
    )
    _add_verbose_option(parse_parser, suppress_default=True)
    parse_parser.add_argument(
        "text",
        help="Comment text to scan; use '-' to read it from stdin.",
    )

    expand_parser = subparsers.add_parser(
        "expand",
        help="Expand every class in a manifest and print the resulting descriptors.",
    )
    _add_verbose_option(expand_parser, suppress_default=True)
    _add_config_option(expand_parser)
    expand_parser.add_argument("manifest", help="Path to a YAML class manifest.")

    annotations_parser = subparsers.add_parser(
        "annotations",
        help="List registered annotation kinds and their usage.",
    )
    _add_verbose_option(annotations_parser, suppress_default=True)
    _add_config_option(annotations_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docmeta commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    config: Optional[DocMetaConfig] = None
    if hasattr(args, "config"):
        try:
            config = load_config(Path(args.config))
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")

    verbose = bool(args.verbose) or bool(config and config.logging.verbose)
    configure_logging(verbose=verbose, log_file=config.logging.file if config else None)

    if args.command == "parse":
        text = sys.stdin.read() if args.text == "-" else args.text
        try:
            payload = describe_directives(text)
        except ParseError as exc:
            parser.exit(1, f"{exc}\n")
        print(json.dumps(payload, indent=2))
    elif args.command == "expand":
        registry = _registry_or_exit(parser, config)
        try:
            sources = load_manifest(Path(args.manifest))
        except ConfigError as exc:
            parser.exit(1, f"{exc}\n")
        logger.debug("Loaded %d classes from %s", len(sources), args.manifest)
        processor = AnnotationProcessor(registry)
        descriptors: List[ClassDescriptor] = []
        failures: List[AnnotationError] = []
        for source in sources:
            try:
                descriptors.append(processor.expand_class(source))
            except AnnotationErrorGroup as exc:
                failures.extend(exc.errors)
            except AnnotationError as exc:
                failures.append(exc)
        if failures:
            parser.exit(1, format_errors(failures))
        print(json.dumps(descriptors_to_dict(descriptors), indent=2, default=str))
    elif args.command == "annotations":
        registry = _registry_or_exit(parser, config)
        for kind in sorted(registry, key=lambda item: item.identifier()):
            allowed = ", ".join(item.label for item in TargetKind.members_of(kind.applies_to))
            print(f"!{kind.identifier()}  ({allowed})")
            print(f"    {kind().usage()}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def describe_directives(text: str) -> List[Dict[str, Any]]:
    """Return the directives in ``text`` with their evaluated parameters."""
    described: List[Dict[str, Any]] = []
    for invocation in scan_directives(text):
        parameters = evaluate_arguments(invocation.argument_text, name=invocation.name)
        described.append(
            {
                "name": invocation.name,
                "arguments": invocation.argument_text,
                **parameters.to_dict(),
            }
        )
    return described


def format_errors(errors: List[AnnotationError]) -> str:
    """Render annotation errors one per block, prefixed with ``file:line``."""
    blocks = []
    for error in errors:
        location = error.file or "<unknown>"
        if error.line is not None:
            location = f"{location}:{error.line}"
        blocks.append(f"{location}: {error.message}")
    return "\n\n".join(blocks) + "\n"


def _registry_or_exit(
    parser: argparse.ArgumentParser, config: Optional[DocMetaConfig]
) -> AnnotationRegistry:
    try:
        return build_registry(config.annotations if config else None)
    except (RuntimeError, TypeError, ValueError) as exc:
        parser.exit(1, f"Failed to load annotations: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
