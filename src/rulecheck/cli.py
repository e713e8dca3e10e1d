"""Command-line entry point: validate schema files and documents."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from rulecheck import __version__
from rulecheck.blueprint.flatten import error_pairs
from rulecheck.models.errors import Diagnostic
from rulecheck.pipeline.loading import SchemaLoadError, load_schema
from rulecheck.pipeline.pipeline import Pipeline
from rulecheck.settings import Settings

logger = logging.getLogger("rulecheck.cli")


def _print_diagnostics(diagnostics: Sequence[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        print(diagnostic)


def _cmd_schema(args: argparse.Namespace) -> int:
    path = Path(args.schema)
    source = path.read_text(encoding="utf-8")
    blueprint = Pipeline.for_schema(filename=str(path)).run(source).result
    diagnostics = [pair.error for pair in error_pairs(blueprint)]
    _print_diagnostics(diagnostics)
    if diagnostics:
        return 1
    print(f"{path}: schema is valid", file=sys.stderr)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    try:
        schema = load_schema(Path(args.schema))
    except SchemaLoadError as exc:
        print(exc, file=sys.stderr)
        return 2
    path = Path(args.document)
    options = {"operation_name": args.operation_name, "filename": str(path)}
    blueprint = Pipeline.for_document(schema, options).run(path.read_text(encoding="utf-8")).result
    diagnostics = [pair.error for pair in error_pairs(blueprint)]
    _print_diagnostics(diagnostics)
    if diagnostics:
        return 1
    print(f"{path}: document is valid", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulecheck",
        description="Validate YAML schemas and selection documents.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    schema_cmd = commands.add_parser("schema", help="Validate a YAML schema file")
    schema_cmd.add_argument("schema", help="Schema YAML file")
    schema_cmd.set_defaults(handler=_cmd_schema)

    check_cmd = commands.add_parser("check", help="Validate a document against a schema")
    check_cmd.add_argument("document", help="Selection document file")
    check_cmd.add_argument("--schema", required=True, help="Schema YAML file")
    check_cmd.add_argument("--operation-name", default=None, help="Operation to select")
    check_cmd.set_defaults(handler=_cmd_check)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())
    args = build_parser().parse_args(argv)
    logger.debug("rulecheck v%s running %s", __version__, args.command)
    try:
        return args.handler(args)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"rulecheck: cannot read input: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
