# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness for record and client catalog extraction."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import TextIO

import pathspec
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from typemeta.catalog import TypeCatalog, extract_modules, merge_catalogs
from typemeta.dump import ModuleDumpError, ModuleLoadError, load_module_dump
from typemeta.module import LoadedModule

logger = logging.getLogger(__name__)

DUMP_SUFFIX = ".json"


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class IgnoreMatcher:
    """Match dump paths against .gitignore patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        self._spec = spec

    @classmethod
    def from_root(cls, root: Path) -> "IgnoreMatcher":
        """Build matcher from root and nested .gitignore files.

        Args:
            root: Directory scanned for module dumps.

        Returns:
            Configured ignore matcher.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(root.rglob(".gitignore")):
            base = ignore_path.parent.relative_to(root).as_posix()
            if base == ".":
                base = ""
            for line in ignore_path.read_text(encoding="utf-8").splitlines():
                patterns.append(_rebase_gitignore_line(line=line, base=base))
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str) -> bool:
        """Check whether a root-relative file path is ignored."""
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        return self._spec.match_file(normalized)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="typemeta")
    subparsers = parser.add_subparsers(dest="command", required=True)
    extract_parser = subparsers.add_parser("extract")
    extract_parser.add_argument(
        "--path", required=True, help="Module dump file or directory of dumps."
    )
    extract_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    extract_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )
    extract_parser.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Number of modules extracted concurrently.",
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "extract":
        return _run_extract(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_extract(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run extract command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    try:
        dump_paths = discover_dumps(Path(args.path))
        if args.workers <= 0:
            raise ValidationError("workers must be > 0")
    except ValidationError as exc:
        logger.warning(f"Validation failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read .gitignore files (error={exc})")
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2

    modules, errors = load_modules(dump_paths)
    catalog = merge_catalogs(extract_modules(modules, max_workers=args.workers))
    logger.info(
        f"Extraction completed (path={args.path} modules={len(modules)} "
        f"records={len(catalog.record_types)} clients={len(catalog.client_map)} "
        f"errors={len(errors)})"
    )
    _write_errors(errors=errors, stderr=stderr)
    if args.format == "json":
        if args.output:
            try:
                _write_json_file(
                    catalog=catalog, errors=errors, output_path=Path(args.output)
                )
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            _write_json(catalog=catalog, errors=errors, stdout=stdout)
    else:
        _write_tables(catalog=catalog, stdout=stdout)
    return 0


def discover_dumps(path: Path) -> list[Path]:
    """Resolve the module dump files to load.

    Args:
        path: Dump file or directory of dump files.

    Returns:
        Dump file paths in sorted order.

    Raises:
        ValidationError: If the path does not exist.
        OSError: If .gitignore files cannot be read.
    """
    if not path.exists():
        raise ValidationError(f"Path does not exist: {path}")
    if path.is_file():
        return [path]
    matcher = IgnoreMatcher.from_root(path)
    return [
        candidate
        for candidate in sorted(path.rglob(f"*{DUMP_SUFFIX}"))
        if candidate.is_file()
        and not matcher.matches(candidate.relative_to(path).as_posix())
    ]


def load_modules(
    dump_paths: list[Path],
) -> tuple[list[LoadedModule], list[ModuleLoadError]]:
    """Load module dumps, collecting failures instead of stopping.

    Args:
        dump_paths: Dump files to load.

    Returns:
        Loaded modules and recoverable load errors.
    """
    modules: list[LoadedModule] = []
    errors: list[ModuleLoadError] = []
    for dump_path in dump_paths:
        try:
            modules.append(load_module_dump(dump_path))
        except ModuleDumpError as exc:
            logger.warning(
                f"Skipping module dump due to load failure (path={dump_path} error={exc})"
            )
            errors.append(ModuleLoadError(path=str(dump_path), message=str(exc)))
    return modules, errors


def _write_errors(errors: list[ModuleLoadError], stderr: TextIO) -> None:
    for error in errors:
        stderr.write(f"load_error: {error.path}: {error.message}\n")


def _build_payload(
    catalog: TypeCatalog, errors: list[ModuleLoadError]
) -> dict[str, object]:
    payload = catalog.to_payload()
    payload["errors"] = [{"path": e.path, "message": e.message} for e in errors]
    return payload


def _write_json(
    catalog: TypeCatalog, errors: list[ModuleLoadError], stdout: TextIO
) -> None:
    """Write catalogs and errors in JSON format.

    Args:
        catalog: Merged catalog.
        errors: Recoverable load errors.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(_build_payload(catalog, errors), indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(
    catalog: TypeCatalog, errors: list[ModuleLoadError], output_path: Path
) -> None:
    """Write raw JSON payload to an output file.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(_build_payload(catalog, errors), indent=2, sort_keys=True),
        encoding="utf-8",
    )


def _write_tables(catalog: TypeCatalog, stdout: TextIO) -> None:
    """Write record and client catalogs as tables.

    Args:
        catalog: Merged catalog.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")

    console.rule("record types", style=Style(color="cyan"), characters="-")
    records_table = Table(show_header=True, show_lines=True, expand=True)
    records_table.add_column("record", ratio=1, overflow="fold")
    records_table.add_column("fields", ratio=3, overflow="fold")
    for record_name in sorted(catalog.record_types):
        fields = json.loads(catalog.record_types[record_name])[record_name]
        records_table.add_row(
            record_name,
            ", ".join(f"{name}: {type_}" for name, type_ in fields.items()),
        )
    console.print(records_table)

    console.rule("clients", style=Style(color="cyan"), characters="-")
    clients_table = Table(show_header=True, show_lines=True, expand=True)
    clients_table.add_column("client", ratio=1, overflow="fold")
    clients_table.add_column("method", ratio=1, overflow="fold")
    clients_table.add_column("parameters", ratio=2, overflow="fold")
    clients_table.add_column("return_type", ratio=1, overflow="fold")
    for client_name in sorted(catalog.client_map):
        methods = catalog.client_map[client_name]
        for method_name in sorted(methods):
            record = methods[method_name]
            clients_table.add_row(
                client_name,
                method_name,
                ", ".join(
                    f"{name}: {type_}" for name, type_ in record.parameters.items()
                ),
                record.return_type,
            )
    console.print(clients_table)


def _rebase_gitignore_line(line: str, base: str) -> str:
    """Rewrite one nested .gitignore line relative to the scan root.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to the scan root.

    Returns:
        Root-relative pattern line.
    """
    if not base or not line or line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    if anchored or "/" in normalized_pattern.rstrip("/"):
        prefixed = f"{base}/{normalized_pattern}"
    else:
        prefixed = f"{base}/**/{normalized_pattern}"
    if is_negation:
        return f"!{prefixed}"
    return prefixed


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
