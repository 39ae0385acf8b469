# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the typemeta CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.typemeta_harness import discover_dumps, run


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _dump(module: str, record: str) -> str:
    return json.dumps(
        {
            "module": module,
            "declarations": [
                {
                    "kind": "type_definition",
                    "name": record,
                    "fields": {"name": "string", "age": "int"},
                },
                {
                    "kind": "class_definition",
                    "name": "Conn",
                    "qualifiers": ["client"],
                    "methods": [
                        {
                            "name": "get",
                            "qualifiers": ["remote"],
                            "parameters": [{"name": "id", "type": "string"}],
                            "returns": {
                                "kind": "union",
                                "signature": "string|error",
                                "members": ["string", "error"],
                            },
                        },
                        {"name": "reset", "qualifiers": ["public"]},
                    ],
                },
            ],
        }
    )


def test_tm_hrn_001_cli_requires_command_and_path() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    assert run([], stdout=stdout, stderr=stderr) == 2
    assert run(["extract"], stdout=stdout, stderr=stderr) == 2


def test_tm_hrn_002_cli_fails_when_path_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["extract", "--path", str(tmp_path / "missing")], stdout=stdout, stderr=stderr
    )

    assert exit_code == 2
    assert "Path does not exist" in stderr.getvalue()


def test_tm_hrn_003_cli_rejects_non_positive_workers(tmp_path: Path) -> None:
    dump_path = tmp_path / "pkg.json"
    _write_file(dump_path, _dump("pkg", "Person"))
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["extract", "--path", str(dump_path), "--workers", "0"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "workers must be > 0" in stderr.getvalue()


def test_tm_hrn_004_cli_json_output_for_single_dump(tmp_path: Path) -> None:
    dump_path = tmp_path / "pkg.json"
    _write_file(dump_path, _dump("pkg", "Person"))
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["extract", "--path", str(dump_path), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["record_types"] == {
        "pkg:Person": '{"pkg:Person":{"name":"string","age":"int"}}'
    }
    assert payload["client_map"] == {
        "Conn": {"get": {"parameters": {"id": "string"}, "returnType": "string"}}
    }
    assert payload["errors"] == []


def test_tm_hrn_005_cli_directory_scan_honours_gitignore_and_reports_bad_dumps(
    tmp_path: Path,
) -> None:
    root = tmp_path / "dumps"
    _write_file(root / ".gitignore", "ignored.json\n")
    _write_file(root / "a.json", _dump("alpha", "Person"))
    _write_file(root / "nested" / "b.json", _dump("beta", "Person"))
    _write_file(root / "ignored.json", _dump("gamma", "Person"))
    _write_file(root / "broken.json", "{not json")
    output_path = tmp_path / "out" / "catalog.json"
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "extract",
            "--path",
            str(root),
            "--format",
            "json",
            "--output",
            str(output_path),
            "--workers",
            "2",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    assert stdout.getvalue() == ""
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["modules"] == ["alpha", "beta"]
    assert set(payload["record_types"]) == {"alpha:Person", "beta:Person"}
    assert len(payload["errors"]) == 1
    assert payload["errors"][0]["path"].endswith("broken.json")
    assert "load_error:" in stderr.getvalue()


def test_tm_hrn_008_cli_reports_dump_with_non_string_names_as_load_error(
    tmp_path: Path,
) -> None:
    root = tmp_path / "dumps"
    _write_file(root / "good.json", _dump("pkg", "Person"))
    _write_file(
        root / "numeric_names.json",
        json.dumps(
            {
                "module": "other",
                "declarations": [
                    {
                        "kind": "class_definition",
                        "name": "Conn",
                        "qualifiers": ["client"],
                        "methods": [
                            {"name": "get", "qualifiers": ["remote"]},
                            {
                                "name": 7,
                                "qualifiers": ["remote"],
                                "parameters": [{"name": 5, "type": "string"}],
                            },
                        ],
                    }
                ],
            }
        ),
    )
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["extract", "--path", str(root), "--format", "json"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    payload = json.loads(_strip_ansi(stdout.getvalue()))
    assert payload["modules"] == ["pkg"]
    assert len(payload["errors"]) == 1
    assert payload["errors"][0]["path"].endswith("numeric_names.json")
    assert "load_error:" in stderr.getvalue()


def test_tm_hrn_006_nested_gitignore_applies_below_its_directory(
    tmp_path: Path,
) -> None:
    root = tmp_path / "dumps"
    _write_file(root / "keep.json", _dump("keep", "A"))
    _write_file(root / "sub" / ".gitignore", "keep.json\n")
    _write_file(root / "sub" / "keep.json", _dump("sub", "B"))
    _write_file(root / "sub" / "deeper" / "keep.json", _dump("deeper", "C"))

    dumps = discover_dumps(root)

    assert [path.relative_to(root).as_posix() for path in dumps] == ["keep.json"]


def test_tm_hrn_007_cli_table_output_lists_records_and_clients(tmp_path: Path) -> None:
    dump_path = tmp_path / "pkg.json"
    _write_file(dump_path, _dump("pkg", "Person"))
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["extract", "--path", str(dump_path), "--format", "table"],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 0
    compact_text = re.sub(r"[^a-zA-Z0-9_:]+", "", _strip_ansi(stdout.getvalue()))
    assert "pkg:Person" in compact_text
    assert "name:string" in compact_text
    assert "Conn" in compact_text
    assert "id:string" in compact_text
    assert "reset" not in compact_text
