"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docmeta.cli import _build_parser, main


def test_cli_accepts_verbose_before_and_after_command() -> None:
    parser = _build_parser()

    before = parser.parse_args(["--verbose", "parse", "!Table users"])
    after = parser.parse_args(["annotations", "--verbose"])

    assert before.verbose is True
    assert before.command == "parse"
    assert after.verbose is True
    assert after.command == "annotations"


def test_parse_command_prints_parameters(capsys) -> None:
    main(["parse", "/** !Route GET, '/users', name: 'users.index' */"])

    payload = json.loads(capsys.readouterr().out)
    assert payload == [
        {
            "name": "Route",
            "arguments": "GET, '/users', name: 'users.index'",
            "positional": ["GET", "/users"],
            "keyed": {"name": "users.index"},
        }
    ]


def test_parse_command_exits_on_parse_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["parse", "!Route GET,,"])

    assert excinfo.value.code == 1
    assert "unparseable" in capsys.readouterr().err


def test_expand_command_prints_descriptors(tmp_path: Path, capsys) -> None:
    manifest = tmp_path / "classes.yml"
    manifest.write_text(
        """
classes:
  - name: Ping
    comment: "!RoutesPrefix ping"
    members:
      - kind: method
        name: get
        comment: "!Route GET, ''"
""",
        encoding="utf-8",
    )

    main(["expand", str(manifest), "--config", str(tmp_path)])

    payload = json.loads(capsys.readouterr().out)
    assert payload["Ping"]["routes"] == [
        {"method": "GET", "path": "/ping", "function": "get", "name": None}
    ]


def test_expand_command_reports_errors_with_location(tmp_path: Path, capsys) -> None:
    manifest = tmp_path / "classes.yml"
    manifest.write_text(
        """
classes:
  - name: User
    file: app/user.py
    line: 3
    comment: "!Column integer"
""",
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["expand", str(manifest), "--config", str(tmp_path)])

    err = capsys.readouterr().err
    assert excinfo.value.code == 1
    assert 'app/user.py:3: Invalid ColumnAnnotation on class "User".' in err
    assert "ColumnAnnotation is only valid on Properties." in err


def test_annotations_command_respects_enabled_config(tmp_path: Path, capsys) -> None:
    (tmp_path / ".docmeta.yml").write_text(
        "annotations:\n  enabled: [table]\n  entry_points: false\n", encoding="utf-8"
    )

    main(["annotations", "--config", str(tmp_path)])

    out = capsys.readouterr().out
    assert out.splitlines() == ["!Table  (class)", "    !Table table_name"]
