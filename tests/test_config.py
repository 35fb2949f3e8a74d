"""Tests for docmeta.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docmeta.config import AnnotationConfig, ConfigError, DocMetaConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DocMetaConfig)
    assert config.root == tmp_path.resolve()
    assert config.annotations == AnnotationConfig()
    assert config.annotations.enabled is None
    assert config.logging.verbose is False
    assert config.logging.file is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docmeta.yml"
    config_file.write_text(
        """
annotations:
  enabled: [route, column]
  modules:
    - "myapp.annotations"
  entry_points: false
logging:
  verbose: true
  file: "logs/docmeta.log"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.annotations.enabled == ["route", "column"]
    assert config.annotations.modules == ["myapp.annotations"]
    assert config.annotations.entry_points is False
    assert config.logging.verbose is True
    assert config.logging.file == tmp_path.resolve() / "logs" / "docmeta.log"


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docmeta.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.annotations.enabled is None
    assert config.annotations.entry_points is True


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".docmeta.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_wraps_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".docmeta.yml").write_text("annotations: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)
