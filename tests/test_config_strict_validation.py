from __future__ import annotations

from pathlib import Path

import pytest

from rules.config import ConfigError, load_config


def _write_config(docs_root: Path, toml_content: str) -> None:
    (docs_root / "sdkref.toml").write_text(toml_content, encoding="utf-8")


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.fail_threshold == 100.0
    assert config.languages == ["kotlin", "kt", "java"]
    assert config.doc_extensions == [".md", ".mdx", ".markdown"]
    assert config.count_low_confidence is True
    assert config.jobs == 1


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "fail_threshold = ")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


def test_fail_threshold_out_of_range_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "fail_threshold = 120")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
exclude = ["drafts/**"]
fail_threshold = 80
doc_extensions = ["md", ".MDX"]
languages = ["Kotlin", " java "]
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.exclude == ["drafts/**"]
    assert config.fail_threshold == 80.0
    assert config.doc_extensions == [".md", ".mdx"]
    assert config.languages == ["kotlin", "java"]


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path, tmp_path / "missing.toml")


def test_explicit_config_path_wins_over_docs_root(tmp_path: Path) -> None:
    _write_config(tmp_path, "fail_threshold = 10")
    other = tmp_path / "other.toml"
    other.write_text("fail_threshold = 90\n", encoding="utf-8")

    assert load_config(tmp_path, other).fail_threshold == 90.0
