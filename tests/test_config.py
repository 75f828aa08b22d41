"""Tests for doc_implementors.config."""

from pathlib import Path

import pytest

from doc_implementors.config import Settings, get_settings, reset_settings
from doc_implementors.errors import ConfigError, ErrorCategory
from doc_implementors.registry import MergePolicy


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.doc_root == Path("doc")
        assert settings.merge_policy is MergePolicy.REPLACE
        assert settings.log_level == "INFO"
        assert settings.log_json is None

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("DOC_IMPLEMENTORS_DOC_ROOT", "target/doc")
        monkeypatch.setenv("DOC_IMPLEMENTORS_MERGE_POLICY", "append")

        settings = Settings()

        assert settings.doc_root == Path("target/doc")
        assert settings.merge_policy is MergePolicy.APPEND

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_to_dict(self):
        data = Settings(doc_root="x", merge_policy="keep_first").to_dict()
        assert data == {"doc_root": "x", "merge_policy": "keep_first", "log_level": "INFO", "log_json": None}


class TestFromYaml:

    def test_load(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("doc_root: build/doc\nmerge_policy: keep_first\nlog_level: warning\n")

        settings = Settings.from_yaml(path)

        assert settings.doc_root == Path("build/doc")
        assert settings.merge_policy is MergePolicy.KEEP_FIRST
        assert settings.log_level == "WARNING"

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Settings.from_yaml(path).merge_policy is MergePolicy.REPLACE

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            Settings.from_yaml(tmp_path / "missing.yaml")

        assert exc_info.value.category == ErrorCategory.CONFIG
        assert exc_info.value.context.path.endswith("missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            Settings.from_yaml(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("merge_policy: sometimes\n")
        with pytest.raises(ConfigError):
            Settings.from_yaml(path)

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError):
            Settings.from_dict({"log_level": "LOUD"})


class TestGetSettings:

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("DOC_IMPLEMENTORS_LOG_LEVEL", "ERROR")
        reset_settings()

        second = get_settings()

        assert second is not first
        assert second.log_level == "ERROR"
