from pathlib import Path

import pytest

from staged_review.app.config import AppSettings
from staged_review.infra.repositories.config_store import CONFIG_FILE_NAME


def test_app_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STAGED_REVIEW_LOG_LEVEL", raising=False)
    monkeypatch.delenv("STAGED_REVIEW_LOG_FILE", raising=False)
    monkeypatch.delenv("STAGED_REVIEW_CONFIG", raising=False)

    settings = AppSettings.from_env()

    assert settings.log_level == "WARNING"
    assert settings.log_file is None
    assert settings.config_path == Path.home() / CONFIG_FILE_NAME


def test_app_settings_reads_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "review.yaml"
    monkeypatch.setenv("STAGED_REVIEW_LOG_LEVEL", " debug ")
    monkeypatch.setenv("STAGED_REVIEW_LOG_FILE", str(tmp_path / "review.log"))
    monkeypatch.setenv("STAGED_REVIEW_CONFIG", str(config_path))

    settings = AppSettings.from_env()

    assert settings.log_level == "DEBUG"
    assert settings.log_file == str(tmp_path / "review.log")
    assert settings.config_path == config_path


def test_app_settings_blank_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAGED_REVIEW_LOG_LEVEL", "   ")
    monkeypatch.setenv("STAGED_REVIEW_LOG_FILE", "")
    monkeypatch.setenv("STAGED_REVIEW_CONFIG", "")

    settings = AppSettings.from_env()

    assert settings.log_level == "WARNING"
    assert settings.log_file is None
    assert settings.config_path == Path.home() / CONFIG_FILE_NAME
