"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from zenaton_serializer.config import SerializerSettings

_ENV_VARS = ("LOG_LEVEL", "ZENATON_SERIALIZER_MAX_DEPTH", "ZENATON_SERIALIZER_ALLOW_TYPE_IMPORT")


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_settings_defaults() -> None:
    settings = SerializerSettings()

    assert settings.log_level == "INFO"
    assert settings.max_depth == 512
    assert settings.allow_type_import is True


def test_settings_loads_from_dotenv(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "LOG_LEVEL=DEBUG",
                "ZENATON_SERIALIZER_MAX_DEPTH=64",
                "ZENATON_SERIALIZER_ALLOW_TYPE_IMPORT=false",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = SerializerSettings()

    assert settings.log_level == "DEBUG"
    assert settings.max_depth == 64
    assert settings.allow_type_import is False


def test_environment_overrides_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("ZENATON_SERIALIZER_MAX_DEPTH=64\n", encoding="utf-8")
    monkeypatch.setenv("ZENATON_SERIALIZER_MAX_DEPTH", "8")

    assert SerializerSettings().max_depth == 8


def test_settings_accept_field_names() -> None:
    settings = SerializerSettings(_env_file=None, max_depth=3, allow_type_import=False)

    assert settings.max_depth == 3
    assert settings.allow_type_import is False


@pytest.mark.parametrize("value", ["0", "-1", "deep"])
def test_invalid_max_depth_is_rejected(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("ZENATON_SERIALIZER_MAX_DEPTH", value)

    with pytest.raises(ValidationError):
        SerializerSettings()
