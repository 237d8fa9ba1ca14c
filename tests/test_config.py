from __future__ import annotations

from pathlib import Path

import pytest

from nano_banana_mcp.config import DEFAULT_API_BASE, DEFAULT_TIMEOUT_S, Settings
from nano_banana_mcp.utils import getenv_flag, load_dotenv, sanitize_payload


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_BASE", "NANO_BANANA_TIMEOUT_S"):
        monkeypatch.delenv(key, raising=False)


def test_settings_defaults_without_env() -> None:
    settings = Settings.from_env()
    assert settings.api_key is None
    assert settings.api_base == DEFAULT_API_BASE
    assert settings.timeout_s == DEFAULT_TIMEOUT_S


def test_settings_prefers_gemini_key(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gemini")
    monkeypatch.setenv("GOOGLE_API_KEY", "google")
    assert Settings.from_env().api_key == "gemini"


def test_settings_google_key_alias(monkeypatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", " google ")
    assert Settings.from_env().api_key == "google"


def test_settings_overrides(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_BASE", "http://localhost:8080/models/")
    monkeypatch.setenv("NANO_BANANA_TIMEOUT_S", "12.5")
    settings = Settings.from_env()
    assert settings.api_base == "http://localhost:8080/models"
    assert settings.timeout_s == 12.5


@pytest.mark.parametrize("raw", ["abc", "0", "-3", " "])
def test_settings_invalid_timeout_uses_default(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("NANO_BANANA_TIMEOUT_S", raw)
    assert Settings.from_env().timeout_s == DEFAULT_TIMEOUT_S


def test_load_dotenv_respects_existing_values(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\nexport GEMINI_API_KEY='from-file'\nNANO_BANANA_TIMEOUT_S=30\nbroken line\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("GEMINI_API_KEY", "placeholder")
    monkeypatch.delenv("GEMINI_API_KEY")
    monkeypatch.setenv("NANO_BANANA_TIMEOUT_S", "5")

    assert load_dotenv(env_file) is True

    settings = Settings.from_env()
    assert settings.api_key == "from-file"
    assert settings.timeout_s == 5.0


def test_load_dotenv_missing_file(tmp_path: Path) -> None:
    assert load_dotenv(tmp_path / "absent.env") is False


def test_getenv_flag(monkeypatch) -> None:
    monkeypatch.setenv("NANO_BANANA_DEBUG_REQUESTS", "Yes")
    assert getenv_flag("NANO_BANANA_DEBUG_REQUESTS") is True
    monkeypatch.setenv("NANO_BANANA_DEBUG_REQUESTS", "0")
    assert getenv_flag("NANO_BANANA_DEBUG_REQUESTS") is False
    monkeypatch.delenv("NANO_BANANA_DEBUG_REQUESTS")
    assert getenv_flag("NANO_BANANA_DEBUG_REQUESTS", default=True) is True


def test_sanitize_payload_omits_inline_data() -> None:
    payload = {"contents": [{"parts": [{"text": "hi"}, {"inlineData": {"mimeType": "image/png", "data": "xyz"}}]}]}
    assert sanitize_payload(payload) == {
        "contents": [
            {"parts": [{"text": "hi"}, {"inlineData": {"mimeType": "image/png", "data": "<omitted>"}}]}
        ]
    }
