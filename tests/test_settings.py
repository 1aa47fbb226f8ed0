from __future__ import annotations

import os

import pytest

from receipt_scanner import settings as settings_module
from receipt_scanner.settings import Settings

ENV_NAMES = ["OCR_ENGINE", "OCR_LANGUAGE", "OCR_TIMEOUT", "MAX_UPLOAD_MB"]


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    settings_module.reset_settings_state()
    yield
    for name in ENV_NAMES:
        os.environ.pop(name, None)
    settings_module.reset_settings_state()


def test_defaults_without_environment():
    settings = Settings.load()

    assert settings.ocr_engine == "local"
    assert settings.ocr_language == "eng"
    assert settings.ocr_timeout == 30
    assert settings.max_upload_size == 15 * 1024 * 1024


@pytest.mark.parametrize(
    "env_value,expected",
    [
        ("local", "local"),
        ("RapidOCR", "rapidocr"),
        (" rapidocr ", "rapidocr"),
        ("", "local"),
    ],
)
def test_ocr_engine_normalised(monkeypatch, env_value, expected):
    monkeypatch.setenv("OCR_ENGINE", env_value)

    assert Settings.load().ocr_engine == expected


def test_rejects_unknown_engine(monkeypatch):
    monkeypatch.setenv("OCR_ENGINE", "cloud")

    with pytest.raises(RuntimeError):
        Settings.load()


@pytest.mark.parametrize("name,value", [("OCR_TIMEOUT", "soon"), ("MAX_UPLOAD_MB", "0")])
def test_rejects_invalid_numbers(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(RuntimeError):
        Settings.load()


def test_loads_from_env_file(tmp_path):
    env_content = (
        "OCR_ENGINE=rapidocr\n"
        "OCR_LANGUAGE=eng+fra\n"
        "OCR_TIMEOUT=5\n"
        "MAX_UPLOAD_MB=2\n"
    )
    (tmp_path / ".env").write_text(env_content)

    settings = Settings.load()

    assert settings.ocr_engine == "rapidocr"
    assert settings.ocr_language == "eng+fra"
    assert settings.ocr_timeout == 5
    assert settings.max_upload_size == 2 * 1024 * 1024


def test_get_settings_is_cached():
    assert settings_module.get_settings() is settings_module.get_settings()
