"""Application settings management for the receipt scanner service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

SUPPORTED_OCR_ENGINES = ("local", "rapidocr")


@dataclass(frozen=True)
class Settings:
    ocr_engine: str = "local"
    ocr_language: str = "eng"
    ocr_timeout: int = 30
    max_upload_size: int = 15 * 1024 * 1024

    @staticmethod
    def _env(name: str, default: str) -> str:
        value = os.getenv(name)
        if value is None or not value.strip():
            return default
        return value.strip()

    @classmethod
    def _positive_int(cls, name: str, default: int) -> int:
        raw = cls._env(name, str(default))
        try:
            value = int(raw)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {name} must be an integer") from exc
        if value <= 0:
            raise RuntimeError(f"Environment variable {name} must be positive")
        return value

    @classmethod
    def load(cls) -> "Settings":
        _ensure_env_file_loaded()
        ocr_engine = cls._env("OCR_ENGINE", "local").lower()
        if ocr_engine not in SUPPORTED_OCR_ENGINES:
            raise RuntimeError(f"OCR_ENGINE must be one of: {', '.join(SUPPORTED_OCR_ENGINES)}")
        ocr_language = cls._env("OCR_LANGUAGE", "eng")
        ocr_timeout = cls._positive_int("OCR_TIMEOUT", 30)
        max_upload_mb = cls._positive_int("MAX_UPLOAD_MB", 15)

        return cls(
            ocr_engine=ocr_engine,
            ocr_language=ocr_language,
            ocr_timeout=ocr_timeout,
            max_upload_size=max_upload_mb * 1024 * 1024,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.load()


def reset_settings_state() -> None:
    """Reset cached settings and environment file state (for tests)."""
    global _ENV_FILE_LOADED
    _ENV_FILE_LOADED = False
    get_settings.cache_clear()


_ENV_FILE_LOADED = False


def _ensure_env_file_loaded() -> None:
    global _ENV_FILE_LOADED
    if _ENV_FILE_LOADED:
        return
    candidates = [Path.cwd() / ".env", Path(__file__).resolve().parent.parent / ".env"]
    loaded = False
    for env_path in candidates:
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            loaded = True
    if not loaded:
        load_dotenv(override=False)
    _ENV_FILE_LOADED = True


__all__ = ["SUPPORTED_OCR_ENGINES", "Settings", "get_settings", "reset_settings_state"]
