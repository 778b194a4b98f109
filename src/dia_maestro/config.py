# src/dia_maestro/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the LLM key is optional; without it the
  offline suggestion client is used).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DIAMAESTRO"

# Storage keys used by the original browser app; kept so exported data stays compatible.
DEFAULT_TASKS_KEY = "diaMaestroTasks"
DEFAULT_WORKERS_KEY = "diaMaestroWorkers"
DEFAULT_PROFILE_KEY = "diaMaestroProfile"

# Browsers typically allow ~5 MB per origin.
DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local storage ----
    data_dir: Path
    storage_path: Path
    storage_quota_bytes: int
    tasks_key: str
    workers_key: str
    profile_key: str

    # ---- LLM / OpenRouter ----
    openrouter_api_key: str | None
    openrouter_base_url: str
    llm_models: list[str]
    extra_headers: dict[str, str]
    llm_connect_timeout: float
    llm_read_timeout: float

    # ---- Tag suggestions ----
    suggest_debounce_seconds: float
    suggest_min_chars: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "Dia Maestro")
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/dia_maestro"))
        storage_path = _env_path(_k("STORAGE_PATH"), data_dir / "storage.sqlite3")
        storage_quota_bytes = _env_int(_k("STORAGE_QUOTA_BYTES"), DEFAULT_STORAGE_QUOTA_BYTES)

        tasks_key = _env(_k("TASKS_KEY"), DEFAULT_TASKS_KEY)
        workers_key = _env(_k("WORKERS_KEY"), DEFAULT_WORKERS_KEY)
        profile_key = _env(_k("PROFILE_KEY"), DEFAULT_PROFILE_KEY)

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")

        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": _env(_k("APP_TITLE"), app_name),
        }

        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "qwen/qwen-2.5-72b-instruct:free",
                "deepseek/deepseek-chat-v3-0324:free",
            ],
        )

        llm_connect_timeout = _env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0)
        llm_read_timeout = _env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 20.0)

        suggest_debounce_seconds = _env_float(_k("SUGGEST_DEBOUNCE_SECONDS"), 0.5)
        suggest_min_chars = _env_int(_k("SUGGEST_MIN_CHARS"), 3)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_path=storage_path,
            storage_quota_bytes=storage_quota_bytes,
            tasks_key=tasks_key,
            workers_key=workers_key,
            profile_key=profile_key,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            llm_connect_timeout=llm_connect_timeout,
            llm_read_timeout=llm_read_timeout,
            suggest_debounce_seconds=suggest_debounce_seconds,
            suggest_min_chars=suggest_min_chars,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
