"""Configuration helpers for the green screen prompt generator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    gemini_key: Optional[str] = None
    openai_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL
    prompt_backend: str = "gemini"
    log_dir: Path = Path("logs")
    server_name: str = "127.0.0.1"
    server_port: int = 7860
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip('"').strip("'")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    # API_KEY is the variable name the hosted web version of the tool used.
    gemini_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    openai_key = os.getenv("OPENAI_API_KEY")

    metadata: dict[str, Any] = {}
    openai_base_url = os.getenv("OPENAI_BASE_URL")
    if openai_base_url:
        metadata["openai_base_url"] = openai_base_url

    backend = (os.getenv("PROMPT_BACKEND") or "gemini").strip().lower()
    if backend not in ("gemini", "gpt"):
        backend = "gemini"

    return AppConfig(
        gemini_key=gemini_key or None,
        openai_key=openai_key or None,
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        prompt_backend=backend,
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
        server_name=os.getenv("SERVER_NAME", "127.0.0.1"),
        server_port=_env_int("SERVER_PORT", 7860),
        metadata=metadata,
    )
