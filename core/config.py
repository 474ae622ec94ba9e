"""Application configuration loaded from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from core.errors import ConfigError

HISTORY_BACKENDS = ("supabase", "local")
DETECTORS = ("mock", "remote")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    """Backend endpoints and tunables for a MaizeScan session."""
    supabase_url: str = ""
    supabase_key: str = ""
    history_backend: str = "supabase"
    storage_bucket: str = "leaf-images"
    detector: str = "mock"
    inference_url: str = ""
    detection_timeout_s: float = 30.0
    mock_delay_s: float = 2.0
    signup_redirect_url: str = ""
    password_reset_redirect_url: str = ""
    log_level: str = "INFO"

    @property
    def has_backend(self) -> bool:
        """True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_key)


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _read_choice(env: Mapping[str, str], name: str, choices, default: str) -> str:
    value = env.get(name, "").strip().lower() or default
    if value not in choices:
        raise ConfigError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


def config_from_env(env: Mapping[str, str]) -> AppConfig:
    """Build an AppConfig from a mapping of environment variables."""
    detector = _read_choice(env, "DETECTOR", DETECTORS, "mock")
    inference_url = env.get("INFERENCE_URL", "").strip()
    if detector == "remote" and not inference_url:
        raise ConfigError("INFERENCE_URL is required when DETECTOR=remote")

    log_level = env.get("MAIZESCAN_LOG_LEVEL", "").strip().upper() or "INFO"
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"MAIZESCAN_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    return AppConfig(
        supabase_url=env.get("SUPABASE_URL", "").strip(),
        supabase_key=(env.get("SUPABASE_ANON_KEY", "") or env.get("SUPABASE_KEY", "")).strip(),
        history_backend=_read_choice(env, "HISTORY_BACKEND", HISTORY_BACKENDS, "supabase"),
        storage_bucket=env.get("STORAGE_BUCKET", "").strip() or "leaf-images",
        detector=detector,
        inference_url=inference_url,
        detection_timeout_s=_read_float(env, "DETECTION_TIMEOUT", 30.0),
        mock_delay_s=_read_float(env, "MOCK_DETECTION_DELAY", 2.0),
        signup_redirect_url=env.get("SIGNUP_REDIRECT_URL", "").strip(),
        password_reset_redirect_url=env.get("PASSWORD_RESET_REDIRECT_URL", "").strip(),
        log_level=log_level,
    )


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """Load .env (if present) into the process environment, then read it."""
    load_dotenv(env_file)
    return config_from_env(os.environ)
