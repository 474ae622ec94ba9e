"""Tests for core.config module."""

import pytest

from core.config import AppConfig, config_from_env, load_config
from core.errors import ConfigError


class TestConfigFromEnv:
    def test_defaults(self):
        config = config_from_env({})
        assert config.history_backend == "supabase"
        assert config.storage_bucket == "leaf-images"
        assert config.detector == "mock"
        assert config.detection_timeout_s == 30.0
        assert config.mock_delay_s == 2.0
        assert config.log_level == "INFO"
        assert not config.has_backend

    def test_supabase_credentials(self):
        config = config_from_env({
            "SUPABASE_URL": " https://abc.supabase.co ",
            "SUPABASE_ANON_KEY": "anon-key",
        })
        assert config.supabase_url == "https://abc.supabase.co"
        assert config.supabase_key == "anon-key"
        assert config.has_backend

    def test_legacy_key_name(self):
        config = config_from_env({"SUPABASE_URL": "https://abc.supabase.co", "SUPABASE_KEY": "k"})
        assert config.supabase_key == "k"

    def test_url_without_key_is_not_a_backend(self):
        assert not config_from_env({"SUPABASE_URL": "https://abc.supabase.co"}).has_backend

    def test_choices_are_case_insensitive(self):
        config = config_from_env({"HISTORY_BACKEND": "Local", "MAIZESCAN_LOG_LEVEL": "debug"})
        assert config.history_backend == "local"
        assert config.log_level == "DEBUG"

    def test_invalid_history_backend(self):
        with pytest.raises(ConfigError, match="HISTORY_BACKEND"):
            config_from_env({"HISTORY_BACKEND": "firebase"})

    def test_remote_detector_needs_url(self):
        with pytest.raises(ConfigError, match="INFERENCE_URL"):
            config_from_env({"DETECTOR": "remote"})

    def test_remote_detector(self):
        config = config_from_env({"DETECTOR": "remote", "INFERENCE_URL": "http://localhost:8000/detect"})
        assert config.detector == "remote"
        assert config.inference_url == "http://localhost:8000/detect"

    def test_timeout_parsing(self):
        assert config_from_env({"DETECTION_TIMEOUT": "12.5"}).detection_timeout_s == 12.5

    @pytest.mark.parametrize("value", ["soon", "0", "-3"])
    def test_invalid_timeout(self, value):
        with pytest.raises(ConfigError, match="DETECTION_TIMEOUT"):
            config_from_env({"DETECTION_TIMEOUT": value})

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError, match="MAIZESCAN_LOG_LEVEL"):
            config_from_env({"MAIZESCAN_LOG_LEVEL": "LOUD"})


class TestLoadConfig:
    def test_reads_env_file(self, tmp_dir, monkeypatch):
        # setenv first so monkeypatch removes whatever load_dotenv adds
        for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_KEY", "MOCK_DETECTION_DELAY"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        env_file = tmp_dir / ".env"
        env_file.write_text(
            "SUPABASE_URL=https://xyz.supabase.co\n"
            "SUPABASE_ANON_KEY=from-dotenv\n"
            "MOCK_DETECTION_DELAY=0.5\n",
            encoding="utf-8",
        )
        config = load_config(str(env_file))
        assert config.supabase_url == "https://xyz.supabase.co"
        assert config.supabase_key == "from-dotenv"
        assert config.mock_delay_s == 0.5

    def test_environment_wins_over_env_file(self, tmp_dir, monkeypatch):
        monkeypatch.setenv("STORAGE_BUCKET", "from-environment")
        env_file = tmp_dir / ".env"
        env_file.write_text("STORAGE_BUCKET=from-dotenv\n", encoding="utf-8")
        assert load_config(str(env_file)).storage_bucket == "from-environment"


def test_app_config_defaults_match_env_defaults():
    assert AppConfig() == config_from_env({})
