"""Tests for configuration validation with Pydantic."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from apiretry.domain.config import AppConfig, HttpConfig, RetryConfig
from apiretry.infrastructure.config.config_manager import ConfigManager, ConfigurationError


class TestRetryConfigValidation:
    """Tests for RetryConfig validation."""

    def test_defaults(self):
        """Test documented defaults"""
        config = RetryConfig()
        assert config.max_retries == 5
        assert config.initial_delay == 1000
        assert config.max_delay == 60000
        assert config.backoff_multiplier == 2
        assert config.max_attempts == 6

    def test_camel_case_aliases(self):
        """Test camelCase option names"""
        config = RetryConfig(maxRetries=3, initialDelay=500, maxDelay=5000, backoffMultiplier=1.5)
        assert config.max_retries == 3
        assert config.initial_delay == 500
        assert config.max_delay == 5000
        assert config.backoff_multiplier == 1.5

    def test_snake_case_names(self):
        """Test snake_case option names"""
        config = RetryConfig(max_retries=0, initial_delay=0)
        assert config.max_attempts == 1
        assert config.initial_delay == 0

    def test_negative_max_retries(self):
        with pytest.raises(ValidationError, match="max_retries|maxRetries"):
            RetryConfig(max_retries=-1)

    def test_zero_backoff_multiplier(self):
        with pytest.raises(ValidationError, match="backoff_multiplier|backoffMultiplier"):
            RetryConfig(backoff_multiplier=0)

    def test_negative_delay(self):
        with pytest.raises(ValidationError):
            RetryConfig(initial_delay=-1)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            RetryConfig(jitter=0.1)

    def test_config_is_immutable(self):
        config = RetryConfig()
        with pytest.raises(ValidationError):
            config.max_retries = 10

    def test_initial_delay_above_max_delay_is_allowed(self):
        config = RetryConfig(initial_delay=10000, max_delay=1000)
        assert config.initial_delay > config.max_delay


class TestHttpConfigValidation:
    """Tests for HttpConfig validation."""

    def test_defaults(self):
        config = HttpConfig()
        assert config.timeout == 30.0
        assert config.headers == {"Accept": "application/json"}

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError, match="timeout"):
            HttpConfig(timeout=0)


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()
        assert isinstance(config.retry, RetryConfig)
        assert isinstance(config.http, HttpConfig)

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(llm={})


def _write_config(path: Path, data: dict) -> Path:
    config_file = path / ".apiretry.yml"
    config_file.write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_file


class TestConfigManager:
    """Tests for ConfigManager."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        for name in (
            "APIRETRY_MAX_RETRIES",
            "APIRETRY_INITIAL_DELAY",
            "APIRETRY_MAX_DELAY",
            "APIRETRY_BACKOFF_MULTIPLIER",
            "APIRETRY_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)

    def test_defaults_without_file(self):
        manager = ConfigManager()
        assert manager.config_path is None
        assert manager.get_retry_config().model_dump() == RetryConfig().model_dump()
        assert manager.get_http_config().timeout == 30.0

    def test_load_from_file(self, tmp_path):
        config_file = _write_config(
            tmp_path, {"retry": {"max_retries": 2, "max_delay": 5000}, "http": {"timeout": 5}}
        )
        manager = ConfigManager(config_path=config_file)
        retry = manager.get_retry_config()
        assert retry.max_retries == 2
        assert retry.max_delay == 5000
        assert retry.initial_delay == 1000
        assert manager.get_http_config().timeout == 5

    def test_camel_case_keys_in_file(self, tmp_path):
        config_file = _write_config(tmp_path, {"retry": {"maxRetries": 1, "backoffMultiplier": 3}})
        retry = ConfigManager(config_path=str(config_file)).get_retry_config()
        assert retry.max_retries == 1
        assert retry.backoff_multiplier == 3

    def test_pascal_case_keys_in_file(self, tmp_path):
        config_file = _write_config(tmp_path, {"retry": {"MaxRetries": 4, "InitialDelay": 20}})
        retry = ConfigManager(config_path=config_file).get_retry_config()
        assert retry.max_retries == 4
        assert retry.initial_delay == 20

    def test_finds_file_in_parent_directory(self, tmp_path, monkeypatch):
        _write_config(tmp_path, {"retry": {"max_retries": 7}})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        manager = ConfigManager()
        assert manager.config_path == tmp_path / ".apiretry.yml"
        assert manager.get_retry_config().max_retries == 7

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        config_file = _write_config(tmp_path, {"retry": {"maxRetries": 2}})
        monkeypatch.setenv("APIRETRY_MAX_RETRIES", "9")
        monkeypatch.setenv("APIRETRY_TIMEOUT", "2.5")
        manager = ConfigManager(config_path=config_file)
        assert manager.get_retry_config().max_retries == 9
        assert manager.get_http_config().timeout == 2.5

    def test_invalid_values_raise_configuration_error(self, tmp_path):
        config_file = _write_config(tmp_path, {"retry": {"max_retries": -3}})
        with pytest.raises(ConfigurationError, match=r"retry\.(max_retries|maxRetries)"):
            ConfigManager(config_path=config_file)

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path):
        config_file = tmp_path / ".apiretry.yml"
        config_file.write_text("retry: [unclosed", encoding="utf-8")
        manager = ConfigManager(config_path=config_file)
        assert manager.get_retry_config().model_dump() == RetryConfig().model_dump()

    def test_get_dot_notation(self, tmp_path):
        config_file = _write_config(tmp_path, {"retry": {"max_retries": 4}})
        manager = ConfigManager(config_path=config_file)
        assert manager.get("retry.max_retries") == 4
        assert manager.get("http")["timeout"] == 30.0
        assert manager.get("retry.missing", "fallback") == "fallback"
