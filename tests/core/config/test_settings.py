"""
Tests for connection configuration and application settings.

Environment lookups go through the ``environ`` mapping so nothing here
depends on the real process environment.
"""

import pytest
from pydantic import ValidationError

from rediskv.core.config.settings import RedisConfig, Settings, load_redis_config
from rediskv.core.errors import ConfigurationError


class TestLoadRedisConfig:
    def test_defaults(self):
        config = load_redis_config(environ={})

        assert config.host == "localhost"
        assert config.port == "6379"
        assert config.password == ""
        assert config.db == 0
        assert config.max_connections == 64
        assert config.connection_timeout == 30.0
        assert config.address == "localhost:6379"

    def test_environment_overrides_defaults(self):
        env = {
            "REDIS_HOST": "cache.internal",
            "REDIS_PORT": "6380",
            "REDIS_PASSWORD": "s3cret",
            "REDIS_DB": "4",
            "REDIS_MAX_CONNECTIONS": "16",
            "REDIS_CONNECTION_TIMEOUT": "2.5",
        }

        config = load_redis_config(environ=env)

        assert config.address == "cache.internal:6380"
        assert config.password == "s3cret"
        assert config.db == 4
        assert config.max_connections == 16
        assert config.connection_timeout == 2.5

    def test_explicit_values_win_per_field(self):
        env = {"REDIS_HOST": "env-host", "REDIS_PORT": "7000", "REDIS_DB": "2"}

        config = load_redis_config(host="explicit-host", db=9, environ=env)

        assert config.host == "explicit-host"
        assert config.port == "7000"
        assert config.db == 9

    def test_explicit_int_port_is_normalised(self):
        assert load_redis_config(port=6390, environ={}).port == "6390"

    def test_empty_environment_values_fall_back_to_defaults(self):
        config = load_redis_config(environ={"REDIS_HOST": "", "REDIS_DB": ""})

        assert config.host == "localhost"
        assert config.db == 0

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("REDIS_HOST", "from-env")
        monkeypatch.delenv("REDIS_PORT", raising=False)

        assert load_redis_config().host == "from-env"

    @pytest.mark.parametrize("bad_db", ["abc", "1.5", "-1"])
    def test_invalid_db_raises(self, bad_db):
        with pytest.raises(ConfigurationError, match="REDIS_DB"):
            load_redis_config(environ={"REDIS_DB": bad_db})

    @pytest.mark.parametrize("bad_port", ["http", "0", "70000"])
    def test_invalid_port_raises(self, bad_port):
        with pytest.raises(ConfigurationError, match="REDIS_PORT"):
            load_redis_config(environ={"REDIS_PORT": bad_port})

    def test_invalid_timeout_raises(self):
        with pytest.raises(ConfigurationError):
            load_redis_config(environ={"REDIS_CONNECTION_TIMEOUT": "soon"})

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            load_redis_config(db="nope", environ={})


class TestRedisConfig:
    def test_is_immutable(self):
        config = RedisConfig()

        with pytest.raises(ValidationError):
            config.host = "elsewhere"

    def test_password_hidden_from_repr_and_str(self):
        config = RedisConfig(password="s3cret")

        assert "s3cret" not in repr(config)
        assert "s3cret" not in str(config)
        assert "s3cret" not in f"{config}"
        assert config.password == "s3cret"

    def test_port_normalized_to_string(self):
        assert RedisConfig(port=6380).port == "6380"
        assert RedisConfig(port=" 6381 ").address == "localhost:6381"

    @pytest.mark.parametrize("port", ["abc", "0", "70000", True])
    def test_invalid_port_rejected_on_construction(self, port):
        with pytest.raises(ConfigurationError, match="port"):
            RedisConfig(port=port)

    def test_invalid_port_rejected_by_model_validate(self):
        with pytest.raises(ConfigurationError):
            RedisConfig.model_validate({"host": "cache", "port": "70000"})

    def test_negative_db_rejected_on_construction(self):
        with pytest.raises(ConfigurationError):
            RedisConfig(db=-1)


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("LOG_LEVEL", "LOG_DIR", "ENVIRONMENT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.log_level == "INFO"
        assert settings.is_development
        assert settings.version

    def test_log_level_normalised(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ValueError):
            Settings()

    def test_unknown_environment_falls_back_to_dev(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "staging")

        settings = Settings()

        assert settings.environment == "DEV"
        assert not settings.is_production
