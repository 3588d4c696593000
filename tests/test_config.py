"""Tests for configuration loading module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from bucketwire.config import (
    ConfigError,
    build_config,
    load_config,
    load_from_env,
    load_from_json,
)
from bucketwire.models import AddressingVendor, ClientConfig


def clean_environ() -> dict[str, str]:
    return {k: v for k, v in os.environ.items() if not k.startswith("BUCKETWIRE_")}


class TestLoadFromJson:
    """Tests for load_from_json function."""

    def test_valid_config_with_all_fields(self, tmp_path: Path):
        """Load a valid config file with all fields specified."""
        config_data = {
            "endpoint": "oss-cn-hangzhou.aliyuncs.com",
            "access_key": "test-key",
            "secret_key": "test-secret",
            "session_token": "token",
            "use_ssl": False,
            "port": 8080,
            "region": "cn-hangzhou",
            "vendor": "oss",
            "addressing_style": "virtual",
            "enable_trace": True,
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        config = load_from_json(str(config_file))

        assert config == ClientConfig(
            endpoint="oss-cn-hangzhou.aliyuncs.com",
            access_key="test-key",
            secret_key="test-secret",
            session_token="token",
            use_ssl=False,
            port=8080,
            region="cn-hangzhou",
            vendor=AddressingVendor.OSS,
            addressing_style="virtual",
            enable_trace=True,
        )

    def test_minimal_config_uses_defaults(self, tmp_path: Path):
        """Only the endpoint is required."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"endpoint": "s3.amazonaws.com"}))

        config = load_from_json(str(config_file))

        assert config.anonymous is True
        assert config.use_ssl is True
        assert config.port is None
        assert config.vendor is AddressingVendor.STANDARD
        assert config.addressing_style == "auto"

    def test_missing_file_raises_error(self, tmp_path: Path):
        """Raise ConfigError when config file doesn't exist."""
        config_file = tmp_path / "nonexistent.json"

        with pytest.raises(ConfigError, match="Config file not found"):
            load_from_json(str(config_file))

    def test_malformed_json_raises_error(self, tmp_path: Path):
        """Raise ConfigError when config file contains invalid JSON."""
        config_file = tmp_path / "config.json"
        config_file.write_text("{ invalid json }")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_from_json(str(config_file))

    def test_non_object_raises_error(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[]")

        with pytest.raises(ConfigError, match="JSON object"):
            load_from_json(str(config_file))

    def test_missing_endpoint_raises_error(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"access_key": "k"}))

        with pytest.raises(ConfigError, match="endpoint"):
            load_from_json(str(config_file))


class TestBuildConfig:
    """Tests for value validation."""

    def test_invalid_vendor(self):
        with pytest.raises(ConfigError, match="Invalid vendor"):
            build_config({"endpoint": "e", "vendor": "gcs"})

    def test_vendor_case_insensitive(self):
        assert build_config({"endpoint": "e", "vendor": "OSS"}).vendor is AddressingVendor.OSS

    def test_invalid_addressing_style(self):
        with pytest.raises(ConfigError, match="addressing_style"):
            build_config({"endpoint": "e", "addressing_style": "dns"})

    def test_invalid_port(self):
        with pytest.raises(ConfigError, match="Invalid port"):
            build_config({"endpoint": "e", "port": "abc"})

    def test_port_out_of_range(self):
        with pytest.raises(ConfigError, match="out of range"):
            build_config({"endpoint": "e", "port": 70000})

    def test_invalid_bool(self):
        with pytest.raises(ConfigError, match="use_ssl"):
            build_config({"endpoint": "e", "use_ssl": "maybe"})

    def test_keys_are_stripped(self):
        config = build_config({"endpoint": " e ", "access_key": " k ", "secret_key": " s "})

        assert config.endpoint == "e"
        assert config.access_key == "k"
        assert config.secret_key == "s"


class TestLoadFromEnv:
    """Tests for load_from_env function."""

    def test_all_variables(self):
        env_vars = clean_environ()
        env_vars.update({
            "BUCKETWIRE_ENDPOINT": "localhost",
            "BUCKETWIRE_ACCESS_KEY": "key",
            "BUCKETWIRE_SECRET_KEY": "secret",
            "BUCKETWIRE_USE_SSL": "false",
            "BUCKETWIRE_PORT": "9000",
            "BUCKETWIRE_REGION": "us-west-2",
            "BUCKETWIRE_VENDOR": "standard",
            "BUCKETWIRE_ADDRESSING_STYLE": "path",
            "BUCKETWIRE_TRACE": "1",
        })

        with patch.dict(os.environ, env_vars, clear=True):
            config = load_from_env()

        assert config.endpoint == "localhost"
        assert config.access_key == "key"
        assert config.secret_key == "secret"
        assert config.use_ssl is False
        assert config.port == 9000
        assert config.region == "us-west-2"
        assert config.addressing_style == "path"
        assert config.enable_trace is True

    def test_defaults(self):
        env_vars = clean_environ()
        env_vars["BUCKETWIRE_ENDPOINT"] = "s3.amazonaws.com"

        with patch.dict(os.environ, env_vars, clear=True):
            config = load_from_env()

        assert config.use_ssl is True
        assert config.enable_trace is False
        assert config.session_token is None

    def test_missing_endpoint(self):
        with patch.dict(os.environ, clean_environ(), clear=True):
            with pytest.raises(ConfigError, match="endpoint"):
                load_from_env()


class TestLoadConfig:
    """Tests for load_config with environment priority."""

    def test_env_takes_priority(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"endpoint": "from-file"}))
        env_vars = clean_environ()
        env_vars["BUCKETWIRE_ENDPOINT"] = "from-env"

        with patch.dict(os.environ, env_vars, clear=True):
            config = load_config(str(config_file))

        assert config.endpoint == "from-env"

    def test_falls_back_to_json(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"endpoint": "from-file"}))

        with patch.dict(os.environ, clean_environ(), clear=True):
            config = load_config(str(config_file))

        assert config.endpoint == "from-file"

    def test_no_configuration(self, tmp_path: Path):
        with patch.dict(os.environ, clean_environ(), clear=True):
            with pytest.raises(ConfigError, match="No configuration found"):
                load_config(str(tmp_path / "missing.json"))
