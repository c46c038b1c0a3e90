"""
Module: test_settings.py
Description: Unit tests for Settings loading and validation.
"""

import pytest
from pydantic import ValidationError

from queuelink.config.settings import Settings
from queuelink.errors import ConfigurationError


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.region == "us-east-1"
        assert settings.service == "sqs"
        assert settings.poll_time == 5
        assert settings.receive_timeout == 30
        assert settings.max_action_attempts == 3
        assert settings.queue_prefix == ""

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("QUEUELINK_REGION", "eu-west-1")
        monkeypatch.setenv("QUEUELINK_ACCESS_KEY", "AKID")
        monkeypatch.setenv("QUEUELINK_SECRET_KEY", "secret")
        monkeypatch.setenv("QUEUELINK_POLL_TIME", "20")

        settings = Settings(_env_file=None)

        assert settings.region == "eu-west-1"
        assert settings.poll_time == 20
        credentials = settings.credentials()
        assert credentials.access_key == "AKID"
        assert credentials.secret_key == "secret"

    def test_credentials_missing(self):
        with pytest.raises(ConfigurationError):
            Settings(_env_file=None).credentials()

    def test_key_pair_must_be_complete(self):
        with pytest.raises(ValidationError, match="must be set together"):
            Settings(_env_file=None, access_key="AKID")

    @pytest.mark.parametrize("field,value", [
        ("poll_time", 0),
        ("poll_time", 21),
        ("region", " "),
        ("endpoint_url", "ftp://example.com"),
        ("log_level", "LOUD"),
        ("max_action_attempts", 0),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_log_level_normalised(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_secret_not_in_repr(self):
        settings = Settings(_env_file=None, access_key="AKID", secret_key="topsecret")
        assert "topsecret" not in repr(settings)
