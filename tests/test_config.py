"""Tests for environment-driven settings."""

import pytest

from tttagent.config import DEFAULT_MODEL, Settings


def test_defaults_without_environment():
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.model == DEFAULT_MODEL
    assert settings.openai_api_key is None


def test_values_are_read_from_environment():
    settings = Settings.from_env(
        {
            "TTT_HOST": "127.0.0.1",
            "TTT_PORT": "9000",
            "OPENAI_API_KEY": "sk-test",
            "TTT_MODEL": "gpt-test",
            "TTT_ORACLE_TIMEOUT": "2.5",
            "TTT_MAX_COMPLETION_TOKENS": "5",
            "TTT_LOG_LEVEL": "DEBUG",
        }
    )
    assert settings.host == "127.0.0.1"
    assert settings.port == 9000
    assert settings.openai_api_key == "sk-test"
    assert settings.model == "gpt-test"
    assert settings.oracle_timeout == 2.5
    assert settings.max_completion_tokens == 5
    assert settings.log_level == "debug"


def test_empty_api_key_counts_as_missing():
    assert Settings.from_env({"OPENAI_API_KEY": ""}).openai_api_key is None


@pytest.mark.parametrize("name", ["TTT_PORT", "TTT_ORACLE_TIMEOUT", "TTT_MAX_COMPLETION_TOKENS"])
def test_malformed_numbers_name_the_variable(name):
    with pytest.raises(ValueError, match=name):
        Settings.from_env({name: "soon"})
