# tests/unit/transport/test_config.py

import pytest

from groqai.errors import InvalidCredentialError
from groqai.transport.config import DEFAULT_BASE_URL, ClientConfig, validate_api_key


class TestValidateApiKey:
    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_empty_key(self, key: str | None) -> None:
        with pytest.raises(InvalidCredentialError, match="empty"):
            validate_api_key(key)

    def test_wrong_prefix(self) -> None:
        with pytest.raises(InvalidCredentialError, match="gsk_"):
            validate_api_key("sk-openai-key")

    def test_strips_whitespace(self) -> None:
        assert validate_api_key("  gsk_abc\n") == "gsk_abc"


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig(api_key="gsk_abc")

        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == 30.0
        assert config.max_retries == 3
        assert config.proxy is None

    def test_key_is_not_in_repr(self) -> None:
        assert "gsk_abc" not in repr(ClientConfig(api_key="gsk_abc"))

    def test_base_url_gets_trailing_slash(self) -> None:
        config = ClientConfig(api_key="gsk_abc", base_url="http://localhost:9000/v1")

        assert config.base_url == "http://localhost:9000/v1/"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"timeout": 0},
            {"max_retries": 0},
            {"backoff_base": -1},
            {"backoff_multiplier": 0.5},
            {"jitter_ratio": 1.5},
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValueError):
            ClientConfig(api_key="gsk_abc", **overrides)

    def test_invalid_key_fails_before_anything_else(self) -> None:
        with pytest.raises(InvalidCredentialError):
            ClientConfig(api_key="nope")


class TestFromEnv:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GROQ_API_KEY", "gsk_from_env")
        monkeypatch.setenv("GROQ_BASE_URL", "http://proxy.local/openai/v1")
        monkeypatch.setenv("GROQ_TIMEOUT", "12.5")
        monkeypatch.setenv("GROQ_PROXY", "http://corp-proxy:3128")
        monkeypatch.setenv("GROQ_MAX_RETRIES", "5")

        config = ClientConfig.from_env()

        assert config.api_key == "gsk_from_env"
        assert config.base_url == "http://proxy.local/openai/v1/"
        assert config.timeout == 12.5
        assert config.proxy == "http://corp-proxy:3128"
        assert config.max_retries == 5

    def test_overrides_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GROQ_API_KEY", "gsk_from_env")
        monkeypatch.setenv("GROQ_TIMEOUT", "12.5")

        config = ClientConfig.from_env(timeout=3.0)

        assert config.timeout == 3.0

    def test_missing_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        with pytest.raises(InvalidCredentialError):
            ClientConfig.from_env()
