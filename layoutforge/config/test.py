"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    get_gemini_api_key,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("LAYOUTFORGE_CHUNK_SIZE", raising=False)
        assert get_environment(EnvVar.CHUNK_SIZE) == 1000

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("LAYOUTFORGE_CHUNK_SIZE", "9999")
        assert get_environment(EnvVar.CHUNK_SIZE, override=500) == 500

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("LAYOUTFORGE_CHUNK_SIZE", "1234")
        result = get_environment(EnvVar.CHUNK_SIZE)
        assert result == 1234
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("LLM_TIMEOUT", "12.5")
        assert get_environment(EnvVar.LLM_TIMEOUT) == 12.5

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("LAYOUTFORGE_CHUNK_SIZE", "not-a-number")
        assert get_environment(EnvVar.CHUNK_SIZE) == 1000

    @pytest.mark.unit
    def test_invalid_float_returns_default(self, monkeypatch):
        """Invalid float value returns default."""
        monkeypatch.setenv("LLM_TIMEOUT", "soon")
        assert get_environment(EnvVar.LLM_TIMEOUT) == 60.0

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String type returns as-is."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")
        result = get_environment(EnvVar.OPENAI_API_KEY)
        assert result == "sk-test-key"
        assert isinstance(result, str)

    @pytest.mark.unit
    def test_none_default_for_api_keys(self, monkeypatch):
        """API keys default to None when not set."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert get_environment(EnvVar.OPENAI_API_KEY) is None

    @pytest.mark.unit
    def test_blank_value_treated_as_unset(self, monkeypatch):
        """Whitespace-only values fall back to the default."""
        monkeypatch.setenv("OPENAI_API_KEY", "   ")
        assert get_environment(EnvVar.OPENAI_API_KEY) is None

    @pytest.mark.unit
    def test_base_url_default(self, monkeypatch):
        """Chat-completion base URL defaults to the public endpoint."""
        monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
        assert get_environment(EnvVar.OPENAI_BASE_URL) == "https://api.openai.com/v1"


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.CHUNK_SIZE)
        assert isinstance(info, EnvConfig)
        assert info.name == "LAYOUTFORGE_CHUNK_SIZE"
        assert info.default == 1000
        assert info.var_type is int
        assert info.category == "generation"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        info = get_environment_info(EnvVar.GEMINI_API_KEY)
        assert "Gemini" in info.description

    @pytest.mark.unit
    def test_declared_types_are_converted(self):
        """Every variable uses a type get_environment converts."""
        for var in EnvVar:
            assert get_environment_info(var).var_type in (str, int, float, bool)


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_list_all(self):
        """No category returns every variable."""
        assert len(list_environment_variables()) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Category filter returns only matching variables."""
        llm_vars = list_environment_variables("llm")
        assert EnvVar.OPENAI_API_KEY in llm_vars
        assert EnvVar.CHUNK_SIZE not in llm_vars
        assert all(v.value.category == "llm" for v in llm_vars)

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        """Unknown category yields nothing."""
        assert list_environment_variables("docker") == []


class TestCredentialHelpers:
    """Tests for credential presence helpers."""

    @pytest.mark.unit
    def test_gemini_key_prefers_explicit(self, monkeypatch):
        """Explicit key wins over environment."""
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        assert get_gemini_api_key("explicit") == "explicit"

    @pytest.mark.unit
    def test_gemini_key_falls_back_to_api_key(self, monkeypatch):
        """API_KEY is the process-wide fallback."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "fallback")
        assert get_gemini_api_key() == "fallback"

    @pytest.mark.unit
    def test_available_providers(self, monkeypatch):
        """Providers are listed by key presence only."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_available_llm_providers() == ["chat-completion"]

    @pytest.mark.unit
    def test_no_providers(self, monkeypatch):
        """Empty list when no credentials are present."""
        for name in ("GEMINI_API_KEY", "API_KEY", "OPENAI_API_KEY"):
            monkeypatch.delenv(name, raising=False)
        assert get_available_llm_providers() == []
