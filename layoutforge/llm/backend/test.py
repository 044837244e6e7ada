"""Tests for provider client implementations."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from google.genai import errors as genai_errors

from layoutforge.schema import DESIGN_SCHEMA

from .base import (
    AuthenticationError,
    CompletionRequest,
    ConfigError,
    DesignGenerationError,
    LLMError,
    ProviderError,
    RateLimitError,
)
from .factory import create_provider_client, provider_config_from_environment
from .gemini import SchemaNativeClient
from .model_spec import (
    DEFAULT_GEMINI_MODEL,
    ChatCompletionConfig,
    ProviderKind,
    SchemaNativeConfig,
)
from .openai import ChatCompletionClient


async def _aiter(items):
    for item in items:
        yield item


def _chat_response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _chat_chunk(content):
    delta = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


class TestProviderConfig:
    """Tests for provider configuration variants."""

    @pytest.mark.unit
    def test_kinds(self):
        """Each variant reports its kind."""
        assert SchemaNativeConfig().kind == ProviderKind.SCHEMA_NATIVE
        config = ChatCompletionConfig(api_key="k", model="m")
        assert config.kind == ProviderKind.CHAT_COMPLETION
        assert config.base_url is None

    @pytest.mark.unit
    def test_kind_values(self):
        """Kind values match their wire names."""
        assert ProviderKind("schema-native") == ProviderKind.SCHEMA_NATIVE
        assert ProviderKind("chat-completion") == ProviderKind.CHAT_COMPLETION


class TestCompletionRequest:
    """Tests for CompletionRequest."""

    @pytest.mark.unit
    def test_defaults(self):
        """Only the prompt is required."""
        request = CompletionRequest(prompt="hello")
        assert request.system_instruction is None
        assert request.output_schema is None
        assert request.json_mode is False

    @pytest.mark.unit
    def test_frozen(self):
        """Requests are immutable."""
        request = CompletionRequest(prompt="hello")
        with pytest.raises(AttributeError):
            request.prompt = "changed"


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.unit
    def test_hierarchy(self):
        """All errors are rooted at LLMError."""
        assert issubclass(ConfigError, LLMError)
        assert issubclass(ProviderError, LLMError)
        assert issubclass(RateLimitError, ProviderError)
        assert issubclass(AuthenticationError, ProviderError)
        assert issubclass(DesignGenerationError, LLMError)

    @pytest.mark.unit
    def test_provider_error_fields(self):
        """ProviderError carries provider and message."""
        error = ProviderError("openai", "boom")
        assert error.provider == "openai"
        assert error.message == "boom"
        assert str(error) == "openai: boom"

    @pytest.mark.unit
    def test_config_error_field(self):
        """ConfigError names the offending field."""
        assert ConfigError("missing", field="model").field == "model"


class TestCreateProviderClient:
    """Tests for create_provider_client factory."""

    @pytest.mark.unit
    def test_schema_native_explicit_key(self, clean_llm_env):
        """Explicit key creates a Gemini client with the default model."""
        client = create_provider_client(SchemaNativeConfig(api_key="g-key"))
        assert isinstance(client, SchemaNativeClient)
        assert client.provider == "gemini"
        assert client.model_name == DEFAULT_GEMINI_MODEL
        assert client.supports_native_schema is True

    @pytest.mark.unit
    def test_schema_native_env_key(self, clean_llm_env, monkeypatch):
        """GEMINI_API_KEY is used when no key is passed."""
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
        client = create_provider_client(SchemaNativeConfig())
        assert client.model_name == "gemini-2.5-pro"

    @pytest.mark.unit
    def test_schema_native_api_key_fallback(self, clean_llm_env, monkeypatch):
        """API_KEY is the process-wide fallback."""
        monkeypatch.setenv("API_KEY", "fallback-key")
        client = create_provider_client(SchemaNativeConfig())
        assert isinstance(client, SchemaNativeClient)

    @pytest.mark.unit
    def test_schema_native_missing_key(self, clean_llm_env):
        """Missing key raises ConfigError naming api_key."""
        with pytest.raises(ConfigError) as exc_info:
            create_provider_client(SchemaNativeConfig())
        assert exc_info.value.field == "api_key"

    @pytest.mark.unit
    def test_chat_completion(self, clean_llm_env):
        """Explicit key and model create a chat-completion client."""
        client = create_provider_client(
            ChatCompletionConfig(api_key="sk-test", model="gpt-4.1-mini")
        )
        assert isinstance(client, ChatCompletionClient)
        assert client.provider == "openai"
        assert client.model_name == "gpt-4.1-mini"
        assert client.base_url == "https://api.openai.com/v1"
        assert client.supports_native_schema is False

    @pytest.mark.unit
    def test_chat_completion_custom_base_url(self, clean_llm_env):
        """A custom endpoint is kept."""
        client = create_provider_client(
            ChatCompletionConfig(
                api_key="sk-test",
                model="deepseek-chat",
                base_url="https://api.deepseek.com/v1",
            )
        )
        assert client.base_url == "https://api.deepseek.com/v1"

    @pytest.mark.unit
    def test_chat_completion_ignores_env_key(self, clean_llm_env, monkeypatch):
        """The chat-completion key must be explicit in the config."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        with pytest.raises(ConfigError) as exc_info:
            create_provider_client(ChatCompletionConfig(api_key=None, model="m"))
        assert exc_info.value.field == "api_key"

    @pytest.mark.unit
    def test_chat_completion_missing_model(self, clean_llm_env):
        """A missing model raises ConfigError naming model."""
        with pytest.raises(ConfigError) as exc_info:
            create_provider_client(ChatCompletionConfig(api_key="sk", model=None))
        assert exc_info.value.field == "model"

    @pytest.mark.unit
    def test_unsupported_config(self):
        """Unknown config objects are rejected."""
        with pytest.raises(ConfigError):
            create_provider_client(object())


class TestProviderConfigFromEnvironment:
    """Tests for provider_config_from_environment."""

    @pytest.mark.unit
    def test_default_kind_is_schema_native(self, clean_llm_env):
        """LLM_PROVIDER defaults to schema-native."""
        config = provider_config_from_environment()
        assert isinstance(config, SchemaNativeConfig)

    @pytest.mark.unit
    def test_chat_completion_from_env(self, clean_llm_env, monkeypatch):
        """Chat-completion values are read from the environment."""
        monkeypatch.setenv("LLM_PROVIDER", "chat-completion")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1-mini")
        config = provider_config_from_environment()
        assert config == ChatCompletionConfig(
            api_key="sk-env",
            model="gpt-4.1-mini",
            base_url="https://api.openai.com/v1",
        )

    @pytest.mark.unit
    def test_explicit_values_win(self, clean_llm_env, monkeypatch):
        """Explicit arguments take priority over the environment."""
        monkeypatch.setenv("OPENAI_MODEL", "env-model")
        config = provider_config_from_environment(
            ProviderKind.CHAT_COMPLETION, api_key="sk", model="cli-model"
        )
        assert config.model == "cli-model"
        assert config.api_key == "sk"

    @pytest.mark.unit
    def test_unknown_kind(self, clean_llm_env):
        """Unknown kinds raise ConfigError."""
        with pytest.raises(ConfigError, match="Unknown provider kind"):
            provider_config_from_environment("carrier-pigeon")


class TestSchemaNativeClient:
    """Tests for the Gemini client with a mocked SDK client."""

    @staticmethod
    def _client_with(sdk: MagicMock) -> SchemaNativeClient:
        client = SchemaNativeClient(api_key="test-key")
        client._client = sdk
        return client

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_plain(self):
        """Plain requests send prompt and system instruction."""
        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text="  raw text  ")
        )
        client = self._client_with(sdk)

        result = await client.generate(
            CompletionRequest(prompt="Hi", system_instruction="Be brief")
        )

        assert result == "  raw text  "
        kwargs = sdk.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == DEFAULT_GEMINI_MODEL
        assert kwargs["contents"] == "Hi"
        assert kwargs["config"].system_instruction == "Be brief"
        assert kwargs["config"].response_mime_type is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_json_mode_sends_schema(self):
        """JSON requests use application/json and the native schema."""
        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text='{"a": 1}')
        )
        client = self._client_with(sdk)

        await client.generate(
            CompletionRequest(prompt="p", output_schema=DESIGN_SCHEMA, json_mode=True)
        )

        config = sdk.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"
        assert config.response_schema is not None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_no_config_when_bare(self):
        """A bare prompt sends no generation config."""
        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(
            return_value=SimpleNamespace(text=None)
        )
        client = self._client_with(sdk)

        assert await client.generate(CompletionRequest(prompt="p")) == ""
        assert sdk.aio.models.generate_content.call_args.kwargs["config"] is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream_yields_non_empty(self):
        """Streaming skips empty chunks and keeps order."""
        sdk = MagicMock()
        chunks = [SimpleNamespace(text=t) for t in ("Hel", "", None, "lo")]
        sdk.aio.models.generate_content_stream = AsyncMock(
            return_value=_aiter(chunks)
        )
        client = self._client_with(sdk)

        pieces = [p async for p in client.stream(CompletionRequest(prompt="p"))]
        assert pieces == ["Hel", "lo"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generic_error_wrapped(self):
        """Unknown failures become ProviderError."""
        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("down"))
        client = self._client_with(sdk)

        with pytest.raises(ProviderError) as exc_info:
            await client.generate(CompletionRequest(prompt="p"))
        assert exc_info.value.provider == "gemini"
        assert "down" in exc_info.value.message

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("code", "expected"),
        [(429, RateLimitError), (401, AuthenticationError), (500, ProviderError)],
    )
    async def test_api_error_mapping(self, code, expected):
        """HTTP status codes map onto the error hierarchy."""
        sdk = MagicMock()
        error = genai_errors.APIError(code, {"error": {"message": "nope"}})
        sdk.aio.models.generate_content = AsyncMock(side_effect=error)
        client = self._client_with(sdk)

        with pytest.raises(expected):
            await client.generate(CompletionRequest(prompt="p"))


class TestChatCompletionClient:
    """Tests for the chat-completion client with a mocked SDK client."""

    @staticmethod
    def _client_with(sdk: MagicMock) -> ChatCompletionClient:
        client = ChatCompletionClient(api_key="sk-test", model="gpt-4.1-mini")
        client._client = sdk
        return client

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_messages(self):
        """System instruction becomes a system message."""
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=_chat_response("ok"))
        client = self._client_with(sdk)

        result = await client.generate(
            CompletionRequest(prompt="Hi", system_instruction="Be brief")
        )

        assert result == "ok"
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Hi"},
        ]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_without_system(self):
        """Without a system instruction only the user message is sent."""
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=_chat_response(None))
        client = self._client_with(sdk)

        assert await client.generate(CompletionRequest(prompt="Hi")) == ""
        messages = sdk.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [{"role": "user", "content": "Hi"}]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream(self):
        """Deltas are yielded in order; empty deltas are skipped."""
        sdk = MagicMock()
        chunks = [
            _chat_chunk("a"),
            _chat_chunk(None),
            SimpleNamespace(choices=[]),
            _chat_chunk("b"),
        ]
        sdk.chat.completions.create = AsyncMock(return_value=_aiter(chunks))
        client = self._client_with(sdk)

        pieces = [p async for p in client.stream(CompletionRequest(prompt="p"))]

        assert pieces == ["a", "b"]
        assert sdk.chat.completions.create.call_args.kwargs["stream"] is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_mid_stream_error_wrapped(self):
        """Errors raised while iterating become ProviderError."""

        async def broken():
            yield _chat_chunk("partial")
            raise RuntimeError("connection reset")

        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=broken())
        client = self._client_with(sdk)

        received = []
        with pytest.raises(ProviderError, match="connection reset"):
            async for piece in client.stream(CompletionRequest(prompt="p")):
                received.append(piece)
        assert received == ["partial"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rate_limit_mapping(self):
        """openai.RateLimitError becomes RateLimitError."""
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(429, request=request)
        error = openai.RateLimitError("slow down", response=response, body=None)

        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(side_effect=error)
        client = self._client_with(sdk)

        with pytest.raises(RateLimitError) as exc_info:
            await client.generate(CompletionRequest(prompt="p"))
        assert exc_info.value.provider == "openai"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generic_error_wrapped(self):
        """Unknown failures become ProviderError."""
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(side_effect=ValueError("bad"))
        client = self._client_with(sdk)

        with pytest.raises(ProviderError, match="bad"):
            await client.generate(CompletionRequest(prompt="p"))

    @pytest.mark.unit
    def test_lazy_client(self):
        """The SDK client is created on first use only."""
        client = ChatCompletionClient(
            api_key="sk-test", model="m", base_url="http://localhost:8000/v1"
        )
        assert client._client is None
        sdk = client._get_client()
        assert isinstance(sdk, openai.AsyncOpenAI)
        assert client._get_client() is sdk
