"""Tests for the completion engine."""

import json
from unittest.mock import patch

import pytest

from layoutforge.llm.backend import (
    ChatCompletionConfig,
    CompletionRequest,
    ConfigError,
    ProviderError,
    SchemaNativeConfig,
)
from layoutforge.llm.conftest import MockProviderClient
from layoutforge.salvage import ExtractionError, ParseError
from layoutforge.schema import DESIGN_SCHEMA

from .lib import JSON_BLOCK_DIRECTIVE, CompletionEngine, build_json_instruction
from .lib import complete as complete_with_config
from .lib import stream as stream_with_config

JSON_REQUEST = CompletionRequest(
    prompt="Design something",
    system_instruction="You are a designer.",
    output_schema=DESIGN_SCHEMA,
    json_mode=True,
)


class TestBuildJsonInstruction:
    """Tests for system instruction augmentation."""

    @pytest.mark.unit
    def test_directive_repeated(self):
        """The fenced-block directive appears at least three times."""
        text = build_json_instruction("Be helpful.", DESIGN_SCHEMA)
        assert text.count(JSON_BLOCK_DIRECTIVE) >= 3

    @pytest.mark.unit
    def test_includes_original_and_schema(self):
        """Original instruction and schema contract are kept."""
        text = build_json_instruction("Be helpful.", DESIGN_SCHEMA)
        assert "Be helpful." in text
        assert "- heading2: string, required" in text

    @pytest.mark.unit
    def test_without_instruction_or_schema(self):
        """Directives alone are produced when nothing else is given."""
        text = build_json_instruction(None)
        assert "JSON SCHEMA" not in text
        assert text.count(JSON_BLOCK_DIRECTIVE) >= 3


class TestSchemaNativePath:
    """Requests through a client with native schema support."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_json_returned_verbatim(self):
        """Native JSON replies are not salvaged or trimmed."""
        raw = '  {"theme_name": "x"}\n'
        client = MockProviderClient([raw], native_schema=True)

        result = await CompletionEngine(client).complete(JSON_REQUEST)

        assert result == raw
        assert client.requests[0] == JSON_REQUEST

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_text_trimmed(self):
        """Non-JSON replies are trimmed."""
        client = MockProviderClient(["\n  ## Hello  \n"])
        result = await CompletionEngine(client).complete(CompletionRequest(prompt="p"))
        assert result == "## Hello"


class TestChatCompletionPath:
    """Requests through a text-only client."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_system_instruction_augmented(self):
        """JSON mode wraps the system instruction, prompt unchanged."""
        client = MockProviderClient(['```json\n{"a": 1}\n```'], native_schema=False)

        await CompletionEngine(client).complete(JSON_REQUEST)

        sent = client.requests[0]
        assert sent.prompt == JSON_REQUEST.prompt
        assert sent.system_instruction != JSON_REQUEST.system_instruction
        assert "You are a designer." in sent.system_instruction
        assert sent.system_instruction.count(JSON_BLOCK_DIRECTIVE) >= 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_salvaged_and_serialized(self):
        """Prose-wrapped replies are salvaged and re-serialized."""
        reply = "Sure! Here you go:\n```json\n{theme: 'Neon', n: 1,}\n```\nEnjoy"
        client = MockProviderClient([reply], native_schema=False)

        result = await CompletionEngine(client).complete(JSON_REQUEST)

        assert json.loads(result) == {"theme": "Neon", "n": 1}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_ascii_preserved(self):
        """Serialized output keeps non-ASCII characters."""
        client = MockProviderClient(['{"title": "🚀 启动"}'], native_schema=False)
        result = await CompletionEngine(client).complete(JSON_REQUEST)
        assert "🚀 启动" in result

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_plain_text_not_augmented(self):
        """Non-JSON requests pass through unchanged."""
        request = CompletionRequest(prompt="p", system_instruction="editor")
        client = MockProviderClient([" text "], native_schema=False)

        result = await CompletionEngine(client).complete(request)

        assert result == "text"
        assert client.requests[0] == request

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_extraction_failure_propagates(self):
        """Replies without JSON raise ExtractionError."""
        client = MockProviderClient(["I cannot help with that."], native_schema=False)
        with pytest.raises(ExtractionError):
            await CompletionEngine(client).complete(JSON_REQUEST)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_parse_failure_propagates(self):
        """Unrepairable replies raise ParseError."""
        client = MockProviderClient(["{broken :: json"], native_schema=False)
        with pytest.raises(ParseError):
            await CompletionEngine(client).complete(JSON_REQUEST)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_finite_number_rejected(self):
        """NaN in a salvaged reply never reaches the serialized output."""
        client = MockProviderClient(['{"a": NaN}'], native_schema=False)
        with pytest.raises(ParseError):
            await CompletionEngine(client).complete(JSON_REQUEST)


class TestErrorWrapping:
    """Provider failures surface as ProviderError."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_exception_wrapped(self):
        """Arbitrary client exceptions are wrapped."""
        client = MockProviderClient([ConnectionError("socket closed")])

        with pytest.raises(ProviderError) as exc_info:
            await CompletionEngine(client).complete(CompletionRequest(prompt="p"))

        assert exc_info.value.provider == "mock"
        assert "socket closed" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_provider_error_passes_through(self):
        """ProviderError from the client is not double-wrapped."""
        original = ProviderError("mock", "quota")
        client = MockProviderClient([original])

        with pytest.raises(ProviderError) as exc_info:
            await CompletionEngine(client).complete(CompletionRequest(prompt="p"))

        assert exc_info.value is original


class TestStreaming:
    """Tests for streamed completions."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fragments_in_order(self):
        """Fragments arrive in order and join to the full reply."""
        client = MockProviderClient(["Hello streaming world"], stream_chunk_size=5)
        engine = CompletionEngine(client)

        fragments = [f async for f in engine.stream(CompletionRequest(prompt="p"))]

        assert len(fragments) > 1
        assert "".join(fragments) == "Hello streaming world"
        assert all(fragments)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_json_stream_augmented_not_salvaged(self):
        """JSON streams get directives but raw fragments."""
        reply = '```json\n{"a": 1}\n```'
        client = MockProviderClient([reply], native_schema=False)

        fragments = [f async for f in CompletionEngine(client).stream(JSON_REQUEST)]

        assert "".join(fragments) == reply
        sent = client.requests[0].system_instruction
        assert sent.count(JSON_BLOCK_DIRECTIVE) >= 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream_error_wrapped(self):
        """Failures while streaming become ProviderError."""
        client = MockProviderClient([RuntimeError("reset")])
        with pytest.raises(ProviderError, match="reset"):
            async for _ in CompletionEngine(client).stream(CompletionRequest(prompt="p")):
                pass


class TestConfigEntryPoints:
    """Tests for the config-driven module functions."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_complete_validates_config_first(self, clean_llm_env):
        """Missing credentials fail before any client is used."""
        with pytest.raises(ConfigError) as exc_info:
            await complete_with_config(SchemaNativeConfig(), CompletionRequest("p"))
        assert exc_info.value.field == "api_key"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stream_validates_config(self, clean_llm_env):
        """Streaming reports missing fields too."""
        config = ChatCompletionConfig(api_key="sk", model=None)
        with pytest.raises(ConfigError) as exc_info:
            async for _ in stream_with_config(config, CompletionRequest("p")):
                pass
        assert exc_info.value.field == "model"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_complete_delegates_to_factory(self):
        """The module function builds a client and runs the request."""
        client = MockProviderClient(["  done  "])
        with patch(
            "layoutforge.llm.engine.lib.create_provider_client", return_value=client
        ) as factory:
            result = await complete_with_config(
                SchemaNativeConfig(api_key="k"), CompletionRequest("p"), timeout=5.0
            )

        assert result == "done"
        factory.assert_called_once_with(SchemaNativeConfig(api_key="k"), timeout=5.0)
