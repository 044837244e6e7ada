"""Tests for LLM generator module.

Covers:
- Prompt builders
- LayoutOrchestrator: design phase, content fold, progress events
- Design variations
- Config-driven module functions
"""

import json
import re
from unittest.mock import patch

import pytest

from layoutforge.llm.conftest import MockProviderClient, design_reply
from layoutforge.schema import (
    DEFAULT_DESIGN,
    DESIGN_SCHEMA,
    DESIGN_VARIATIONS_SCHEMA,
    LayoutKind,
    LayoutPreference,
)

from ..backend import (
    ConfigError,
    DesignGenerationError,
    ProviderError,
    SchemaNativeConfig,
)
from ..engine import CompletionEngine
from .lib import (
    LayoutOrchestrator,
    OrchestratorConfig,
    ProgressKind,
    generate,
    generate_design_variations,
)
from .prompts import (
    CONTENT_SYSTEM_INSTRUCTION,
    DESIGN_SYSTEM_INSTRUCTION,
    build_design_prompt,
    build_rewrite_prompt,
    build_variations_prompt,
)

# Three paragraphs that land in three segments with chunk_size=20
THREE_PARAGRAPHS = "Alpha paragraph.\nBeta paragraph.\nGamma paragraph."

GENERATED_ID = re.compile(r"^gen-[0-9a-f]{32}$")


def make_orchestrator(
    client: MockProviderClient, **config_overrides
) -> LayoutOrchestrator:
    config = OrchestratorConfig(**{"chunk_size": 20, **config_overrides})
    return LayoutOrchestrator(CompletionEngine(client), config)


class EventRecorder:
    """Collects progress events in arrival order."""

    def __init__(self):
        self.events = []

    def __call__(self, kind, payload):
        self.events.append((kind, payload))

    @property
    def kinds(self):
        return [kind for kind, _ in self.events]


# =============================================================================
# Prompt Tests
# =============================================================================


class TestPrompts:
    """Tests for prompt builders."""

    @pytest.mark.unit
    def test_design_prompt(self):
        """Design prompt carries style, layout and sample."""
        prompt = build_design_prompt(
            "dark tech blog", LayoutPreference.SEAMLESS, "Hello world"
        )
        assert prompt == (
            "STYLE REQUEST: dark tech blog\n"
            "LAYOUT PREFERENCE: seamless\n"
            "CONTENT SAMPLE: Hello world"
        )

    @pytest.mark.unit
    def test_rewrite_prompt_first_segment(self):
        """First segment is flagged as the start of the document."""
        prompt = build_rewrite_prompt("warm", "", "Some text\n", True)
        assert 'PREVIOUS CONTEXT (End of last segment): ""' in prompt
        assert "IS START OF DOCUMENT: true" in prompt
        assert prompt.endswith("TEXT SEGMENT TO REWRITE:\nSome text\n")

    @pytest.mark.unit
    def test_rewrite_prompt_later_segment(self):
        """Later segments carry context and are not flagged."""
        prompt = build_rewrite_prompt("warm", "## Intro", "More\n", False)
        assert 'PREVIOUS CONTEXT (End of last segment): "## Intro"' in prompt
        assert "IS START OF DOCUMENT: false" in prompt

    @pytest.mark.unit
    def test_variations_prompt(self):
        """Variations prompt names the count and the designs array."""
        prompt = build_variations_prompt("paper", LayoutPreference.AUTO, 3)
        assert "3 DISTINCT" in prompt
        assert '"designs"' in prompt
        assert "Layout Preference: auto" in prompt


# =============================================================================
# OrchestratorConfig Tests
# =============================================================================


class TestOrchestratorConfig:
    """Tests for OrchestratorConfig."""

    @pytest.mark.unit
    def test_defaults(self):
        """Default bounds match the documented values."""
        config = OrchestratorConfig()
        assert config.chunk_size == 1000
        assert config.sample_chars == 800
        assert config.context_tail == 300

    @pytest.mark.unit
    def test_from_environment(self, monkeypatch):
        """Bounds can be overridden through the environment."""
        monkeypatch.setenv("LAYOUTFORGE_CHUNK_SIZE", "250")
        monkeypatch.delenv("LAYOUTFORGE_SAMPLE_CHARS", raising=False)
        config = OrchestratorConfig.from_environment()
        assert config.chunk_size == 250
        assert config.sample_chars == 800

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "bounds",
        [
            {"chunk_size": 0},
            {"chunk_size": -5},
            {"sample_chars": -1},
            {"context_tail": -1},
        ],
        ids=["zero-chunk", "negative-chunk", "negative-sample", "negative-tail"],
    )
    def test_rejects_out_of_range_bounds(self, bounds):
        """Non-positive chunk sizes and negative bounds are rejected."""
        with pytest.raises(ValueError, match=next(iter(bounds))):
            OrchestratorConfig(**bounds)

    @pytest.mark.unit
    def test_zero_sample_and_tail_allowed(self):
        """Zero disables the sample and the carried context."""
        config = OrchestratorConfig(sample_chars=0, context_tail=0)
        assert config.sample_chars == 0
        assert config.context_tail == 0

    @pytest.mark.unit
    def test_from_environment_rejects_bad_bounds(self, monkeypatch):
        """Out-of-range environment values fail at construction."""
        monkeypatch.setenv("LAYOUTFORGE_CHUNK_SIZE", "0")
        with pytest.raises(ValueError, match="chunk_size"):
            OrchestratorConfig.from_environment()


# =============================================================================
# Design Phase Tests
# =============================================================================


class TestDesignPhase:
    """Tests for design generation and reuse."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generated_design_request(self):
        """Design request is a JSON-mode request against the design schema."""
        client = MockProviderClient([design_reply()])
        orchestrator = make_orchestrator(client, sample_chars=10)

        design = await orchestrator.generate_design(
            "dark tech", THREE_PARAGRAPHS, LayoutPreference.SEAMLESS
        )

        request = client.requests[0]
        assert request.json_mode is True
        assert request.output_schema is DESIGN_SCHEMA
        assert request.system_instruction == DESIGN_SYSTEM_INSTRUCTION
        assert request.prompt.endswith("CONTENT SAMPLE: " + THREE_PARAGRAPHS[:10])
        assert "LAYOUT PREFERENCE: seamless" in request.prompt
        assert design.theme_name == "Midnight Terminal"
        assert design.layout_type == LayoutKind.SEAMLESS.value

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generated_design_gets_fresh_id(self):
        """Every generated design receives a new unique id."""
        client = MockProviderClient(default=design_reply())
        orchestrator = make_orchestrator(client)

        first = await orchestrator.generate_design("style", "text")
        second = await orchestrator.generate_design("style", "text")

        assert GENERATED_ID.match(first.id)
        assert GENERATED_ID.match(second.id)
        assert first.id != second.id

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_model_supplied_id_replaced(self):
        """An id in the reply is overwritten."""
        client = MockProviderClient([design_reply(id="default")])
        design = await make_orchestrator(client).generate_design("style", "text")
        assert GENERATED_ID.match(design.id)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_salvaged_design_on_chat_client(self):
        """Text-only clients produce designs through salvage."""
        reply = "Here is your design:\n```json\n" + design_reply() + "\n```"
        client = MockProviderClient([reply], native_schema=False)

        design = await make_orchestrator(client).generate_design("style", "text")

        assert design.theme_name == "Midnight Terminal"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reuse_existing_design(self):
        """A saved design is reused with no call and one design event."""
        saved = DEFAULT_DESIGN.model_copy(update={"id": "saved-1"})
        client = MockProviderClient()
        recorder = EventRecorder()

        result = await make_orchestrator(client).generate(
            "style", "", on_progress=recorder, existing_design=saved
        )

        assert client.call_count == 0
        assert recorder.events == [(ProgressKind.DESIGN, saved)]
        assert result.design is saved
        assert result.content == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reuse_skips_design_request_only(self):
        """Reusing a design still rewrites the content."""
        saved = DEFAULT_DESIGN.model_copy(update={"id": "saved-1"})
        client = MockProviderClient(default="## Rewritten")

        await make_orchestrator(client).generate(
            "style", THREE_PARAGRAPHS, existing_design=saved
        )

        assert client.call_count == 3
        assert not any(request.json_mode for request in client.requests)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_placeholder_never_reused(self):
        """The placeholder design triggers generation."""
        client = MockProviderClient([design_reply()])

        result = await make_orchestrator(client).generate(
            "style", "", existing_design=DEFAULT_DESIGN
        )

        assert client.call_count == 1
        assert client.requests[0].json_mode is True
        assert result.design.id != DEFAULT_DESIGN.id

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            ProviderError("mock", "quota exceeded"),
            "this is not json",
            "[1, 2, 3]",
            design_reply(theme_name=""),
            design_reply(layout_type="carousel"),
        ],
        ids=["provider-error", "not-json", "not-object", "empty-field", "bad-layout"],
    )
    async def test_design_failure_stops_orchestration(self, reply):
        """Any design failure raises and no content phase runs."""
        client = MockProviderClient([reply], default="## never used")
        recorder = EventRecorder()

        with pytest.raises(DesignGenerationError):
            await make_orchestrator(client).generate(
                "style", THREE_PARAGRAPHS, on_progress=recorder
            )

        assert client.call_count == 1
        assert recorder.events == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_salvage_failure_is_design_failure(self):
        """Unsalvageable replies on text-only clients become design failures."""
        client = MockProviderClient(["I cannot do that."], native_schema=False)

        with pytest.raises(DesignGenerationError) as exc_info:
            await make_orchestrator(client).generate_design("style", "text")

        assert exc_info.value.__cause__ is not None


# =============================================================================
# Content Phase Tests
# =============================================================================


class TestContentPhase:
    """Tests for the ordered segment rewrite."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_events_in_order(self):
        """One design event, then one content event per segment."""
        client = MockProviderClient([design_reply(), "## One", "## Two", "## Three"])
        recorder = EventRecorder()

        result = await make_orchestrator(client).generate(
            "style", THREE_PARAGRAPHS, on_progress=recorder
        )

        assert recorder.kinds == [
            ProgressKind.DESIGN,
            ProgressKind.CONTENT,
            ProgressKind.CONTENT,
            ProgressKind.CONTENT,
        ]
        assert [payload for _, payload in recorder.events[1:]] == [
            "## One\n\n",
            "## One\n\n## Two\n\n",
            "## One\n\n## Two\n\n## Three\n\n",
        ]
        assert result.content == "## One\n\n## Two\n\n## Three\n\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_previous_output_carried_forward(self):
        """Each rewrite sees the previous segment's output."""
        client = MockProviderClient([design_reply(), "## First output", "Second"])

        await make_orchestrator(client).generate("style", THREE_PARAGRAPHS)

        second_prompt = client.requests[2].prompt
        third_prompt = client.requests[3].prompt
        assert '"## First output"' in second_prompt
        assert "Beta paragraph." in second_prompt
        assert '"Second"' in third_prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_echo_continuity(self):
        """An echoing model sees its own first output in the second prompt."""

        def echo(request):
            segment = request.prompt.split("TEXT SEGMENT TO REWRITE:\n", 1)[1]
            return "ECHO " + segment.strip()

        client = MockProviderClient(default=echo)
        saved = DEFAULT_DESIGN.model_copy(update={"id": "saved-1"})

        await make_orchestrator(client).generate(
            "style", THREE_PARAGRAPHS, existing_design=saved
        )

        assert '"ECHO Alpha paragraph."' in client.requests[1].prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_start_of_document_flag(self):
        """Only the first segment is marked as the start of the document."""
        client = MockProviderClient([design_reply()], default="ok")

        await make_orchestrator(client).generate("style", THREE_PARAGRAPHS)

        flags = [
            "IS START OF DOCUMENT: true" in request.prompt
            for request in client.requests[1:]
        ]
        assert flags == [True, False, False]
        assert 'PREVIOUS CONTEXT (End of last segment): ""' in client.requests[1].prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_content_requests_are_plain_text(self):
        """Rewrite requests use the content instruction without JSON mode."""
        client = MockProviderClient([design_reply()], default="ok")

        await make_orchestrator(client).generate("style", THREE_PARAGRAPHS)

        for request in client.requests[1:]:
            assert request.json_mode is False
            assert request.output_schema is None
            assert request.system_instruction == CONTENT_SYSTEM_INSTRUCTION

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_context_tail_bounded(self):
        """Only the tail of the previous output is sent."""
        client = MockProviderClient(["abcdefghij", "second"])
        orchestrator = make_orchestrator(client, context_tail=4)

        await orchestrator.rewrite_content("style", THREE_PARAGRAPHS)

        assert 'End of last segment): "ghij"' in client.requests[1].prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_zero_context_tail_sends_no_context(self):
        """A zero tail carries no previous output at all."""
        client = MockProviderClient(["FIRST-SEGMENT-OUTPUT", "second"])
        orchestrator = make_orchestrator(client, chunk_size=5, context_tail=0)

        await orchestrator.rewrite_content("style", "aaaa\nbbbb\n")

        assert client.call_count == 2
        second_prompt = client.requests[1].prompt
        assert 'PREVIOUS CONTEXT (End of last segment): ""' in second_prompt
        assert "FIRST-SEGMENT-OUTPUT" not in second_prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_segment_keeps_original(self):
        """A failing middle segment degrades to its original text."""
        client = MockProviderClient(
            [design_reply(), "## One", ProviderError("mock", "boom"), "## Three"]
        )
        recorder = EventRecorder()

        result = await make_orchestrator(client).generate(
            "style", THREE_PARAGRAPHS, on_progress=recorder
        )

        assert result.content == "## One\n\nBeta paragraph.\n\n\n## Three\n\n"
        assert recorder.kinds.count(ProgressKind.CONTENT) == 3
        assert recorder.events[-1][1] == result.content
        assert 'End of last segment): "Beta paragraph.\n"' in client.requests[3].prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_client_error_degrades(self):
        """Client exceptions are wrapped by the engine and degrade too."""
        client = MockProviderClient([ConnectionError("reset"), "## Two", "## Three"])

        content = await make_orchestrator(client).rewrite_content(
            "style", THREE_PARAGRAPHS
        )

        assert content.startswith("Alpha paragraph.\n\n\n## Two")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_reply_keeps_original(self):
        """Whitespace-only replies fall back to the segment text."""
        client = MockProviderClient(["   \n", "## Two", "## Three"])

        content = await make_orchestrator(client).rewrite_content(
            "style", THREE_PARAGRAPHS
        )

        assert content == "Alpha paragraph.\n\n\n## Two\n\n## Three\n\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_single_segment_with_default_bounds(self, sample_document):
        """A short document is rewritten in one request."""
        client = MockProviderClient(default="# Release Notes\n\nRewritten.")
        orchestrator = LayoutOrchestrator(CompletionEngine(client))

        content = await orchestrator.rewrite_content("style", sample_document)

        assert client.call_count == 1
        assert content == "# Release Notes\n\nRewritten.\n\n"
        assert "Offline edits now merge" in client.requests[0].prompt


# =============================================================================
# Design Variations Tests
# =============================================================================


def variations_reply(*designs: str) -> str:
    return json.dumps({"designs": [json.loads(design) for design in designs]})


class TestDesignVariations:
    """Tests for multi-design generation."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_variations_parsed(self):
        """Each variation is validated and gets an indexed id."""
        reply = variations_reply(
            design_reply(), design_reply(theme_name="Paper Bloom")
        )
        client = MockProviderClient([reply])

        designs = await make_orchestrator(client).generate_variations(
            "editorial", LayoutPreference.MULTI_CONTAINER_GRID, count=2
        )

        assert [d.theme_name for d in designs] == ["Midnight Terminal", "Paper Bloom"]
        assert designs[0].id.endswith("-0")
        assert designs[1].id.endswith("-1")
        request = client.requests[0]
        assert request.json_mode is True
        assert request.output_schema is DESIGN_VARIATIONS_SCHEMA
        assert "multi-container-grid" in request.prompt

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_count_mismatch_accepted(self):
        """Fewer designs than requested are still returned."""
        client = MockProviderClient([variations_reply(design_reply())])
        designs = await make_orchestrator(client).generate_variations("x", count=3)
        assert len(designs) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            "[" + design_reply() + "]",
            design_reply(),
            json.dumps({"designs": []}),
            json.dumps({"designs": ["not an object"]}),
            variations_reply(design_reply(layout_type="carousel")),
            ProviderError("mock", "down"),
        ],
        ids=["bare-array", "single-design", "empty", "non-object", "invalid", "provider"],
    )
    async def test_unexpected_shapes_rejected(self, reply):
        """Anything but a designs object of valid designs raises."""
        client = MockProviderClient([reply])
        with pytest.raises(DesignGenerationError):
            await make_orchestrator(client).generate_variations("x")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_count_must_be_positive(self):
        """A non-positive count is rejected before any call."""
        client = MockProviderClient()
        with pytest.raises(ValueError, match="count"):
            await make_orchestrator(client).generate_variations("x", count=0)
        assert client.call_count == 0


# =============================================================================
# Module Function Tests
# =============================================================================


class TestModuleFunctions:
    """Tests for the config-driven entry points."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_delegates_to_factory(self, monkeypatch):
        """generate builds a client from the config and orchestrates."""
        monkeypatch.delenv("LAYOUTFORGE_CHUNK_SIZE", raising=False)
        client = MockProviderClient([design_reply()], default="## Body")
        config = SchemaNativeConfig(api_key="k")
        recorder = EventRecorder()

        with patch(
            "layoutforge.llm.generator.lib.create_provider_client", return_value=client
        ) as factory:
            result = await generate(
                config, "style", "Short text.", "seamless", on_progress=recorder
            )

        factory.assert_called_once_with(config)
        assert result.content == "## Body\n\n"
        assert recorder.kinds == [ProgressKind.DESIGN, ProgressKind.CONTENT]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_variations_delegates_to_factory(self):
        """generate_design_variations forwards client options."""
        client = MockProviderClient([variations_reply(design_reply(), design_reply())])
        config = SchemaNativeConfig(api_key="k")

        with patch(
            "layoutforge.llm.generator.lib.create_provider_client", return_value=client
        ) as factory:
            designs = await generate_design_variations(config, "style", timeout=5.0)

        factory.assert_called_once_with(config, timeout=5.0)
        assert len(designs) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_credentials(self, clean_llm_env):
        """Incomplete configuration fails before any request."""
        with pytest.raises(ConfigError):
            await generate(SchemaNativeConfig(), "style", "text")
