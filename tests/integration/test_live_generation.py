"""Integration tests against a live provider.

Skipped automatically when no provider credentials are configured.
"""

import pytest

from layoutforge.config import get_available_llm_providers
from layoutforge.llm import (
    ChatCompletionConfig,
    ProgressKind,
    generate,
    generate_design_variations,
    provider_config_from_environment,
)


def _live_config():
    available = get_available_llm_providers()
    config = provider_config_from_environment(available[0])
    if isinstance(config, ChatCompletionConfig) and not config.model:
        pytest.skip("OPENAI_MODEL not set")
    return config


@pytest.mark.integration
@pytest.mark.asyncio
async def test_generate_short_document():
    """A short document yields a design and non-empty markdown."""
    events = []

    result = await generate(
        _live_config(),
        "clean tech blog, dark theme",
        "Release notes.\n\nWe shipped a faster sync engine this week.",
        on_progress=lambda kind, payload: events.append(kind),
    )

    assert result.design.id.startswith("gen-")
    assert result.content.strip()
    assert events[0] == ProgressKind.DESIGN
    assert events[-1] == ProgressKind.CONTENT


@pytest.mark.integration
@pytest.mark.asyncio
async def test_design_variations():
    """Variations come back as distinct validated designs."""
    designs = await generate_design_variations(
        _live_config(), "minimal paper journal", count=2
    )

    assert designs
    assert len({design.id for design in designs}) == len(designs)
