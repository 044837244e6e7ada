"""LayoutOrchestrator for LLM-powered document styling.

Turns a style request plus free-form text into a reusable design system and
a rewritten markdown document, reporting partial results as it goes.
"""

import json
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ...chunker import ContentSegment, split
from ...config import EnvVar, get_environment
from ...salvage import SalvageError
from ...schema import (
    DESIGN_SCHEMA,
    DESIGN_VARIATIONS_SCHEMA,
    DesignSystem,
    LayoutPreference,
)
from ..backend import (
    CompletionRequest,
    DesignGenerationError,
    LLMError,
    ProviderConfig,
    ProviderError,
    create_provider_client,
)
from ..engine import CompletionEngine
from .prompts import (
    CONTENT_SYSTEM_INSTRUCTION,
    DESIGN_SYSTEM_INSTRUCTION,
    build_design_prompt,
    build_rewrite_prompt,
    build_variations_prompt,
)

logger = logging.getLogger(__name__)


class ProgressKind(str, Enum):
    """Kinds of progress notifications."""

    DESIGN = "design"
    CONTENT = "content"


# Receives (ProgressKind.DESIGN, DesignSystem) or (ProgressKind.CONTENT, str)
ProgressCallback = Callable[[ProgressKind, Any], None]


@dataclass
class OrchestratorConfig:
    """Configuration for LayoutOrchestrator.

    Attributes:
        chunk_size: Maximum characters per content segment.
        sample_chars: Characters of input sent as the design content sample.
        context_tail: Characters of the previous output passed to the next rewrite.

    Raises:
        ValueError: If chunk_size is not positive or another bound is negative.
    """

    chunk_size: int = 1000
    sample_chars: int = 800
    context_tail: int = 300

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.sample_chars < 0:
            raise ValueError(
                f"sample_chars must not be negative, got {self.sample_chars}"
            )
        if self.context_tail < 0:
            raise ValueError(
                f"context_tail must not be negative, got {self.context_tail}"
            )

    @classmethod
    def from_environment(cls) -> "OrchestratorConfig":
        """Build a configuration from LAYOUTFORGE_* environment variables."""
        return cls(
            chunk_size=get_environment(EnvVar.CHUNK_SIZE),
            sample_chars=get_environment(EnvVar.SAMPLE_CHARS),
            context_tail=get_environment(EnvVar.CONTEXT_TAIL),
        )


@dataclass
class OrchestrationResult:
    """Complete output from one orchestration.

    Attributes:
        design: Design system used for the document.
        content: Rewritten segments in order, each followed by a blank line.
    """

    design: DesignSystem
    content: str


@dataclass(frozen=True)
class ContentState:
    """Accumulator threaded through the content phase.

    Attributes:
        content: Concatenated output so far.
        previous_context: Full output of the last processed segment.
    """

    content: str = ""
    previous_context: str = ""


def _new_design_id(index: int | None = None) -> str:
    suffix = uuid.uuid4().hex
    return f"gen-{suffix}" if index is None else f"gen-{suffix}-{index}"


class LayoutOrchestrator:
    """Orchestrates design generation and segment-by-segment rewriting.

    Pipeline:
        1. Reuse the existing design, or generate one from a content sample
        2. Split the text into bounded segments
        3. Rewrite each segment in order, carrying the previous output forward
        4. Fall back to the original segment when a rewrite fails

    Example:
        >>> engine = CompletionEngine(create_provider_client(SchemaNativeConfig()))
        >>> orchestrator = LayoutOrchestrator(engine)
        >>> result = await orchestrator.generate("tech blog, dark theme", text)
        >>> print(result.design.theme_name)
    """

    def __init__(
        self,
        engine: CompletionEngine,
        config: OrchestratorConfig | None = None,
    ):
        """Initialize LayoutOrchestrator.

        Args:
            engine: Completion engine used for every model call.
            config: Orchestration bounds. Defaults to OrchestratorConfig().
        """
        self._engine = engine
        self._config = config or OrchestratorConfig()

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    async def generate(
        self,
        style_prompt: str,
        full_text: str,
        layout_preference: LayoutPreference | str = LayoutPreference.AUTO,
        on_progress: ProgressCallback | None = None,
        existing_design: DesignSystem | None = None,
    ) -> OrchestrationResult:
        """Produce a design and a rewritten document.

        Args:
            style_prompt: Free-form style request.
            full_text: Source text to restyle.
            layout_preference: Layout hint for a generated design.
            on_progress: Optional callback receiving (kind, payload).
            existing_design: Design to reuse. The placeholder is never reused.

        Returns:
            OrchestrationResult with the design and accumulated content.

        Raises:
            DesignGenerationError: If a new design could not be produced.
        """
        preference = LayoutPreference(layout_preference)

        if existing_design is not None and not existing_design.is_placeholder:
            logger.info(f"Reusing existing design '{existing_design.id}'")
            design = existing_design
        else:
            design = await self.generate_design(style_prompt, full_text, preference)

        if on_progress is not None:
            on_progress(ProgressKind.DESIGN, design)

        content = await self.rewrite_content(style_prompt, full_text, on_progress)
        return OrchestrationResult(design=design, content=content)

    async def generate_design(
        self,
        style_prompt: str,
        full_text: str,
        layout_preference: LayoutPreference | str = LayoutPreference.AUTO,
    ) -> DesignSystem:
        """Generate one design system from the style request and a sample.

        Args:
            style_prompt: Free-form style request.
            full_text: Source text; only its beginning is sent.
            layout_preference: Layout hint.

        Returns:
            Validated DesignSystem with a fresh id.

        Raises:
            DesignGenerationError: On any provider, parse or validation failure.
        """
        sample = full_text[: self._config.sample_chars]
        request = CompletionRequest(
            prompt=build_design_prompt(
                style_prompt, LayoutPreference(layout_preference), sample
            ),
            system_instruction=DESIGN_SYSTEM_INSTRUCTION,
            output_schema=DESIGN_SCHEMA,
            json_mode=True,
        )

        try:
            raw = await self._engine.complete(request)
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise DesignGenerationError(
                    f"Design response must be a JSON object, got {type(data).__name__}"
                )
            data["id"] = _new_design_id()
            design = DesignSystem.model_validate(data)
        except DesignGenerationError:
            raise
        except (LLMError, ValueError) as e:
            logger.error(f"Design generation failed: {e}")
            raise DesignGenerationError(f"Design generation failed: {e}") from e

        logger.info(f"Generated design '{design.theme_name}' ({design.id})")
        return design

    async def generate_variations(
        self,
        style_prompt: str,
        layout_preference: LayoutPreference | str = LayoutPreference.AUTO,
        count: int = 2,
    ) -> list[DesignSystem]:
        """Generate several distinct design systems in one request.

        Args:
            style_prompt: Free-form style request.
            layout_preference: Layout hint shared by all variations.
            count: Number of variations to ask for.

        Returns:
            Validated designs, each with a fresh id.

        Raises:
            ValueError: If count is not positive.
            DesignGenerationError: On any failure or an unexpected response shape.
        """
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")

        request = CompletionRequest(
            prompt=build_variations_prompt(
                style_prompt, LayoutPreference(layout_preference), count
            ),
            system_instruction=DESIGN_SYSTEM_INSTRUCTION,
            output_schema=DESIGN_VARIATIONS_SCHEMA,
            json_mode=True,
        )

        try:
            raw = await self._engine.complete(request)
            data = json.loads(raw)
        except (LLMError, ValueError) as e:
            logger.error(f"Design variation generation failed: {e}")
            raise DesignGenerationError(f"Design variation generation failed: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("designs"), list):
            raise DesignGenerationError(
                'Design variations response must be an object with a "designs" array'
            )
        if not data["designs"]:
            raise DesignGenerationError("Design variations response contained no designs")
        if len(data["designs"]) != count:
            logger.warning(
                f"Asked for {count} design variations, received {len(data['designs'])}"
            )

        designs = []
        for index, item in enumerate(data["designs"]):
            if not isinstance(item, dict):
                raise DesignGenerationError(f"Design variation {index} is not an object")
            try:
                designs.append(
                    DesignSystem.model_validate({**item, "id": _new_design_id(index)})
                )
            except ValueError as e:
                raise DesignGenerationError(
                    f"Design variation {index} is invalid: {e}"
                ) from e

        return designs

    async def rewrite_content(
        self,
        style_prompt: str,
        full_text: str,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Rewrite the text segment by segment.

        Segments are processed strictly in order. Failed or empty rewrites
        keep the original segment text.

        Args:
            style_prompt: Free-form style request.
            full_text: Source text.
            on_progress: Optional callback receiving (CONTENT, accumulated text)
                after every segment.

        Returns:
            The accumulated content.
        """
        segments = split(full_text, self._config.chunk_size)
        logger.info(f"Rewriting {len(segments)} segment(s)")

        state = ContentState()
        for segment in segments:
            state = await self._rewrite_segment(state, segment, style_prompt)
            if on_progress is not None:
                on_progress(ProgressKind.CONTENT, state.content)

        return state.content

    async def _rewrite_segment(
        self,
        state: ContentState,
        segment: ContentSegment,
        style_prompt: str,
    ) -> ContentState:
        """Fold one segment into the accumulated state."""
        size = self._config.context_tail
        tail = state.previous_context[-size:] if size > 0 else ""
        request = CompletionRequest(
            prompt=build_rewrite_prompt(
                style_prompt, tail, segment.text, segment.is_first
            ),
            system_instruction=CONTENT_SYSTEM_INSTRUCTION,
        )

        try:
            rewritten = await self._engine.complete(request)
        except (ProviderError, SalvageError) as e:
            logger.warning(
                f"Segment {segment.index} rewrite failed, keeping original text: {e}"
            )
            rewritten = ""

        if not rewritten:
            logger.debug(f"Segment {segment.index} using original text")
            rewritten = segment.text
        else:
            logger.debug(f"Segment {segment.index} rewritten ({len(rewritten)} chars)")

        return ContentState(
            content=state.content + rewritten + "\n\n",
            previous_context=rewritten,
        )


# =============================================================================
# Main Interface
# =============================================================================


async def generate(
    config: ProviderConfig,
    style_prompt: str,
    full_text: str,
    layout_preference: LayoutPreference | str = LayoutPreference.AUTO,
    on_progress: ProgressCallback | None = None,
    existing_design: DesignSystem | None = None,
    **kwargs,
) -> OrchestrationResult:
    """Style a document against the configured provider.

    Args:
        config: Provider configuration chosen by the caller.
        style_prompt: Free-form style request.
        full_text: Source text to restyle.
        layout_preference: Layout hint for a generated design.
        on_progress: Optional callback receiving (kind, payload).
        existing_design: Design to reuse instead of generating one.
        **kwargs: Client options (timeout, max_retries).

    Returns:
        OrchestrationResult with the design and accumulated content.

    Raises:
        ConfigError: If the configuration is incomplete.
        DesignGenerationError: If a new design could not be produced.

    Example:
        >>> result = await generate(
        ...     SchemaNativeConfig(),
        ...     "WeChat article, warm colors",
        ...     text,
        ...     on_progress=lambda kind, payload: print(kind.value),
        ... )
    """
    engine = CompletionEngine(create_provider_client(config, **kwargs))
    orchestrator = LayoutOrchestrator(engine, OrchestratorConfig.from_environment())
    return await orchestrator.generate(
        style_prompt,
        full_text,
        layout_preference=layout_preference,
        on_progress=on_progress,
        existing_design=existing_design,
    )


async def generate_design_variations(
    config: ProviderConfig,
    style_prompt: str,
    layout_preference: LayoutPreference | str = LayoutPreference.AUTO,
    count: int = 2,
    **kwargs,
) -> list[DesignSystem]:
    """Generate several distinct designs against the configured provider.

    Args:
        config: Provider configuration chosen by the caller.
        style_prompt: Free-form style request.
        layout_preference: Layout hint shared by all variations.
        count: Number of variations to ask for.
        **kwargs: Client options (timeout, max_retries).

    Returns:
        Validated designs, each with a fresh id.

    Raises:
        ConfigError: If the configuration is incomplete.
        DesignGenerationError: On any failure or an unexpected response shape.
    """
    engine = CompletionEngine(create_provider_client(config, **kwargs))
    orchestrator = LayoutOrchestrator(engine)
    return await orchestrator.generate_variations(
        style_prompt, layout_preference=layout_preference, count=count
    )


__all__ = [
    "LayoutOrchestrator",
    "OrchestratorConfig",
    "OrchestrationResult",
    "ContentState",
    "ProgressKind",
    "ProgressCallback",
    "generate",
    "generate_design_variations",
]
