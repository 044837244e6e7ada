"""Layout generation.

Provides the LayoutOrchestrator that produces a design system and a
restyled document from a style request:

    design phase  -> one structured request against DESIGN_SCHEMA
    content phase -> ordered segment rewrites with carried context

Example:
    >>> from layoutforge.llm.generator import generate
    >>> from layoutforge.llm.backend import SchemaNativeConfig
    >>> result = await generate(SchemaNativeConfig(), "tech blog", text)
    >>> print(result.design.theme_name)
"""

from .lib import (
    ContentState,
    LayoutOrchestrator,
    OrchestrationResult,
    OrchestratorConfig,
    ProgressCallback,
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

__all__ = [
    # Orchestrator
    "LayoutOrchestrator",
    "OrchestratorConfig",
    "OrchestrationResult",
    "ContentState",
    # Progress
    "ProgressKind",
    "ProgressCallback",
    # Main interface
    "generate",
    "generate_design_variations",
    # Prompts
    "DESIGN_SYSTEM_INSTRUCTION",
    "CONTENT_SYSTEM_INSTRUCTION",
    "build_design_prompt",
    "build_variations_prompt",
    "build_rewrite_prompt",
]
