"""LLM integration layer for document styling.

This module provides provider-agnostic completions and the orchestration
that turns a style request into a design system and restyled markdown.

Main components:
- LayoutOrchestrator: Design phase plus ordered segment rewrites
- CompletionEngine: One request contract over both provider kinds
- ProviderClient: Capability interface for provider adapters
- create_provider_client: Factory from a ProviderConfig

Supported providers:
- Gemini (schema-native structured output)
- OpenAI and compatible endpoints (chat completions)

Example:
    >>> from layoutforge.llm import SchemaNativeConfig, generate
    >>> result = await generate(SchemaNativeConfig(), "tech blog", text)
    >>> print(result.content)

    >>> # OpenAI-compatible endpoint
    >>> from layoutforge.llm import ChatCompletionConfig
    >>> config = ChatCompletionConfig(api_key="sk-...", model="gpt-4.1-mini")
    >>> designs = await generate_design_variations(config, "warm editorial")
"""

from .backend import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OPENAI_BASE_URL,
    AuthenticationError,
    ChatCompletionConfig,
    CompletionRequest,
    ConfigError,
    DesignGenerationError,
    LLMError,
    ProviderClient,
    ProviderConfig,
    ProviderError,
    ProviderKind,
    RateLimitError,
    SchemaNativeConfig,
    create_provider_client,
    provider_config_from_environment,
)
from .engine import CompletionEngine, complete, stream
from .generator import (
    LayoutOrchestrator,
    OrchestrationResult,
    OrchestratorConfig,
    ProgressCallback,
    ProgressKind,
    generate,
    generate_design_variations,
)

__all__ = [
    # Backend
    "ProviderClient",
    "CompletionRequest",
    "ProviderKind",
    "ProviderConfig",
    "SchemaNativeConfig",
    "ChatCompletionConfig",
    "create_provider_client",
    "provider_config_from_environment",
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OPENAI_BASE_URL",
    # Exceptions
    "LLMError",
    "ConfigError",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "DesignGenerationError",
    # Engine
    "CompletionEngine",
    "complete",
    "stream",
    # Generator
    "LayoutOrchestrator",
    "OrchestratorConfig",
    "OrchestrationResult",
    "ProgressKind",
    "ProgressCallback",
    "generate",
    "generate_design_variations",
]
