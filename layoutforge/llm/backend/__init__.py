"""LLM provider clients.

Provides the capability interface and concrete adapters for the two
provider kinds (schema-native Gemini, OpenAI-compatible chat completions).
"""

from .base import (
    AuthenticationError,
    CompletionRequest,
    ConfigError,
    DesignGenerationError,
    LLMError,
    ProviderClient,
    ProviderError,
    RateLimitError,
)
from .factory import create_provider_client, provider_config_from_environment
from .model_spec import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OPENAI_BASE_URL,
    ChatCompletionConfig,
    ProviderConfig,
    ProviderKind,
    SchemaNativeConfig,
)

__all__ = [
    # Base classes and types
    "ProviderClient",
    "CompletionRequest",
    # Exceptions
    "LLMError",
    "ConfigError",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "DesignGenerationError",
    # Provider configuration
    "ProviderKind",
    "ProviderConfig",
    "SchemaNativeConfig",
    "ChatCompletionConfig",
    # Defaults
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OPENAI_BASE_URL",
    # Factory
    "create_provider_client",
    "provider_config_from_environment",
]
