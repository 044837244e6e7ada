"""Centralized configuration management for layoutforge.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from layoutforge.config import EnvVar, get_environment
    >>>
    >>> # Get any environment variable with automatic type conversion
    >>> size = get_environment(EnvVar.CHUNK_SIZE)  # Returns int: 1000
    >>> api_key = get_environment(EnvVar.OPENAI_API_KEY)  # Returns str | None
    >>>
    >>> # List available variables by category
    >>> for var in list_environment_variables("llm"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    llm: Provider credentials, endpoints and model names (Gemini, OpenAI-compatible)
    generation: Chunk size, design sample size and continuity tail
    logging: Log level
"""

from .lib import (
    # Core types
    EnvConfig,
    EnvVar,
    # Main interface
    get_available_llm_providers,
    get_environment,
    get_environment_info,
    get_gemini_api_key,
    # Introspection
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    # Convenience functions
    "get_gemini_api_key",
    "get_available_llm_providers",
    # Introspection
    "list_environment_variables",
]
