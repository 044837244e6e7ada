"""Centralized environment configuration management for layoutforge.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from layoutforge.config import EnvVar, get_environment
    >>>
    >>> # Get values with automatic type conversion
    >>> size = get_environment(EnvVar.CHUNK_SIZE)  # Returns int
    >>> api_key = get_environment(EnvVar.OPENAI_API_KEY)  # Returns str | None
    >>>
    >>> # Override at runtime
    >>> size = get_environment(EnvVar.CHUNK_SIZE, override=500)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "GEMINI_API_KEY").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by layoutforge.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - llm: Provider credentials, endpoints and model names
        - generation: Orchestration bounds (chunk size, sample size)
        - logging: Log output configuration
    """

    # -------------------------------------------------------------------------
    # Schema-native provider (Gemini)
    # -------------------------------------------------------------------------
    GEMINI_API_KEY = EnvConfig(
        name="GEMINI_API_KEY",
        default=None,
        var_type=str,
        description="Google Gemini API key for the schema-native provider",
        category="llm",
    )
    API_KEY = EnvConfig(
        name="API_KEY",
        default=None,
        var_type=str,
        description="Process-wide fallback key for the schema-native provider",
        category="llm",
    )
    GEMINI_MODEL = EnvConfig(
        name="GEMINI_MODEL",
        default="gemini-3-flash-preview",
        var_type=str,
        description="Gemini model identifier",
        category="llm",
    )

    # -------------------------------------------------------------------------
    # Chat-completion provider (OpenAI compatible)
    # -------------------------------------------------------------------------
    OPENAI_API_KEY = EnvConfig(
        name="OPENAI_API_KEY",
        default=None,
        var_type=str,
        description="API key for the OpenAI-compatible chat-completion provider",
        category="llm",
    )
    OPENAI_BASE_URL = EnvConfig(
        name="OPENAI_BASE_URL",
        default="https://api.openai.com/v1",
        var_type=str,
        description="Chat-completion endpoint base URL",
        category="llm",
    )
    OPENAI_MODEL = EnvConfig(
        name="OPENAI_MODEL",
        default=None,
        var_type=str,
        description="Chat-completion model identifier (no default)",
        category="llm",
    )
    LLM_PROVIDER = EnvConfig(
        name="LLM_PROVIDER",
        default="schema-native",
        var_type=str,
        description="Provider kind used by the CLI (schema-native, chat-completion)",
        category="llm",
    )
    LLM_TIMEOUT = EnvConfig(
        name="LLM_TIMEOUT",
        default=60.0,
        var_type=float,
        description="Provider request timeout in seconds",
        category="llm",
    )
    LLM_MAX_RETRIES = EnvConfig(
        name="LLM_MAX_RETRIES",
        default=2,
        var_type=int,
        description="SDK-level transport retries for the chat-completion client",
        category="llm",
    )

    # -------------------------------------------------------------------------
    # Generation bounds
    # -------------------------------------------------------------------------
    CHUNK_SIZE = EnvConfig(
        name="LAYOUTFORGE_CHUNK_SIZE",
        default=1000,
        var_type=int,
        description="Maximum characters per content segment",
        category="generation",
    )
    SAMPLE_CHARS = EnvConfig(
        name="LAYOUTFORGE_SAMPLE_CHARS",
        default=800,
        var_type=int,
        description="Characters of input used as the design content sample",
        category="generation",
    )
    CONTEXT_TAIL = EnvConfig(
        name="LAYOUTFORGE_CONTEXT_TAIL",
        default=300,
        var_type=int,
        description="Characters of the previous rewritten segment passed forward",
        category="generation",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Root logging level (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _parse_bool(value: str) -> bool | None:
    """Parse string to boolean.

    Recognizes: true/false, 1/0, yes/no (case-insensitive).
    Returns None for unrecognized values.
    """
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes"):
        return True
    if normalized in ("false", "0", "no"):
        return False
    return None


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    if var_type is float:
        try:
            return float(value)
        except ValueError:
            return default

    if var_type is bool:
        result = _parse_bool(value)
        return result if result is not None else default

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: float) -> float: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type.

    Example:
        >>> get_environment(EnvVar.CHUNK_SIZE)
        1000
        >>> get_environment(EnvVar.CHUNK_SIZE, override=400)
        400
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)

    # Blank values count as unset
    if raw_value is not None and not raw_value.strip():
        raw_value = None

    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


# =============================================================================
# Convenience Functions
# =============================================================================


def get_gemini_api_key(override: str | None = None) -> str | None:
    """Get the schema-native provider key.

    Resolution: override > GEMINI_API_KEY > API_KEY
    """
    if override:
        return override
    return get_environment(EnvVar.GEMINI_API_KEY) or get_environment(EnvVar.API_KEY)


def get_available_llm_providers() -> list[str]:
    """Get provider kinds whose credentials are present.

    This is a presence check only; keys are never validated remotely.

    Returns:
        List of provider kinds (e.g., ["schema-native", "chat-completion"]).
    """
    providers = []

    if get_gemini_api_key():
        providers.append("schema-native")
    if get_environment(EnvVar.OPENAI_API_KEY):
        providers.append("chat-completion")

    return providers


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (llm, generation, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


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
