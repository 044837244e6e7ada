"""Provider configuration for the LLM layer.

A provider configuration is a tagged union: exactly one of
`SchemaNativeConfig` or `ChatCompletionConfig` describes each request, and
the caller always picks it explicitly.
"""

from dataclasses import dataclass
from enum import Enum


class ProviderKind(str, Enum):
    """Available provider kinds.

    - SCHEMA_NATIVE: Accepts a response schema and JSON mode (Google Gemini)
    - CHAT_COMPLETION: OpenAI-compatible chat completions, text only
    """

    SCHEMA_NATIVE = "schema-native"
    CHAT_COMPLETION = "chat-completion"


DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class SchemaNativeConfig:
    """Configuration for the schema-native provider.

    Attributes:
        api_key: Explicit key. Falls back to GEMINI_API_KEY, then API_KEY.
        model: Model identifier. Falls back to GEMINI_MODEL.
    """

    api_key: str | None = None
    model: str | None = None

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.SCHEMA_NATIVE


@dataclass(frozen=True)
class ChatCompletionConfig:
    """Configuration for an OpenAI-compatible chat-completion provider.

    Both the key and the model are required and have no defaults.

    Attributes:
        api_key: API key for the endpoint.
        model: Model identifier.
        base_url: Endpoint base URL. None means the public OpenAI endpoint.
    """

    api_key: str | None
    model: str | None
    base_url: str | None = None

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.CHAT_COMPLETION


ProviderConfig = SchemaNativeConfig | ChatCompletionConfig


__all__ = [
    "ProviderKind",
    "SchemaNativeConfig",
    "ChatCompletionConfig",
    "ProviderConfig",
    "DEFAULT_GEMINI_MODEL",
    "DEFAULT_OPENAI_BASE_URL",
]
