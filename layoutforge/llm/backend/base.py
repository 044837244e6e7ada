"""Abstract base class for provider clients.

Defines the request contract, the capability interface every provider
adapter implements, and the error hierarchy shared by the LLM layer.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass

from ...schema import SchemaDescriptor


@dataclass(frozen=True)
class CompletionRequest:
    """A single provider-agnostic completion request.

    Attributes:
        prompt: User prompt text.
        system_instruction: Optional system instruction for context.
        output_schema: Optional structure the JSON reply must follow.
        json_mode: Whether the reply must be JSON.
    """

    prompt: str
    system_instruction: str | None = None
    output_schema: SchemaDescriptor | None = None
    json_mode: bool = False


class ProviderClient(ABC):
    """Abstract interface for LLM provider adapters.

    Adapters translate a CompletionRequest into one provider call and return
    the provider's text unchanged. Prompt augmentation and JSON salvage for
    providers without native schema support are the engine's job.

    Example:
        >>> client = SchemaNativeClient(api_key="...")
        >>> text = await client.generate(CompletionRequest(prompt="Hello"))
    """

    @abstractmethod
    async def generate(self, request: CompletionRequest) -> str:
        """Send one request and return the raw response text.

        Args:
            request: Completion request.

        Returns:
            Provider text (empty string when the provider returns none).

        Raises:
            ProviderError: If the provider call fails.
        """

    @abstractmethod
    def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """Stream response fragments in arrival order.

        Implementations are async generators yielding non-empty fragments.

        Args:
            request: Completion request.

        Yields:
            Text fragments as they arrive.

        Raises:
            ProviderError: If the provider call fails, including mid-stream.
        """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model identifier.

        Returns:
            String model name (e.g., 'gemini-3-flash-preview').
        """

    @property
    @abstractmethod
    def provider(self) -> str:
        """Get the provider identifier.

        Returns:
            String provider name (e.g., 'gemini', 'openai').
        """

    @property
    def name(self) -> str:
        """Get client identifier for logging.

        Returns:
            String in format 'provider:model'.
        """
        return f"{self.provider}:{self.model_name}"

    @property
    @abstractmethod
    def supports_native_schema(self) -> bool:
        """Check if the provider enforces a response schema natively.

        Returns:
            True if the schema is sent to the provider and the reply is
            trusted verbatim.
        """


class LLMError(Exception):
    """Base exception for LLM layer errors."""


class ConfigError(LLMError):
    """Raised when provider configuration is incomplete.

    Attributes:
        field: Name of the missing or invalid configuration field.
    """

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class ProviderError(LLMError):
    """Raised when a provider call fails for any transport or API reason.

    Attributes:
        provider: Provider identifier that failed.
        message: Human-readable failure description.
    """

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class RateLimitError(ProviderError):
    """Raised when the provider rejects a call for exceeding its rate limit."""


class AuthenticationError(ProviderError):
    """Raised when the provider rejects the credentials."""


class DesignGenerationError(LLMError):
    """Raised when no valid design system could be produced."""


__all__ = [
    "CompletionRequest",
    "ProviderClient",
    "LLMError",
    "ConfigError",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "DesignGenerationError",
]
