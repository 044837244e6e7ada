"""OpenAI-compatible chat-completion client implementation.

Works with any endpoint speaking the OpenAI chat completions protocol. The
provider only returns text; JSON requests are handled by the engine through
prompt augmentation and salvage parsing.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, NoReturn

from .base import (
    AuthenticationError,
    CompletionRequest,
    ProviderClient,
    ProviderError,
    RateLimitError,
)
from .model_spec import DEFAULT_OPENAI_BASE_URL

logger = logging.getLogger(__name__)


class ChatCompletionClient(ProviderClient):
    """OpenAI-compatible chat-completion client.

    Example:
        >>> client = ChatCompletionClient(api_key="sk-...", model="gpt-4.1-mini")
        >>> text = await client.generate(CompletionRequest(prompt="Hi"))

        >>> client = ChatCompletionClient(
        ...     api_key="sk-...",
        ...     model="deepseek-chat",
        ...     base_url="https://api.deepseek.com/v1",
        ... )
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
    ):
        """Initialize chat-completion client.

        Args:
            api_key: API key for the endpoint.
            model: Model name.
            base_url: Endpoint base URL. Defaults to the public OpenAI API.
            timeout: Request timeout in seconds.
            max_retries: SDK-level retry attempts for transient errors.
        """
        self._api_key = api_key
        self._model = model
        self._base_url = base_url or DEFAULT_OPENAI_BASE_URL
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize the async OpenAI client.

        Returns:
            AsyncOpenAI client instance.
        """
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._model

    @property
    def provider(self) -> str:
        """Get the provider identifier."""
        return "openai"

    @property
    def base_url(self) -> str:
        """Get the endpoint base URL."""
        return self._base_url

    @property
    def supports_native_schema(self) -> bool:
        """Chat completions carry no response schema."""
        return False

    @staticmethod
    def _build_messages(request: CompletionRequest) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        messages.append({"role": "user", "content": request.prompt})
        return messages

    async def generate(self, request: CompletionRequest) -> str:
        """Generate text using the chat completions API.

        Args:
            request: Completion request.

        Returns:
            Raw response text.

        Raises:
            ProviderError: If the API call fails.
        """
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=self._build_messages(request),
            )
        except Exception as e:
            self._handle_error(e)

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """Stream text fragments from the chat completions API.

        Args:
            request: Completion request.

        Yields:
            Non-empty text fragments in arrival order.

        Raises:
            ProviderError: If the API call fails, including mid-stream.
        """
        client = self._get_client()

        try:
            chunks = await client.chat.completions.create(
                model=self._model,
                messages=self._build_messages(request),
                stream=True,
            )
            async for chunk in chunks:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except Exception as e:
            self._handle_error(e)

    def _handle_error(self, error: Exception) -> NoReturn:
        """Convert OpenAI SDK errors to standard exceptions.

        Args:
            error: The caught exception.

        Raises:
            RateLimitError: For rate limit errors.
            AuthenticationError: For auth errors.
            ProviderError: For other errors.
        """
        import openai

        logger.error(f"Chat-completion API error ({self.name}): {error}")

        if isinstance(error, openai.RateLimitError):
            raise RateLimitError(self.provider, str(error)) from error
        if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
            raise AuthenticationError(self.provider, str(error)) from error
        raise ProviderError(self.provider, str(error)) from error


__all__ = ["ChatCompletionClient"]
