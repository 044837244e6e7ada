"""Google Gemini client implementation.

The schema-native provider: response schemas and JSON mode are enforced by
the API itself, so replies are returned verbatim.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, NoReturn

from ...schema import to_native_schema
from .base import (
    AuthenticationError,
    CompletionRequest,
    ProviderClient,
    ProviderError,
    RateLimitError,
)
from .model_spec import DEFAULT_GEMINI_MODEL

logger = logging.getLogger(__name__)


class SchemaNativeClient(ProviderClient):
    """Gemini client using the google-genai SDK.

    Example:
        >>> client = SchemaNativeClient(api_key="...")
        >>> text = await client.generate(CompletionRequest(prompt="Hi"))

        >>> client = SchemaNativeClient(api_key="...", model="gemini-2.5-pro")
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = 60.0,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Gemini API key (already resolved by the factory).
            model: Gemini model name.
            timeout: Request timeout in seconds.
        """
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize the google-genai client.

        Returns:
            genai.Client instance (async calls go through `client.aio`).
        """
        if self._client is None:
            from google import genai
            from google.genai import types

            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=int(self._timeout * 1000)),
            )
        return self._client

    @property
    def model_name(self) -> str:
        """Get the model identifier."""
        return self._model

    @property
    def provider(self) -> str:
        """Get the provider identifier."""
        return "gemini"

    @property
    def supports_native_schema(self) -> bool:
        """Gemini enforces response schemas natively."""
        return True

    def _build_config(self, request: CompletionRequest) -> Any:
        from google.genai import types

        config_kwargs: dict[str, Any] = {}
        if request.system_instruction:
            config_kwargs["system_instruction"] = request.system_instruction
        if request.json_mode:
            config_kwargs["response_mime_type"] = "application/json"
            if request.output_schema is not None:
                config_kwargs["response_schema"] = to_native_schema(
                    request.output_schema
                )

        return types.GenerateContentConfig(**config_kwargs) if config_kwargs else None

    async def generate(self, request: CompletionRequest) -> str:
        """Generate text using the Gemini API.

        Args:
            request: Completion request.

        Returns:
            Raw response text.

        Raises:
            ProviderError: If the API call fails.
        """
        client = self._get_client()

        try:
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=request.prompt,
                config=self._build_config(request),
            )
        except Exception as e:
            self._handle_error(e)

        return response.text or ""

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """Stream text fragments from the Gemini API.

        Args:
            request: Completion request.

        Yields:
            Non-empty text fragments in arrival order.

        Raises:
            ProviderError: If the API call fails, including mid-stream.
        """
        client = self._get_client()

        try:
            chunks = await client.aio.models.generate_content_stream(
                model=self._model,
                contents=request.prompt,
                config=self._build_config(request),
            )
            async for chunk in chunks:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            self._handle_error(e)

    def _handle_error(self, error: Exception) -> NoReturn:
        """Convert google-genai errors to standard exceptions.

        Args:
            error: The caught exception.

        Raises:
            RateLimitError: For HTTP 429.
            AuthenticationError: For HTTP 401 and 403.
            ProviderError: For other errors.
        """
        from google.genai import errors

        logger.error(f"Gemini API error ({self.name}): {error}")

        if isinstance(error, errors.APIError):
            if error.code == 429:
                raise RateLimitError(self.provider, str(error)) from error
            if error.code in (401, 403):
                raise AuthenticationError(self.provider, str(error)) from error
        raise ProviderError(self.provider, str(error)) from error


__all__ = ["SchemaNativeClient"]
