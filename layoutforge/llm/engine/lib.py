"""Provider-agnostic completion engine.

Normalizes both provider kinds into one request/response contract:

- Schema-native clients receive the schema and JSON mode natively; their
  reply is returned verbatim.
- Other clients get JSON formatting directives and a textual schema folded
  into the system instruction; the reply is salvaged and re-serialized.
- Non-JSON replies are trimmed of surrounding whitespace.
"""

import dataclasses
import json
import logging
from collections.abc import AsyncIterator

from ...salvage import SalvageError, salvage
from ...schema import SchemaDescriptor, to_prompt_text
from ..backend import (
    CompletionRequest,
    LLMError,
    ProviderClient,
    ProviderConfig,
    ProviderError,
    create_provider_client,
)

logger = logging.getLogger(__name__)

JSON_BLOCK_DIRECTIVE = (
    "Respond with exactly one fenced JSON block (```json ... ```) and nothing else."
)


def build_json_instruction(
    system_instruction: str | None,
    schema: SchemaDescriptor | None = None,
) -> str:
    """Wrap a system instruction with JSON formatting directives.

    The single-fenced-block directive appears at the start, in the rules and
    in a closing reminder. When a schema is given its textual contract is
    included.

    Args:
        system_instruction: Original system instruction, if any.
        schema: Expected output structure, if any.

    Returns:
        Augmented system instruction.
    """
    sections = [f"OUTPUT FORMAT: {JSON_BLOCK_DIRECTIVE}"]

    if system_instruction:
        sections.append(system_instruction.strip())

    if schema is not None:
        sections.append("JSON SCHEMA:\n" + to_prompt_text(schema))

    sections.append(
        "FORMATTING RULES:\n"
        f"1. {JSON_BLOCK_DIRECTIVE}\n"
        "2. Do not write any text before or after the block.\n"
        "3. Use double quotes for every key and string value.\n"
        "4. Do not include comments or trailing commas."
    )
    sections.append(f"REMINDER: {JSON_BLOCK_DIRECTIVE}")

    return "\n\n".join(sections)


class CompletionEngine:
    """Sends completion requests through one provider client.

    Example:
        >>> engine = CompletionEngine(create_provider_client(SchemaNativeConfig()))
        >>> text = await engine.complete(CompletionRequest(prompt="Hello"))
    """

    def __init__(self, client: ProviderClient):
        """Initialize the engine.

        Args:
            client: Provider client used for every request.
        """
        self._client = client

    @property
    def client(self) -> ProviderClient:
        """Get the provider client."""
        return self._client

    def _prepare(self, request: CompletionRequest) -> CompletionRequest:
        if not request.json_mode or self._client.supports_native_schema:
            return request
        return dataclasses.replace(
            request,
            system_instruction=build_json_instruction(
                request.system_instruction, request.output_schema
            ),
        )

    def _wrap(self, error: Exception) -> ProviderError:
        logger.error(f"Provider {self._client.name} failed: {error}")
        return ProviderError(self._client.provider, str(error))

    async def complete(self, request: CompletionRequest) -> str:
        """Run one completion request.

        Args:
            request: Completion request.

        Returns:
            Raw text for schema-native JSON requests, canonical JSON text for
            salvaged JSON requests, trimmed text otherwise.

        Raises:
            ProviderError: If the provider call fails.
            ExtractionError: If a salvaged reply contains no JSON.
            ParseError: If a salvaged reply stays unparsable.
        """
        logger.debug(
            f"Completion via {self._client.name} (json_mode={request.json_mode})"
        )

        try:
            text = await self._client.generate(self._prepare(request))
        except LLMError:
            raise
        except Exception as e:
            raise self._wrap(e) from e

        if not request.json_mode:
            return text.strip()

        if self._client.supports_native_schema:
            return text

        try:
            value = salvage(text)
        except SalvageError as e:
            logger.warning(f"Could not salvage JSON from {self._client.name}: {e}")
            raise
        return json.dumps(value, ensure_ascii=False, allow_nan=False)

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """Stream one completion request.

        JSON requests are augmented the same way as `complete`, but fragments
        are never salvaged.

        Args:
            request: Completion request.

        Yields:
            Non-empty text fragments in arrival order.

        Raises:
            ProviderError: If the provider call fails, including mid-stream.
        """
        logger.debug(f"Streaming via {self._client.name}")

        try:
            async for fragment in self._client.stream(self._prepare(request)):
                if fragment:
                    yield fragment
        except LLMError:
            raise
        except Exception as e:
            raise self._wrap(e) from e


# =============================================================================
# Main Interface
# =============================================================================


async def complete(config: ProviderConfig, request: CompletionRequest, **kwargs) -> str:
    """Run one completion request against the configured provider.

    Configuration is validated before any network call.

    Args:
        config: Provider configuration chosen by the caller.
        request: Completion request.
        **kwargs: Client options (timeout, max_retries).

    Returns:
        Response text (see `CompletionEngine.complete`).

    Raises:
        ConfigError: If the configuration is incomplete.
        ProviderError: If the provider call fails.
        SalvageError: If a JSON reply cannot be salvaged.
    """
    engine = CompletionEngine(create_provider_client(config, **kwargs))
    return await engine.complete(request)


async def stream(
    config: ProviderConfig, request: CompletionRequest, **kwargs
) -> AsyncIterator[str]:
    """Stream one completion request against the configured provider.

    Args:
        config: Provider configuration chosen by the caller.
        request: Completion request.
        **kwargs: Client options (timeout, max_retries).

    Yields:
        Non-empty text fragments in arrival order.

    Raises:
        ConfigError: If the configuration is incomplete.
        ProviderError: If the provider call fails.
    """
    engine = CompletionEngine(create_provider_client(config, **kwargs))
    async for fragment in engine.stream(request):
        yield fragment


__all__ = [
    "CompletionEngine",
    "JSON_BLOCK_DIRECTIVE",
    "build_json_instruction",
    "complete",
    "stream",
]
