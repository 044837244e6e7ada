"""Client factory for creating provider clients from configurations.

Provides a unified entry point for creating any supported provider client.
Configuration is validated here, before any network call is possible.
"""

from ...config import EnvVar, get_environment, get_gemini_api_key
from .base import ConfigError, ProviderClient
from .model_spec import (
    ChatCompletionConfig,
    ProviderConfig,
    ProviderKind,
    SchemaNativeConfig,
)


def create_provider_client(config: ProviderConfig, **kwargs) -> ProviderClient:
    """Create a provider client from a provider configuration.

    Args:
        config: SchemaNativeConfig or ChatCompletionConfig.
        **kwargs: Additional arguments passed to the client constructor
            (e.g., timeout, max_retries). Unset values come from the
            environment.

    Returns:
        Configured ProviderClient instance.

    Raises:
        ConfigError: If a required field is missing, naming that field.

    Example:
        >>> client = create_provider_client(SchemaNativeConfig())
        >>> client = create_provider_client(
        ...     ChatCompletionConfig(api_key="sk-...", model="gpt-4.1-mini"),
        ...     timeout=120.0,
        ... )
    """
    timeout = kwargs.pop("timeout", None) or get_environment(EnvVar.LLM_TIMEOUT)
    max_retries = kwargs.pop("max_retries", None)
    if max_retries is None:
        max_retries = get_environment(EnvVar.LLM_MAX_RETRIES)

    if isinstance(config, SchemaNativeConfig):
        from .gemini import SchemaNativeClient

        api_key = get_gemini_api_key(config.api_key)
        if not api_key:
            raise ConfigError(
                "Schema-native provider requires 'api_key'. Pass it explicitly or "
                "set GEMINI_API_KEY (or API_KEY).",
                field="api_key",
            )
        model = config.model or get_environment(EnvVar.GEMINI_MODEL)

        return SchemaNativeClient(api_key=api_key, model=model, timeout=timeout, **kwargs)

    if isinstance(config, ChatCompletionConfig):
        from .openai import ChatCompletionClient

        if not config.api_key:
            raise ConfigError(
                "Chat-completion provider requires an explicit 'api_key'.",
                field="api_key",
            )
        if not config.model:
            raise ConfigError(
                "Chat-completion provider requires an explicit 'model'.",
                field="model",
            )
        return ChatCompletionClient(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            timeout=timeout,
            max_retries=max_retries,
            **kwargs,
        )

    raise ConfigError(f"Unsupported provider config: {config!r}", field="kind")


def provider_config_from_environment(
    kind: ProviderKind | str | None = None,
    *,
    api_key: str | None = None,
    model: str | None = None,
    base_url: str | None = None,
) -> ProviderConfig:
    """Build a provider configuration from explicit values and the environment.

    This is the caller-side helper used by the CLI: it is where OPENAI_API_KEY
    and OPENAI_MODEL are read. `create_provider_client` itself never reads
    them, so a ChatCompletionConfig built by hand must carry its own key.

    Args:
        kind: Provider kind. Falls back to LLM_PROVIDER.
        api_key: Explicit key, preferred over the environment.
        model: Explicit model, preferred over the environment.
        base_url: Explicit endpoint (chat-completion only).

    Returns:
        SchemaNativeConfig or ChatCompletionConfig. Missing credentials are
        left unset so that client creation reports them.

    Raises:
        ConfigError: If the kind is unknown.
    """
    raw_kind = kind or get_environment(EnvVar.LLM_PROVIDER)
    try:
        resolved = ProviderKind(raw_kind)
    except ValueError as e:
        valid = ", ".join(k.value for k in ProviderKind)
        raise ConfigError(
            f"Unknown provider kind '{raw_kind}'. Valid kinds: {valid}",
            field="kind",
        ) from e

    if resolved == ProviderKind.SCHEMA_NATIVE:
        return SchemaNativeConfig(api_key=api_key, model=model)

    return ChatCompletionConfig(
        api_key=api_key or get_environment(EnvVar.OPENAI_API_KEY),
        model=model or get_environment(EnvVar.OPENAI_MODEL),
        base_url=base_url or get_environment(EnvVar.OPENAI_BASE_URL),
    )


__all__ = ["create_provider_client", "provider_config_from_environment"]
