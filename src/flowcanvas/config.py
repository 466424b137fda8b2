"""
Engine settings.

Settings are immutable value objects. API keys are not part of them: the
LangChain provider classes read their own environment variables.
"""

import os
from collections.abc import Mapping

from attrs import field, frozen

from flowcanvas.exceptions import ConfigurationError
from flowcanvas.models import DEFAULT_MODEL_KEY, ModelParam, Provider

ENV_PREFIX = "FLOWCANVAS_"


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@frozen
class EngineSettings:
    """
    Params:
        model_provider: Provider of the default chat model
        model_name: Provider-specific model identifier
        http_timeout: Seconds before an HTTP request node gives up
        default_temperature: Temperature given to new LLM nodes
        default_thinking_enabled: Thinking flag given to new LLM nodes
    """

    model_provider: Provider = Provider.google
    model_name: str = "gemini-2.5-flash"
    http_timeout: float = field(default=30.0)
    default_temperature: float = 0.7
    default_thinking_enabled: bool = True

    @http_timeout.validator
    def _check_timeout(self, attribute, value):
        if value <= 0:
            raise ConfigurationError(f"{attribute.name} must be positive, got {value}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineSettings":
        """
        Build settings from ``FLOWCANVAS_*`` environment variables.

        Unset variables keep their defaults.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        if provider := env.get(f"{ENV_PREFIX}MODEL_PROVIDER"):
            try:
                kwargs["model_provider"] = Provider(provider.lower())
            except ValueError as e:
                choices = ", ".join(p.value for p in Provider)
                raise ConfigurationError(
                    f"Unknown model provider {provider!r}; expected one of: {choices}"
                ) from e
        if model := env.get(f"{ENV_PREFIX}MODEL"):
            kwargs["model_name"] = model
        if timeout := env.get(f"{ENV_PREFIX}HTTP_TIMEOUT"):
            kwargs["http_timeout"] = _parse_float(f"{ENV_PREFIX}HTTP_TIMEOUT", timeout)
        return cls(**kwargs)

    def model_params(self) -> dict[str, ModelParam]:
        """Model registry seeded with the configured default model."""
        return {
            DEFAULT_MODEL_KEY: ModelParam(provider=self.model_provider, model=self.model_name)
        }
