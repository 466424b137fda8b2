"""
Text generation capability backed by LangChain chat models.

LLM prompt nodes consume text generation as an opaque capability: given a
prompt and a generation config, produce either the whole result or a lazy
sequence of text chunks, or fail with a readable message.
"""

import logging
from collections.abc import AsyncIterator
from enum import Enum
from typing import Any, Protocol

from attrs import frozen
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.rate_limiters import BaseRateLimiter
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from flowcanvas.exceptions import TextGenerationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL_KEY = "default"


class Provider(Enum):
    anthropic = "anthropic"
    google = "google"
    openai = "openai"


@frozen
class ModelParam:
    provider: Provider
    model: str
    temperature: float | None = None


@frozen
class GenerationConfig:
    """Per-call generation options; None leaves the provider default in place."""

    temperature: float | None = None
    thinking_enabled: bool | None = None


chat_models_classes = {
    Provider.openai: ChatOpenAI,
    Provider.google: ChatGoogleGenerativeAI,
    Provider.anthropic: ChatAnthropic,
}


class LLMProvider:
    """Lightweight registry/factory for chat model instances.

    Responsibilities:
      - Maintain a mutable mapping of model name -> `ModelParam` config.
      - Instantiate provider specific LangChain classes on demand, applying
        per-call `GenerationConfig` overrides.

    Notes:
      - Does not cache instantiated models; a model is built per call so
        concurrent runs never share client state.
    """

    def __init__(self, default_model_params: dict[str, ModelParam] | None = None):
        self._model_params = (default_model_params or {}).copy()

    def get_llm(
        self,
        name: str,
        config: GenerationConfig | None = None,
        rate_limiter: BaseRateLimiter | None = None,
    ) -> BaseChatModel:
        """Get a chat (LLM) model by its registered name.

        Params:
            name: Logical model key registered in provider configuration.
            config: Optional per-call overrides (temperature, thinking).
            rate_limiter: Optional rate limiter to throttle API calls.

        Returns:
            Instantiated chat model (`BaseChatModel`).

        Raises:
            KeyError: If the model name is not registered.
        """
        if name not in self._model_params:
            raise KeyError(
                f"Model {name} is not defined in the provider. Available models: {self.list_models()}"
            )
        model_params = self._model_params[name]
        model_class = chat_models_classes[model_params.provider]
        kwargs: dict[str, Any] = {"model": model_params.model, "rate_limiter": rate_limiter}
        temperature = model_params.temperature
        if config is not None and config.temperature is not None:
            temperature = config.temperature
        if temperature is not None:
            kwargs["temperature"] = temperature
        if (
            config is not None
            and config.thinking_enabled is False
            and model_params.provider is Provider.google
        ):
            kwargs["thinking_budget"] = 0
        return model_class(**kwargs)

    def list_models(self) -> list[str]:
        """List all registered model keys."""
        return list(self._model_params.keys())

    def update_model(self, name: str, model_params: ModelParam) -> None:
        """Update configuration for an existing model.

        Raises:
            KeyError: If the model name is not registered.
        """
        if name not in self._model_params:
            raise KeyError(
                f"Model {name} is not defined in the provider. Available models: {self.list_models()}"
            )
        self.set_model(name, model_params)

    def set_model(self, name: str, model_params: ModelParam) -> None:
        """Insert a new model configuration or overwrite an existing one."""
        self._model_params[name] = model_params


class TextGenerator(Protocol):
    """Capability consumed by LLM prompt nodes."""

    async def generate_text(
        self, prompt: str, config: GenerationConfig | None = None
    ) -> str: ...

    def generate_text_stream(
        self, prompt: str, config: GenerationConfig | None = None
    ) -> AsyncIterator[str]: ...


def message_text(message: Any) -> str:
    """Extract plain text from a LangChain message or message chunk.

    Content may be a string or a list of content blocks; only text blocks
    are kept (thinking blocks and tool calls are dropped).
    """
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    parts = []
    for block in content or ():
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainTextGenerator:
    """`TextGenerator` over a model registered in an `LLMProvider`."""

    def __init__(
        self,
        provider: LLMProvider,
        model_name: str = DEFAULT_MODEL_KEY,
        rate_limiter: BaseRateLimiter | None = None,
    ):
        self._provider = provider
        self._model_name = model_name
        self._rate_limiter = rate_limiter

    def _llm(self, config: GenerationConfig | None) -> BaseChatModel:
        return self._provider.get_llm(self._model_name, config, self._rate_limiter)

    async def generate_text(
        self, prompt: str, config: GenerationConfig | None = None
    ) -> str:
        """Generate the whole completion for ``prompt``.

        Raises:
            TextGenerationError: If the prompt is empty or the model call fails.
        """
        if not prompt:
            raise TextGenerationError("Please provide a prompt.")
        try:
            message = await self._llm(config).ainvoke(prompt)
        except Exception as e:
            logger.error("Error calling model %s: %s", self._model_name, e)
            raise TextGenerationError(f"LLM API Error: {e}") from e
        return message_text(message)

    async def generate_text_stream(
        self, prompt: str, config: GenerationConfig | None = None
    ) -> AsyncIterator[str]:
        """Stream the completion for ``prompt`` as text chunks.

        Empty chunks are skipped. A failure at any point, including before
        the first chunk, is raised from the iteration.

        Raises:
            TextGenerationError: If the prompt is empty or the model call fails.
        """
        if not prompt:
            raise TextGenerationError("Please provide a prompt.")
        try:
            async for chunk in self._llm(config).astream(prompt):
                text = message_text(chunk)
                if text:
                    yield text
        except Exception as e:
            logger.error("Error streaming from model %s: %s", self._model_name, e)
            raise TextGenerationError(f"LLM API Error: {e}") from e
