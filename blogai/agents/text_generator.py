"""Generative text collaborator backed by a Pydantic AI agent."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Protocol, cast

from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from blogai.config import settings
from blogai.core.exceptions import AIServiceError

if TYPE_CHECKING:
    from pydantic_ai.models import Model

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an assistant for a technical blog. Follow the response format in "
    "the user prompt exactly and put machine-readable output in a ```json block."
)

_PROVIDER_ERROR_MESSAGES = (
    (("api_key", "api key"), "Generative model API key is invalid"),
    (("quota",), "Generative model quota exceeded"),
    (("rate_limit", "rate limit", "429"), "Generative model rate limit reached, try again later"),
    (("safety",), "Content was blocked by the model safety guidelines"),
    (("timeout", "timed out"), "Generative model request timeout"),
)


class TextGenerator(Protocol):
    """Opaque text-in/text-out model. Structure lives in prompts only."""

    @property
    def model_name(self) -> str: ...

    async def generate(self, prompt: str) -> str: ...


def describe_provider_error(exc: Exception) -> str:
    """Turn a provider/SDK failure into a short, user-facing message."""
    raw = str(exc) or type(exc).__name__
    lowered = raw.lower()
    for markers, message in _PROVIDER_ERROR_MESSAGES:
        if any(marker in lowered for marker in markers):
            return message
    return f"Generative model request failed: {raw}"


class PydanticAITextGenerator:
    """Single-shot free-text generation through `pydantic_ai.Agent`.

    One call per `generate`; the agent never retries and no timeout is
    enforced at this layer.
    """

    def __init__(
        self,
        *,
        model: str | Model | None = None,
        temperature: float = 0.7,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self._model: str | Model = model or settings.llm_model
        self.temperature = temperature
        self.system_prompt = system_prompt
        self._agent: Agent[None, str] | None = None

    @property
    def model_name(self) -> str:
        if isinstance(self._model, str):
            return self._model
        return getattr(self._model, "model_name", type(self._model).__name__)

    @property
    def agent(self) -> Agent[None, str]:
        """Lazily initialize and return the Pydantic AI agent."""
        if self._agent is None:
            self._agent = cast(
                Agent[None, str],
                Agent(
                    model=self._model,
                    output_type=str,
                    system_prompt=self.system_prompt,
                    model_settings=ModelSettings(temperature=self.temperature),
                ),
            )
        return self._agent

    async def generate(self, prompt: str) -> str:
        logger.info(
            "Prompt built, sending to LLM",
            extra={"model": self.model_name, "prompt_length": len(prompt)},
        )

        t0 = time.perf_counter()
        try:
            result = await self.agent.run(prompt)
        except Exception as exc:
            message = describe_provider_error(exc)
            logger.warning(
                "LLM call failed",
                extra={"model": self.model_name, "error": repr(exc)},
            )
            raise AIServiceError(message, {"provider_error": str(exc)}) from exc
        elapsed = time.perf_counter() - t0

        logger.info(
            "LLM call completed",
            extra={
                "model": self.model_name,
                "duration_s": round(elapsed, 2),
                "total_tokens": result.usage().total_tokens,
                "reply_length": len(result.output),
            },
        )
        return result.output
