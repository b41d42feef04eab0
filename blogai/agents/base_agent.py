"""Base class for prompt-driven agents that answer in a fenced JSON block."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from blogai.agents.prompting import extract_json_block, render_prompt
from blogai.agents.text_generator import TextGenerator
from blogai.core.exceptions import ParseError

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for JSON-answering agents.

    Each agent should:
    1. Define the prompt_template property (``{{name}}`` placeholders)
    2. Define the output_type property
    3. Implement _build_variables to map input data onto the placeholders
    4. Optionally override _decode for extra field checks

    A run is: render prompt (fails fast on missing variables) -> one model
    call -> extract the fenced JSON block -> validate into ``output_type``.
    """

    # Placeholders that must be non-blank, not just present.
    required_variables: tuple[str, ...] = ()
    # Accept an unfenced `{...}` reply as a fallback.
    allow_bare_json: bool = False

    def __init__(self, generator: TextGenerator) -> None:
        self._generator = generator

    @property
    def generator(self) -> TextGenerator:
        return self._generator

    @property
    def model_name(self) -> str:
        return self._generator.model_name

    @property
    @abstractmethod
    def prompt_template(self) -> str:
        """Prompt template for the agent."""
        pass

    @property
    @abstractmethod
    def output_type(self) -> type[OutputT]:
        """Pydantic model type the JSON block is decoded into."""
        pass

    @abstractmethod
    def _build_variables(self, input_data: InputT) -> dict[str, Any]:
        """Map input data onto template placeholders."""
        pass

    def build_prompt(self, input_data: InputT) -> str:
        return render_prompt(
            self.prompt_template,
            self._build_variables(input_data),
            required_non_blank=self.required_variables,
        )

    def _decode(self, payload: dict[str, Any]) -> OutputT:
        try:
            return self.output_type.model_validate(payload)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "<root>"
            raise ParseError(
                f"Invalid AI response field '{location}': {first['msg']}",
                {"errors": exc.error_count()},
            ) from exc

    async def run(self, input_data: InputT) -> OutputT:
        """Run the agent with input data.

        Raises:
            PromptValidationError: before any model call, if variables are missing.
            AIServiceError: if the model call fails.
            ParseError: if the reply has no usable JSON block.
        """
        agent_name = self.__class__.__name__
        prompt = self.build_prompt(input_data)
        logger.info(
            "Agent run started",
            extra={
                "agent": agent_name,
                "input_type": type(input_data).__name__,
                "model": self.model_name,
                "prompt_length": len(prompt),
            },
        )

        t0 = time.perf_counter()
        reply = await self._generator.generate(prompt)
        payload = extract_json_block(reply, allow_bare_object=self.allow_bare_json)
        output = self._decode(payload)
        elapsed = time.perf_counter() - t0

        logger.info(
            "Agent run completed",
            extra={
                "agent": agent_name,
                "duration_s": round(elapsed, 2),
                "output_type": type(output).__name__,
            },
        )
        return output
