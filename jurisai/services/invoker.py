"""Generation invoker: thin wrapper over the generative model call"""

import json
import logging
from typing import Awaitable, Callable, Optional, Type

from pydantic import BaseModel, ValidationError

from jurisai.errors import GenerationError
from jurisai.utils.config import get_settings
from jurisai.utils.llm import complete, extract_json

logger = logging.getLogger(__name__)

SCHEMA_INSTRUCTION = (
    "Respond ONLY with a single JSON object (no prose, no markdown) that "
    "conforms to this JSON schema:\n{schema}"
)


class GenerationInvoker:
    """Submit a compiled prompt and return text or a validated result.

    Failures are never retried here: every error surfaces as
    GenerationError and the caller decides whether to re-trigger.
    """

    def __init__(self, call: Optional[Callable[..., Awaitable[str]]] = None):
        self._call = call or complete

    async def invoke(
        self,
        prompt: str,
        allow_external_context: bool = True,
        output_schema: Optional[Type[BaseModel]] = None,
    ):
        """Returns raw text, or an instance of output_schema when one is given."""
        settings = get_settings()
        if output_schema is not None:
            schema = json.dumps(output_schema.model_json_schema(), ensure_ascii=False)
            prompt = f"{prompt}\n\n{SCHEMA_INSTRUCTION.format(schema=schema)}"

        try:
            text = await self._call(
                prompt,
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
                web_search=allow_external_context,
            )
        except Exception as e:
            logger.error(f"Generation call failed: {e}")
            raise GenerationError(f"Generation failed: {e}") from e

        if output_schema is None:
            if not text or not text.strip():
                raise GenerationError("Generation returned an empty response")
            return text

        data = extract_json(text or "")
        if not isinstance(data, dict):
            raise GenerationError("Generation returned a malformed response")
        try:
            return output_schema.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Generation result failed {output_schema.__name__} validation: {e}")
            raise GenerationError(f"Generation returned a malformed response: {e}") from e

    async def invoke_compiled(self, compiled):
        """Invoke with the output contract carried by a CompiledPrompt."""
        return await self.invoke(
            compiled.text,
            allow_external_context=compiled.allow_external_context,
            output_schema=compiled.output_schema,
        )
