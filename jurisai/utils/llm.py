"""Anthropic Messages API access for the generation invoker."""

import json
import logging
import re
from typing import Optional

from anthropic import AsyncAnthropic

from jurisai.errors import GenerationError
from jurisai.utils.config import get_settings

logger = logging.getLogger(__name__)

WEB_SEARCH_TOOL = "web_search_20250305"

_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_JSON_BODY = re.compile(r"(\{[\s\S]*\}|\[[\s\S]*\])")

_client: Optional[AsyncAnthropic] = None


def get_async_client() -> AsyncAnthropic:
    """Shared AsyncAnthropic client, created on first use."""
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.anthropic_api_key:
            raise GenerationError("ANTHROPIC_API_KEY is not set; add it to .env")
        _client = AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


def build_request(
    prompt: str,
    temperature: float,
    max_tokens: int,
    web_search: bool = False,
    system: str = "",
    model: Optional[str] = None,
) -> dict:
    """Keyword arguments for messages.create.

    With web_search the model may run server-side searches (case law,
    legislation, commentary) before it answers.
    """
    settings = get_settings()
    request = {
        "model": model or settings.llm_model,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
    if system:
        request["system"] = system
    if temperature > 0:
        request["temperature"] = temperature
    if web_search:
        request["tools"] = [{
            "type": WEB_SEARCH_TOOL,
            "name": "web_search",
            "max_uses": settings.web_search_max_uses,
        }]
    return request


def reply_text(response) -> str:
    # Search replies split text at citation boundaries, even inside JSON strings;
    # tool blocks carry no text
    return "".join(block.text for block in response.content if getattr(block, "text", None))


async def complete(
    prompt: str,
    temperature: float = 0.3,
    max_tokens: int = 4096,
    web_search: bool = False,
    system: str = "",
) -> str:
    client = get_async_client()
    response = await client.messages.create(
        **build_request(prompt, temperature, max_tokens, web_search=web_search, system=system)
    )
    if getattr(response, "stop_reason", None) == "max_tokens":
        logger.warning(f"Generation hit the {max_tokens} token limit; reply may be cut short")
    return reply_text(response)


def extract_json(text: str):
    """Decode the JSON payload of a model reply.

    Accepts bare JSON, a fenced block, or JSON embedded in prose. Returns
    None when nothing decodes.
    """
    fenced = _FENCE.search(text)
    candidate = (fenced.group(1) if fenced else text).strip()
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    embedded = _JSON_BODY.search(candidate)
    if embedded:
        try:
            return json.loads(embedded.group(1))
        except json.JSONDecodeError:
            pass
    logger.warning(f"Reply is not valid JSON: {text[:300]}")
    return None
