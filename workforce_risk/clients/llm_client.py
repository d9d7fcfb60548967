"""
LLM client for Workforce Risk.

Thin async wrapper over the Anthropic Messages API used for:
- Assessment narrative generation (JSON-only output)
- Follow-up chat with tool use

Responses are normalised into LLMResponse, a closed set of content
blocks (text, tool_use), so callers never touch SDK objects.
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

import anthropic
from pydantic import BaseModel, Field

from workforce_risk.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """The LLM call failed (not configured, API error, timeout)."""


class LLMNotConfiguredError(LLMError):
    """No API key is configured."""


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any] = Field(default_factory=dict)


ContentBlock = Annotated[Union[TextBlock, ToolUseBlock], Field(discriminator="type")]


class LLMResponse(BaseModel):
    """
    Normalised model response.

    Attributes:
        stop_reason: end_turn, tool_use, max_tokens, ...
        content: Text and tool-use blocks in model order
    """
    stop_reason: Optional[str] = None
    content: List[ContentBlock] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Text blocks joined with newlines."""
        return "\n".join(block.text for block in self.content if isinstance(block, TextBlock))

    @property
    def tool_uses(self) -> List[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    def to_message_content(self) -> List[Dict[str, Any]]:
        """Content blocks as API message params, for replaying as an assistant turn."""
        return [block.model_dump() for block in self.content]


def _normalize(message: Any) -> LLMResponse:
    blocks: List[Union[TextBlock, ToolUseBlock]] = []
    for block in getattr(message, "content", None) or []:
        block_type = getattr(block, "type", None)
        if block_type == "text":
            blocks.append(TextBlock(text=block.text))
        elif block_type == "tool_use":
            blocks.append(ToolUseBlock(id=block.id, name=block.name, input=dict(block.input or {})))
        else:
            logger.debug(f"Ignoring LLM content block of type {block_type}")
    return LLMResponse(stop_reason=getattr(message, "stop_reason", None), content=blocks)


class LLMClient:
    """
    Async Anthropic client.

    Pass `client` to inject a preconfigured AsyncAnthropic instance;
    otherwise one is created lazily from settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        settings = settings or get_settings()
        self.api_key = settings.anthropic_api_key
        self.default_model = settings.narrative_model
        self.timeout = settings.llm_timeout_seconds
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            if not self.api_key:
                raise LLMNotConfiguredError("ANTHROPIC_API_KEY is not configured")
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=1)
        return self._client

    async def create_message(
        self,
        system: str,
        messages: List[Dict[str, Any]],
        max_tokens: int,
        model: Optional[str] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        """
        Send one Messages API request.

        Args:
            system: System instruction
            messages: Conversation, alternating user/assistant turns
            max_tokens: Output token budget
            model: Model name (defaults to the narrative model)
            tools: Optional tool definitions
            timeout: Per-request timeout in seconds

        Returns:
            LLMResponse

        Raises:
            LLMError: On missing key or any API failure
        """
        client = self._get_client()
        kwargs: Dict[str, Any] = {
            "model": model or self.default_model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": messages,
            "timeout": timeout or self.timeout,
        }
        if tools:
            kwargs["tools"] = tools

        try:
            message = await client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            logger.error(f"LLM request timed out ({kwargs['model']})")
            raise LLMError("LLM request timed out") from e
        except anthropic.APIStatusError as e:
            logger.error(f"LLM API returned {e.status_code}: {str(e)}")
            raise LLMError(f"LLM API returned {e.status_code}") from e
        except anthropic.APIError as e:
            logger.error(f"LLM API error: {str(e)}")
            raise LLMError(f"LLM API error: {str(e)}") from e

        response = _normalize(message)
        logger.debug(
            f"LLM response: stop_reason={response.stop_reason}, "
            f"{len(response.content)} block(s), {len(response.tool_uses)} tool use(s)"
        )
        return response

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None


# Singleton client instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """
    Get the singleton LLM client instance.

    Returns:
        LLMClient instance
    """
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def reset_llm_client():
    """Reset the singleton client (for testing)."""
    global _llm_client
    _llm_client = None
