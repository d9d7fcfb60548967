"""
Clients package for Workforce Risk.

Contains:
- workforce_client: Live Data Technologies People API (find, search, reports)
- llm_client: Anthropic Messages API wrapper
"""

from workforce_risk.clients.llm_client import (
    LLMClient,
    LLMError,
    LLMResponse,
    TextBlock,
    ToolUseBlock,
    get_llm_client,
    reset_llm_client,
)
from workforce_risk.clients.workforce_client import (
    SearchResponse,
    WorkforceClient,
    get_workforce_client,
    profile_slug,
    reset_workforce_client,
)

__all__ = [
    "LLMClient",
    "LLMError",
    "LLMResponse",
    "TextBlock",
    "ToolUseBlock",
    "get_llm_client",
    "reset_llm_client",
    "SearchResponse",
    "WorkforceClient",
    "get_workforce_client",
    "profile_slug",
    "reset_workforce_client",
]
