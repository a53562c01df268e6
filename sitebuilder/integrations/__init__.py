"""
External service integrations for SiteBuilder.

- llm: text generator for site documents (supports local/OpenAI/Anthropic, plus a mock)
"""

from sitebuilder.integrations.llm import (
    LLMClient,
    LLMResponse,
    Message,
    MockLLMClient,
    TextGenerator,
    get_llm_client,
    get_text_generator,
)

__all__ = [
    "LLMClient",
    "LLMResponse",
    "Message",
    "MockLLMClient",
    "TextGenerator",
    "get_llm_client",
    "get_text_generator",
]
