"""
LLM Integration Client

Provides the text generator behind site generation, supporting:
- Local LLM via LM Studio (OpenAI-compatible API)
- OpenAI API
- Anthropic API
- A deterministic mock for local development and exhausted quotas

The generator only returns raw text. Cleaning and validating that text is the
job of the ingestion pipeline, so nothing here parses the response.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import BaseModel

from sitebuilder.config import settings
from sitebuilder.core.exceptions import GenerationUnavailable

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a JSON API. Return ONLY valid JSON. No markdown, no explanations, no code blocks.

All text must be on a SINGLE LINE. Use \\n for line breaks (NOT actual newlines).

Structure REQUIRED:
{
  "name": "Business Name",
  "subdomain": "url-friendly-name",
  "description": "SEO description 100-160 chars",
  "industry": "industry type",
  "primaryColor": "#3b82f6",
  "components": [
    {
      "type": "hero",
      "props": {
        "title": "Main headline",
        "subtitle": "Supporting text",
        "ctaText": "Get Started",
        "ctaLink": "#contact",
        "image": "https://images.unsplash.com/photo-1519389950473-47ba0277781c?w=1200&h=600&fit=crop&q=80",
        "alignment": "center"
      }
    }
  ]
}

RULES:
- Always start with hero component
- Use 3-8 components total
- Valid types: hero, features, pricing, testimonials, faq, contact, text, gallery
- Use Unsplash URLs for images
- subdomain: lowercase letters, digits and hyphens only, 3-30 chars
- NO NEWLINES in strings - use \\n instead
- NO TABS in strings - use \\t instead
- Return ONLY the JSON object, nothing else"""


def build_site_prompt(prompt_text: str) -> str:
    """User message asking for a landing page document."""
    return f"""Create a landing page for: {prompt_text}

Return ONLY a JSON object with this exact structure:
{{
  "name": "Business Name",
  "subdomain": "url-friendly-name",
  "description": "SEO description",
  "industry": "industry type",
  "primaryColor": "#hexcolor",
  "components": [
    {{ "type": "hero", "props": {{...}} }},
    {{ "type": "features", "props": {{...}} }}
  ]
}}

NO markdown, NO explanations, ONLY the JSON."""


class TextGenerator(Protocol):
    """Anything that turns a prompt into raw (possibly malformed) text."""

    async def generate(self, prompt: str, response_format_hint: str = "json") -> str:
        ...


class LLMProvider(str, Enum):
    LOCAL = "local"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class Message(BaseModel):
    role: str  # system, user, assistant
    content: str


class LLMResponse(BaseModel):
    content: str
    model: str
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None


@dataclass
class LLMConfig:
    provider: LLMProvider
    base_url: str
    api_key: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout: float = 60.0


class LLMClient:
    """Unified LLM client supporting multiple providers."""

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = LLMConfig(
                provider=LLMProvider(settings.LLM_PROVIDER),
                base_url=settings.LLM_BASE_URL,
                api_key=settings.LLM_API_KEY,
                model=settings.LLM_MODEL,
                temperature=settings.LLM_TEMPERATURE,
                max_tokens=settings.LLM_MAX_TOKENS,
                timeout=settings.LLM_TIMEOUT_SECONDS,
            )
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._client

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}

        if self.config.provider == LLMProvider.OPENAI:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        elif self.config.provider == LLMProvider.ANTHROPIC:
            headers["x-api-key"] = self.config.api_key
            headers["anthropic-version"] = "2023-06-01"
        elif self.config.provider == LLMProvider.LOCAL:
            if self.config.api_key and self.config.api_key != "not-needed":
                headers["Authorization"] = f"Bearer {self.config.api_key}"

        return headers

    async def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send chat completion request."""

        if self.config.provider == LLMProvider.ANTHROPIC:
            return await self._chat_anthropic(messages, temperature, max_tokens)
        else:
            return await self._chat_openai_compatible(
                messages, temperature, max_tokens, json_mode
            )

    async def _chat_openai_compatible(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Chat using OpenAI-compatible API (works with LM Studio and OpenAI)."""

        client = await self._get_client()
        url = f"{self.config.base_url}/chat/completions"

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }

        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        response = await client.post(url, json=payload)
        response.raise_for_status()
        data = response.json()

        choice = data["choices"][0]
        return LLMResponse(
            content=choice["message"]["content"] or "",
            model=data.get("model", self.config.model),
            usage=data.get("usage"),
            finish_reason=choice.get("finish_reason"),
        )

    async def _chat_anthropic(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Chat using Anthropic API."""

        client = await self._get_client()
        url = f"{self.config.base_url}/messages"

        # Anthropic takes the system prompt outside the message list
        system_message = None
        chat_messages = []
        for m in messages:
            if m.role == "system":
                system_message = m.content
            else:
                chat_messages.append({"role": m.role, "content": m.content})

        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": chat_messages,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
        }

        if system_message:
            payload["system"] = system_message

        response = await client.post(url, json=payload)
        response.raise_for_status()
        data = response.json()

        content = "".join(
            block.get("text", "") for block in data.get("content") or [] if block.get("type") == "text"
        )
        return LLMResponse(
            content=content,
            model=data.get("model", self.config.model),
            usage={
                "prompt_tokens": data.get("usage", {}).get("input_tokens", 0),
                "completion_tokens": data.get("usage", {}).get("output_tokens", 0),
            },
            finish_reason=data.get("stop_reason"),
        )

    async def generate(self, prompt: str, response_format_hint: str = "json") -> str:
        """Generate raw text for a site prompt.

        Transport, HTTP status and response-shape failures all surface as
        ``GenerationUnavailable``; the text itself is returned untouched.
        """
        messages = [
            Message(role="system", content=SYSTEM_PROMPT),
            Message(role="user", content=build_site_prompt(prompt)),
        ]
        json_mode = response_format_hint == "json" and self.config.provider != LLMProvider.ANTHROPIC

        try:
            response = await self.chat(messages, json_mode=json_mode)
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM provider returned {e.response.status_code}")
            raise GenerationUnavailable(
                f"Generation service returned {e.response.status_code}",
                provider=self.config.provider.value,
                status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"LLM provider unreachable: {e!r}")
            raise GenerationUnavailable(
                "Generation service unreachable",
                provider=self.config.provider.value,
            ) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected LLM response shape: {e!r}")
            raise GenerationUnavailable(
                "Generation service returned an unexpected response",
                provider=self.config.provider.value,
            ) from e

        logger.info(
            f"LLM response received: model={response.model} "
            f"length={len(response.content)} finish={response.finish_reason}"
        )
        logger.debug(f"LLM raw response: {response.content}")
        return response.content

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


MOCK_IMAGE = "https://images.unsplash.com/photo-1519389950473-47ba0277781c?w=1200&h=600&fit=crop&q=80"
MOCK_FALLBACK_NAME = "Sample Business"
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SUBJECT_RE = re.compile(r"create a landing page for:\s*(.+)", re.IGNORECASE)


class MockLLMClient:
    """Deterministic generator that returns a valid six-component document.

    The business name is the first three words of the request, so the same
    prompt always produces the same document.
    """

    def __init__(self, component_count: int = 6):
        self.component_count = component_count

    @staticmethod
    def _subject(prompt: str) -> str:
        match = _SUBJECT_RE.search(prompt)
        line = match.group(1) if match else prompt
        return line.strip().splitlines()[0] if line.strip() else ""

    @staticmethod
    def _slug(name: str) -> str:
        slug = _NON_SLUG_RE.sub("-", name.lower())[:30].strip("-")
        return slug if len(slug) >= 3 else "sample-business"

    def build_document(self, prompt: str) -> Dict[str, Any]:
        business = " ".join(self._subject(prompt).split()[:3]) or MOCK_FALLBACK_NAME
        components = [
            {
                "type": "hero",
                "props": {
                    "title": f"Welcome to {business}",
                    "subtitle": "Transform your business with our innovative solutions",
                    "ctaText": "Get Started",
                    "ctaLink": "#contact",
                    "image": MOCK_IMAGE,
                    "alignment": "center",
                },
            },
            {
                "type": "features",
                "props": {
                    "title": "Our Features",
                    "subtitle": "Everything you need to succeed",
                    "features": [
                        {"icon": "zap", "title": "Fast Performance",
                         "description": "Lightning-fast load times and optimal user experience"},
                        {"icon": "shield", "title": "Secure & Reliable",
                         "description": "Enterprise-grade security and 99.9% uptime guarantee"},
                        {"icon": "users", "title": "Beautiful Design",
                         "description": "Modern, responsive designs that look great on all devices"},
                    ],
                },
            },
            {
                "type": "pricing",
                "props": {
                    "title": "Simple Pricing",
                    "subtitle": "Choose the plan that fits your needs",
                    "plans": [
                        {"name": "Starter", "price": "$29", "description": "Perfect for small businesses",
                         "features": ["Feature 1", "Feature 2", "Feature 3"],
                         "ctaText": "Get Started", "featured": False},
                        {"name": "Professional", "price": "$79", "description": "Everything you need to scale",
                         "features": ["Everything in Starter", "Priority Support"],
                         "ctaText": "Go Pro", "featured": True},
                        {"name": "Enterprise", "price": "$199", "description": "For large organizations",
                         "features": ["Everything in Professional", "Dedicated Manager"],
                         "ctaText": "Contact Sales", "featured": False},
                    ],
                },
            },
            {
                "type": "testimonials",
                "props": {
                    "title": "What Our Clients Say",
                    "testimonials": [
                        {"quote": "This service transformed our business. Highly recommended!",
                         "author": "John Smith", "role": "CEO, Tech Corp",
                         "avatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=100&h=100&fit=crop"},
                        {"quote": "Outstanding quality and support. Worth every penny.",
                         "author": "Sarah Johnson", "role": "Marketing Director, StartupCo",
                         "avatar": "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=100&h=100&fit=crop"},
                    ],
                },
            },
            {
                "type": "faq",
                "props": {
                    "title": "Frequently Asked Questions",
                    "faqs": [
                        {"question": "How do I get started?",
                         "answer": "Simply sign up for an account and follow our quick setup guide."},
                        {"question": "Can I cancel anytime?",
                         "answer": "Yes, you can cancel your subscription at any time with no penalties."},
                    ],
                },
            },
            {
                "type": "contact",
                "props": {
                    "title": "Get In Touch",
                    "subtitle": "We'd love to hear from you",
                    "email": "contact@example.com",
                },
            },
        ]
        return {
            "name": business,
            "subdomain": self._slug(business),
            "description": f"Professional {business} services and solutions."[:160],
            "industry": "technology",
            "primaryColor": "#3b82f6",
            "components": components[: max(3, min(self.component_count, len(components)))],
        }

    async def generate(self, prompt: str, response_format_hint: str = "json") -> str:
        logger.info("Mock LLM mode: returning canned site document")
        return json.dumps(self.build_document(prompt))

    async def close(self):
        return None


# Default client instance
_default_client: Optional[LLMClient] = None
_mock_client: Optional[MockLLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the default LLM client."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client


def get_text_generator() -> TextGenerator:
    """Generator used by the pipeline: the mock when ``USE_MOCK_LLM`` is set."""
    global _mock_client
    if settings.USE_MOCK_LLM:
        if _mock_client is None:
            _mock_client = MockLLMClient()
        return _mock_client
    return get_llm_client()


async def close_llm_client() -> None:
    global _default_client
    if _default_client is not None:
        await _default_client.close()
        _default_client = None
