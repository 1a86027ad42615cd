from abc import ABC, abstractmethod
from typing import List, Dict, Optional
from openai import AsyncOpenAI
from anthropic import AsyncAnthropic

from agrosat.api.config import Settings


class LLMNotConfiguredError(RuntimeError):
    """Raised when no language model provider has credentials"""


class LLMClient(ABC):
    """Abstract base class for LLM clients"""

    provider: str = "none"
    model: str = ""
    configured: bool = True

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> str:
        """Generate chat completion"""
        pass


class OpenAIClient(LLMClient):
    """OpenAI API client wrapper (also serves OpenAI-compatible endpoints such as Groq)"""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        default_temperature: float = 0.7,
        default_max_tokens: int = 500
    ):
        # One round trip per call; the SDK's own retries are disabled
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
        self.model = model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> str:
        """Generate chat completion using OpenAI"""

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature if temperature is not None else self.default_temperature,
            max_tokens=max_tokens or self.default_max_tokens,
            **kwargs
        )

        return response.choices[0].message.content or ""


class AnthropicClient(LLMClient):
    """Anthropic (Claude) API client wrapper"""

    provider = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        timeout: float = 30.0,
        default_temperature: float = 0.7,
        default_max_tokens: int = 500
    ):
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> str:
        """Generate chat completion using Anthropic Claude"""

        # Convert messages format (OpenAI -> Anthropic)
        system_message = None
        conversation_messages = []

        for msg in messages:
            if msg["role"] == "system":
                system_message = msg["content"]
            else:
                conversation_messages.append(msg)

        kwargs = {}
        if system_message:
            kwargs["system"] = system_message

        response = await self.client.messages.create(
            model=self.model,
            messages=conversation_messages,
            temperature=temperature if temperature is not None else self.default_temperature,
            max_tokens=max_tokens or self.default_max_tokens,
            **kwargs
        )

        return "".join(block.text for block in response.content if getattr(block, "type", "") == "text")


class UnconfiguredLLMClient(LLMClient):
    """Stand-in used when no provider has an API key"""

    configured = False

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        json_mode: bool = False
    ) -> str:
        raise LLMNotConfiguredError("No LLM provider configured (set OPENAI_API_KEY or ANTHROPIC_API_KEY)")


def build_llm_client(settings: Settings) -> LLMClient:
    """
    Pick the LLM provider once, at startup

    OpenAI (or a compatible endpoint) wins when configured, then Anthropic;
    without any key the unconfigured client is returned.
    """

    if settings.OPENAI_API_KEY:
        return OpenAIClient(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.LLM_TIMEOUT_SECONDS
        )

    if settings.ANTHROPIC_API_KEY:
        return AnthropicClient(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS
        )

    return UnconfiguredLLMClient()
