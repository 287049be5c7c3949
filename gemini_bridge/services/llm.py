import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from gemini_bridge.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class CompletionError(Exception):
    """The completion API failed or returned something unusable."""


# ========== Abstract Interface ==========
class LLMClient:
    async def generate(self, prompt: str) -> str:
        """
        Abstract completion interface.
        Return the generated text, "" when the model produced none.
        """
        raise NotImplementedError


# ========== Gemini Implementation ==========
class GeminiLLMClient(LLMClient):
    """
    Gemini client, spoken to through its OpenAI-compatible endpoint.
    """
    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        if not settings.gemini_api_key:
            raise RuntimeError("GEMINI_API_KEY not set")

        self.model = settings.gemini_model
        self.client = AsyncOpenAI(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
        )

        logger.info("LLM: Gemini client initialized (model=%s)", self.model)

    async def generate(self, prompt: str) -> str:
        logger.debug("LLM: sending request to Gemini (%s chars)", len(prompt))

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            raise CompletionError(f"Gemini request failed: {e}") from e

        logger.debug("LLM: Gemini response: %s", response)

        if not response.choices:
            return ""

        message = response.choices[0].message
        if message is None:
            raise CompletionError("Gemini response has no message")
        return message.content or ""


# ========== Mock Implementation (for testing / offline runs) ==========
class MockLLMClient(LLMClient):
    def __init__(self, reply: Optional[str] = None):
        self.reply = reply
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.reply is not None:
            return self.reply
        last_line = prompt.rsplit("\n", 1)[-1]
        return f"You said: {last_line.removeprefix('user: ')}"


def build_llm_client(settings: Optional[Settings] = None) -> LLMClient:
    settings = settings or get_settings()
    if settings.llm_backend == "mock":
        logger.warning("LLM: using mock backend")
        return MockLLMClient()
    if settings.llm_backend != "gemini":
        raise RuntimeError(f"Unknown LLM_BACKEND: {settings.llm_backend}")
    return GeminiLLMClient(settings)
