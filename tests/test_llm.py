from types import SimpleNamespace

import httpx
import openai
import pytest

from gemini_bridge.core.config import Settings
from gemini_bridge.services.llm import (
    CompletionError,
    GeminiLLMClient,
    MockLLMClient,
    build_llm_client,
)


class StubCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _with_completions(client: GeminiLLMClient, completions: StubCompletions) -> GeminiLLMClient:
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return client


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_missing_api_key_fails_fast():
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        GeminiLLMClient(Settings(gemini_api_key=None))


def test_build_selects_backend(settings):
    assert isinstance(build_llm_client(Settings(llm_backend="mock")), MockLLMClient)
    assert isinstance(build_llm_client(settings), GeminiLLMClient)
    with pytest.raises(RuntimeError):
        build_llm_client(Settings(gemini_api_key="k", llm_backend="other"))


async def test_generate_returns_text(settings):
    completions = StubCompletions(response=_response("hello"))
    client = _with_completions(GeminiLLMClient(settings), completions)

    assert await client.generate("user: hi") == "hello"
    assert completions.calls[0]["model"] == settings.gemini_model
    assert completions.calls[0]["messages"] == [{"role": "user", "content": "user: hi"}]


async def test_generate_empty_content(settings):
    client = _with_completions(GeminiLLMClient(settings), StubCompletions(response=_response(None)))
    assert await client.generate("user: hi") == ""


async def test_generate_no_choices(settings):
    response = SimpleNamespace(choices=[])
    client = _with_completions(GeminiLLMClient(settings), StubCompletions(response=response))
    assert await client.generate("user: hi") == ""


async def test_generate_api_error(settings):
    request = httpx.Request("POST", "https://example.invalid")
    error = openai.APIConnectionError(request=request)
    client = _with_completions(GeminiLLMClient(settings), StubCompletions(error=error))

    with pytest.raises(CompletionError):
        await client.generate("user: hi")


async def test_mock_echoes_last_line():
    mock = MockLLMClient()
    assert await mock.generate("user: a\nai: b\nuser: c") == "You said: c"
    assert mock.prompts == ["user: a\nai: b\nuser: c"]
