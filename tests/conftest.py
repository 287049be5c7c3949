import pytest

from gemini_bridge.core.bridge import MessageBridge
from gemini_bridge.core.config import Settings
from gemini_bridge.core.history_store import HistoryStore
from gemini_bridge.services.llm import CompletionError, LLMClient, MockLLMClient
from gemini_bridge.services.transport import ChatTransport, TransportError


class RecordingTransport(ChatTransport):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []
        self.closed = False

    async def send_message(self, chat_id: str, text: str) -> None:
        if self.fail:
            raise TransportError("gateway unreachable")
        self.sent.append((chat_id, text))

    async def aclose(self) -> None:
        self.closed = True


class FailingLLMClient(LLMClient):
    def __init__(self):
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        raise CompletionError("quota exhausted")


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def llm():
    return MockLLMClient(reply="hello")


@pytest.fixture
def history():
    return HistoryStore()


@pytest.fixture
def bridge(llm, transport, history):
    return MessageBridge(llm=llm, transport=transport, history=history)


@pytest.fixture
def settings():
    return Settings(gemini_api_key="test-key")
