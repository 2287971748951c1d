"""全局 pytest 配置 -- Claude API 桩 + AgentConfig / AnthropicClient fixture"""

import json
from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from mindra.provider import AgentConfig, AnthropicClient
from pydantic import SecretStr


def _claude_reply(
    text: str = "hello",
    input_tokens: int = 2,
    output_tokens: int = 3,
    model: str = "claude-sonnet-4-5-20250929",
) -> dict:
    """构造 Claude Messages API 成功响应体"""
    return {
        "id": "msg_test_001",
        "type": "message",
        "role": "assistant",
        "model": model,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


class ClaudeStub:
    """httpx.MockTransport 的 handler，记录每次调用

    测试中直接修改 status_code / body / raw / exc 控制下一次响应。
    """

    def __init__(self) -> None:
        self.status_code = 200
        self.body: dict | None = _claude_reply()
        self.raw: bytes | None = None
        self.exc: Exception | None = None
        self.requests: list[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def make_reply() -> Callable[..., dict]:
    """Claude 响应体工厂"""
    return _claude_reply


@pytest.fixture
def agent_config() -> AgentConfig:
    """测试用配置（默认单价 $3 / $15 每百万 token）"""
    return AgentConfig(api_key=SecretStr("sk-ant-test"))


@pytest.fixture
def claude_stub() -> ClaudeStub:
    return ClaudeStub()


@pytest_asyncio.fixture
async def stub_client(
    agent_config: AgentConfig, claude_stub: ClaudeStub
) -> AsyncGenerator[AnthropicClient, None]:
    """接入 Claude 桩的 AnthropicClient"""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(claude_stub))
    client = AnthropicClient.from_config(agent_config, http_client=http_client)
    yield client
    await http_client.aclose()
