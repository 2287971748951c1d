"""AnthropicClient 单元测试

通过 httpx.MockTransport 桩住 Claude API，验证请求构造、响应解码与异常映射。
"""

from decimal import Decimal

import httpx
import pytest
from mindra.provider.client import AnthropicClient
from mindra.provider.cost import CostCalculator
from mindra.provider.exceptions import (
    ConfigError,
    UpstreamDecodeError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
)
from mindra.provider.models import UpstreamResponse


class TestConstruction:
    """构造与配置测试"""

    def test_empty_api_key_rejected(self):
        """缺少 API key 时构造即失败"""
        with pytest.raises(ConfigError):
            AnthropicClient("")

    async def test_from_config(self, agent_config):
        client = AnthropicClient.from_config(agent_config)
        try:
            assert client.model == "claude-sonnet-4-5-20250929"
            assert client.calculate_cost(1_000_000, 0) == Decimal("3.0000")
        finally:
            await client.aclose()

    async def test_injected_http_client_not_closed(self, claude_stub):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(claude_stub))
        client = AnthropicClient("sk-test", http_client=http_client)
        await client.aclose()
        assert http_client.is_closed is False
        await http_client.aclose()


class TestCreateMessage:
    """create_message() 测试"""

    async def test_successful_call(self, stub_client, claude_stub):
        """成功调用返回解码后的 UpstreamResponse"""
        response = await stub_client.create_message("be helpful", "User Query: hi\n\n")

        assert isinstance(response, UpstreamResponse)
        assert response.id == "msg_test_001"
        assert response.first_text == "hello"
        assert response.usage.input_tokens == 2
        assert response.usage.output_tokens == 3
        assert claude_stub.call_count == 1

    async def test_request_shape(self, stub_client, claude_stub):
        """请求体包含固定模型、max_tokens、system 与单条 user 消息"""
        await stub_client.create_message("be helpful", "User Query: hi\n\n")

        request = claude_stub.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.anthropic.com/v1/messages"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["x-api-key"] == "sk-ant-test"
        assert request.headers["anthropic-version"] == "2023-06-01"

        body = claude_stub.last_json()
        assert body == {
            "model": "claude-sonnet-4-5-20250929",
            "max_tokens": 4000,
            "system": "be helpful",
            "messages": [{"role": "user", "content": "User Query: hi\n\n"}],
        }

    async def test_timeout_applied_to_request(self, stub_client, claude_stub):
        await stub_client.create_message("s", "u")
        timeout = claude_stub.requests[0].extensions["timeout"]
        assert timeout["read"] == 60.0

    async def test_custom_base_url(self, claude_stub):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(claude_stub))
        client = AnthropicClient(
            "sk-test",
            base_url="http://proxy.local:8080/",
            http_client=http_client,
        )
        await client.create_message("s", "u")
        assert str(claude_stub.requests[0].url) == "http://proxy.local:8080/v1/messages"
        await http_client.aclose()

    async def test_http_error(self, stub_client, claude_stub):
        """非 2xx 抛出 UpstreamHTTPError，保留状态码和原始响应体"""
        claude_stub.status_code = 529
        claude_stub.raw = b'{"type":"error","error":{"type":"overloaded_error"}}'

        with pytest.raises(UpstreamHTTPError) as exc_info:
            await stub_client.create_message("s", "u")

        assert exc_info.value.status_code == 529
        assert "overloaded_error" in exc_info.value.body
        assert str(exc_info.value).startswith("Claude API error (529):")

    async def test_client_error_status(self, stub_client, claude_stub):
        claude_stub.status_code = 401
        claude_stub.body = {"type": "error", "error": {"type": "authentication_error"}}

        with pytest.raises(UpstreamHTTPError) as exc_info:
            await stub_client.create_message("s", "u")
        assert exc_info.value.status_code == 401

    async def test_invalid_json_body(self, stub_client, claude_stub):
        claude_stub.raw = b"<html>bad gateway</html>"

        with pytest.raises(UpstreamDecodeError):
            await stub_client.create_message("s", "u")

    async def test_missing_usage(self, stub_client, claude_stub, make_reply):
        body = make_reply()
        del body["usage"]
        claude_stub.body = body

        with pytest.raises(UpstreamDecodeError):
            await stub_client.create_message("s", "u")

    async def test_negative_tokens_rejected(self, stub_client, claude_stub, make_reply):
        claude_stub.body = make_reply(input_tokens=-1)

        with pytest.raises(UpstreamDecodeError):
            await stub_client.create_message("s", "u")

    async def test_timeout(self, stub_client, claude_stub):
        """超时抛出 UpstreamTimeoutError"""
        claude_stub.exc = httpx.ReadTimeout("timed out")

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await stub_client.create_message("s", "u")
        assert exc_info.value.timeout_s == 60.0

    async def test_connection_error(self, stub_client, claude_stub):
        """连接失败抛出 UpstreamError（非超时）"""
        claude_stub.exc = httpx.ConnectError("Connection refused")

        with pytest.raises(UpstreamError) as exc_info:
            await stub_client.create_message("s", "u")
        assert not isinstance(exc_info.value, UpstreamTimeoutError)

    async def test_no_retry(self, stub_client, claude_stub):
        """失败不重试"""
        claude_stub.status_code = 503
        claude_stub.raw = b"unavailable"

        with pytest.raises(UpstreamHTTPError):
            await stub_client.create_message("s", "u")
        assert claude_stub.call_count == 1


class TestCalculateCost:
    def test_uses_configured_calculator(self):
        client = AnthropicClient(
            "sk-test",
            calculator=CostCalculator(input_price_per_mtok=10, output_price_per_mtok=30),
        )
        assert client.calculate_cost(1000, 1000) == Decimal("0.0400")
