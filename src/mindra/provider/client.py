"""AnthropicClient -- Claude Messages API 调用封装

单次 HTTPS 请求：system prompt + 一条 user message，不做重试。
通过 httpx.AsyncClient 发送，内部集成 CostCalculator。
"""

import time
from decimal import Decimal

import httpx
import structlog
from pydantic import ValidationError

from .config import DEFAULT_API_VERSION, DEFAULT_BASE_URL, DEFAULT_MODEL, AgentConfig
from .cost import CostCalculator
from .exceptions import (
    ConfigError,
    UpstreamDecodeError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
)
from .models import UpstreamMessage, UpstreamRequest, UpstreamResponse

log = structlog.get_logger()

MESSAGES_PATH = "/v1/messages"


class AnthropicClient:
    """Claude API 客户端

    持有一个连接池化的 httpx.AsyncClient，进程内复用；应用关闭时调用 aclose()。
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4000,
        timeout_s: float = 60.0,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        calculator: CostCalculator | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """初始化 Claude API 客户端

        Args:
            api_key: Claude API 密钥
            model: 模型标识
            max_tokens: 最大输出 token 数
            timeout_s: 请求超时（秒）
            base_url: API 基础 URL
            api_version: anthropic-version 请求头
            calculator: 成本计算器，None 使用默认单价
            http_client: 外部注入的 httpx 客户端（测试用），None 时自行创建

        Raises:
            ConfigError: api_key 为空
        """
        if not api_key:
            raise ConfigError("ANTHROPIC_API_KEY environment variable is required")

        self._api_key = api_key
        self.model = model
        self._max_tokens = max_tokens
        self._timeout_s = timeout_s
        self._url = base_url.rstrip("/") + MESSAGES_PATH
        self._api_version = api_version
        self._calculator = calculator or CostCalculator()
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient()

    @classmethod
    def from_config(
        cls,
        config: AgentConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> "AnthropicClient":
        """根据 AgentConfig 构建客户端"""
        return cls(
            config.api_key.get_secret_value(),
            model=config.model,
            max_tokens=config.max_tokens,
            timeout_s=config.timeout_s,
            base_url=config.base_url,
            api_version=config.api_version,
            calculator=CostCalculator(
                config.input_price_per_mtok,
                config.output_price_per_mtok,
            ),
            http_client=http_client,
        )

    def build_request(self, system_prompt: str, user_message: str) -> UpstreamRequest:
        return UpstreamRequest(
            model=self.model,
            max_tokens=self._max_tokens,
            system=system_prompt or None,
            messages=[UpstreamMessage(role="user", content=user_message)],
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": self._api_version,
        }

    async def create_message(self, system_prompt: str, user_message: str) -> UpstreamResponse:
        """发送一次 Messages 请求

        Args:
            system_prompt: 系统指令
            user_message: 用户消息

        Returns:
            解码后的 UpstreamResponse

        Raises:
            UpstreamTimeoutError: 超过 timeout_s
            UpstreamHTTPError: 返回非 2xx 状态码
            UpstreamDecodeError: 响应体不是合法 JSON 或结构不符
            UpstreamError: 连接失败等传输层错误
        """
        request_body = self.build_request(system_prompt, user_message)
        start_time = time.monotonic()

        log.debug(
            "claude_call_start",
            model=self.model,
            user_message_chars=len(user_message),
        )

        try:
            resp = await self._http.post(
                self._url,
                content=request_body.model_dump_json(exclude_none=True),
                headers=self._headers(),
                timeout=self._timeout_s,
            )
        except httpx.TimeoutException as e:
            self._log_failure(start_time, e)
            raise UpstreamTimeoutError(self._timeout_s, original_error=e) from e
        except httpx.HTTPError as e:
            self._log_failure(start_time, e)
            raise UpstreamError(f"failed to send request: {e}") from e

        if not resp.is_success:
            error = UpstreamHTTPError(resp.status_code, resp.text)
            self._log_failure(start_time, error)
            raise error

        try:
            response = UpstreamResponse.model_validate_json(resp.content)
        except ValidationError as e:
            self._log_failure(start_time, e)
            raise UpstreamDecodeError(
                f"failed to unmarshal response: {e.error_count()} validation error(s), "
                f"first: {e.errors()[0]['msg']}"
            ) from e

        log.info(
            "claude_call_completed",
            model=self.model,
            response_id=response.id,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )
        return response

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> Decimal:
        """按配置单价计算成本（截断到 4 位小数）"""
        return self._calculator.calculate_cost(input_tokens, output_tokens)

    def _log_failure(self, start_time: float, e: Exception) -> None:
        log.error(
            "claude_call_failed",
            model=self.model,
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )

    async def aclose(self) -> None:
        """关闭自行创建的 httpx 客户端；外部注入的客户端由调用方负责"""
        if self._owns_http_client:
            await self._http.aclose()
