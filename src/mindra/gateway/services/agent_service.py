"""AgentService -- 单次 execute 编排

组装 system prompt 与 user message，调用 AnthropicClient，计时，
解析结果并汇总为 ExecutionResult。不重试，上游异常原样抛出。
"""

import json
import time
from collections.abc import Mapping
from typing import Any

import structlog
from mindra.provider import AnthropicClient, ExecutionResult, TokenUsage, interpret

log = structlog.get_logger()

SYSTEM_PROMPT = """You are a helpful AI assistant specialized in data analysis and insights.

Your task is to analyze the provided information and generate actionable insights.

Respond with valid JSON in this format:
{
  "analysis": "Your detailed analysis",
  "insights": ["insight 1", "insight 2", "insight 3"],
  "recommendations": ["recommendation 1", "recommendation 2"]
}"""


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def build_user_message(prompt: str, context: Mapping[str, Any] | None = None) -> str:
    """拼接用户消息

    context 按 key 字典序渲染为 "- key: value" 行，保证同一输入得到同一消息。
    """
    message = f"User Query: {prompt}\n\n"

    if context:
        message += "Additional Context:\n"
        for key in sorted(context):
            message += f"- {key}: {_render_value(context[key])}\n"

    return message


class AgentService:
    """Agent 编排服务

    持有进程级 AnthropicClient；system prompt 每个部署固定，不随请求变化。
    """

    def __init__(self, client: AnthropicClient, system_prompt: str = SYSTEM_PROMPT) -> None:
        self._client = client
        self._system_prompt = system_prompt

    @property
    def model(self) -> str:
        return self._client.model

    async def execute(
        self,
        prompt: str,
        context: Mapping[str, Any] | None = None,
    ) -> ExecutionResult:
        """执行一次 Agent 调用

        Args:
            prompt: 用户问题
            context: 附加上下文

        Returns:
            ExecutionResult

        Raises:
            UpstreamError: Claude API 调用失败（含超时、非 2xx、解码失败）
        """
        user_message = build_user_message(prompt, context)

        # 只计量上游调用本身，不含请求解码与响应编码
        start_time = time.monotonic()
        response = await self._client.create_message(self._system_prompt, user_message)
        duration_ms = int((time.monotonic() - start_time) * 1000)

        usage = TokenUsage(
            input=response.usage.input_tokens,
            output=response.usage.output_tokens,
        )
        result = ExecutionResult(
            result=interpret(response.first_text),
            cost=self._client.calculate_cost(usage.input, usage.output),
            duration_ms=duration_ms,
            model=self._client.model,
            tokens_used=usage,
        )

        log.info(
            "agent_execute_completed",
            result_kind=result.result.kind,
            cost_usd=str(result.cost),
            duration_ms=duration_ms,
        )
        return result
