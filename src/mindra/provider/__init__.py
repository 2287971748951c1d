"""Mindra Provider -- Claude API 调用层

mindra.provider 的公开接口导出。
"""

# 核心组件
from .client import AnthropicClient

# 配置
from .config import AgentConfig, load_agent_config
from .cost import CostCalculator

# 异常
from .exceptions import (
    ConfigError,
    ProviderError,
    UpstreamDecodeError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
)
from .interpreter import extract_fenced_block, interpret

# 数据模型
from .models import (
    ExecutionResult,
    ObjectResult,
    ResultPayload,
    TextResult,
    TokenUsage,
    UpstreamResponse,
)

__all__ = [
    "ExecutionResult",
    "ObjectResult",
    "ResultPayload",
    "TextResult",
    "TokenUsage",
    "UpstreamResponse",
    "AnthropicClient",
    "CostCalculator",
    "extract_fenced_block",
    "interpret",
    "AgentConfig",
    "load_agent_config",
    "ProviderError",
    "ConfigError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "UpstreamHTTPError",
    "UpstreamDecodeError",
]
