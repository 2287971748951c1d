"""AgentConfig -- Agent 配置加载

启动时从环境变量加载一次，之后只读；显式传入 client / service，不做全局查找。
"""

import os
from decimal import Decimal

import structlog
from pydantic import BaseModel, Field, SecretStr, ValidationError

from .exceptions import ConfigError

log = structlog.get_logger()

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_API_VERSION = "2023-06-01"


class AgentConfig(BaseModel):
    """Agent 配置 -- 从环境变量加载

    环境变量:
        ANTHROPIC_API_KEY: Claude API 密钥（必填）
        PORT: 监听端口（默认 8002）
        MINDRA_HOST: 监听地址（默认 0.0.0.0）
        MINDRA_MODEL: 模型标识
        MINDRA_MAX_TOKENS: 最大输出 token 数（默认 4000）
        MINDRA_UPSTREAM_TIMEOUT_S: 上游调用超时（秒，默认 60）
        ANTHROPIC_BASE_URL: Claude API 基础 URL
        MINDRA_INPUT_PRICE_PER_MTOK: 每百万输入 token 价格（USD，默认 3）
        MINDRA_OUTPUT_PRICE_PER_MTOK: 每百万输出 token 价格（USD，默认 15）
    """

    api_key: SecretStr = Field(description="Claude API 密钥")
    host: str = Field(default="0.0.0.0", description="监听地址")
    port: int = Field(default=8002, ge=1, le=65535, description="监听端口")
    model: str = Field(default=DEFAULT_MODEL, description="Claude 模型标识")
    max_tokens: int = Field(default=4000, ge=1, description="最大输出 token 数")
    timeout_s: float = Field(default=60.0, gt=0, description="上游调用超时（秒）")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Claude API 基础 URL")
    api_version: str = Field(default=DEFAULT_API_VERSION, description="anthropic-version 请求头")
    input_price_per_mtok: Decimal = Field(
        default=Decimal("3"),
        ge=0,
        description="每百万输入 token 价格（USD）",
    )
    output_price_per_mtok: Decimal = Field(
        default=Decimal("15"),
        ge=0,
        description="每百万输出 token 价格（USD）",
    )


def _read_number(env_var: str, field: str, cast, kwargs: dict) -> None:
    """读取可选数值配置，非法值记录 warning 并使用默认值，不阻塞启动"""
    val = os.environ.get(env_var)
    if not val:
        return
    try:
        kwargs[field] = cast(val)
    except (ValueError, ArithmeticError):
        log.warning(
            "invalid_numeric_config",
            env_var=env_var,
            value=val,
            fallback=AgentConfig.model_fields[field].default,
        )


def load_agent_config() -> AgentConfig:
    """从环境变量加载 Agent 配置

    Returns:
        AgentConfig 实例

    Raises:
        ConfigError: ANTHROPIC_API_KEY 未设置，或数值越界（如 PORT=0）
    """
    api_key = os.environ.get("ANTHROPIC_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("ANTHROPIC_API_KEY environment variable is required")

    kwargs: dict = {"api_key": SecretStr(api_key)}

    if val := os.environ.get("MINDRA_HOST"):
        kwargs["host"] = val

    if val := os.environ.get("MINDRA_MODEL"):
        kwargs["model"] = val

    if val := os.environ.get("ANTHROPIC_BASE_URL"):
        kwargs["base_url"] = val

    _read_number("PORT", "port", int, kwargs)
    _read_number("MINDRA_MAX_TOKENS", "max_tokens", int, kwargs)
    _read_number("MINDRA_UPSTREAM_TIMEOUT_S", "timeout_s", float, kwargs)
    _read_number("MINDRA_INPUT_PRICE_PER_MTOK", "input_price_per_mtok", Decimal, kwargs)
    _read_number("MINDRA_OUTPUT_PRICE_PER_MTOK", "output_price_per_mtok", Decimal, kwargs)

    try:
        return AgentConfig(**kwargs)
    except ValidationError as e:
        raise ConfigError(f"invalid agent configuration: {e}") from e
