"""HTTP 请求/响应模型 -- Agent 协议契约

对外字段名为 camelCase（requestId / tokensUsed），Python 侧使用 snake_case。
"""

from typing import Any

from mindra.provider import ExecutionResult, TokenUsage
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic.config import ConfigDict


class RequestDecodeError(ValueError):
    """请求体不是合法 JSON 或字段类型不符"""


class _RequestModel(BaseModel):
    """请求侧模型基类：严格类型，显式 null 等同字段缺失（取零值）"""

    model_config = ConfigDict(strict=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class AgentInput(_RequestModel):
    prompt: str = ""
    context: dict[str, Any] | None = None


class RequestMetadata(_RequestModel):
    """调用方元数据

    timeout 仅记录，不作用于上游调用（上游超时由 AgentConfig.timeout_s 决定）。
    """

    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(default="", alias="requestId")
    user_id: str = Field(default="", alias="userId")
    timeout: int = 0


class ExecuteRequest(_RequestModel):
    """POST /execute 请求体，缺失或为 null 的字段取零值"""

    input: AgentInput = Field(default_factory=AgentInput)
    metadata: RequestMetadata = Field(default_factory=RequestMetadata)


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def decode_execute_request(raw: bytes) -> ExecuteRequest:
    """解码 POST /execute 请求体

    Raises:
        RequestDecodeError: JSON 非法、顶层不是对象、字段类型不符
    """
    try:
        return ExecuteRequest.model_validate_json(raw)
    except ValidationError as e:
        raise RequestDecodeError(_describe(e)) from e


class ResultMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cost: float = 0.0
    duration: int = Field(default=0, description="毫秒")
    model: str | None = None
    tokens_used: TokenUsage | None = Field(default=None, alias="tokensUsed")


class ExecuteResponse(BaseModel):
    """POST /execute 响应

    成功时 result 有值、error 缺省；失败时 result 为 null、error 有值。
    """

    result: dict[str, Any] | None = None
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)
    error: str | None = None

    @classmethod
    def from_result(cls, execution: ExecutionResult) -> "ExecuteResponse":
        return cls(
            result=execution.result.to_payload(),
            metadata=ResultMetadata(
                cost=float(execution.cost),
                duration=execution.duration_ms,
                model=execution.model,
                tokens_used=execution.tokens_used,
            ),
        )

    @classmethod
    def from_error(cls, message: str) -> "ExecuteResponse":
        return cls(result=None, metadata=ResultMetadata(cost=0.0, duration=0), error=message)

    def to_body(self) -> dict[str, Any]:
        """序列化为响应 JSON：result 始终输出（失败时为 null），其余空字段省略"""
        body: dict[str, Any] = {
            "result": self.result,
            "metadata": self.metadata.model_dump(by_alias=True, exclude_none=True),
        }
        if self.error is not None:
            body["error"] = self.error
        return body


class RootResponse(BaseModel):
    name: str
    version: str
    status: str


class HealthResponse(BaseModel):
    status: str
    timestamp: int = Field(description="Unix 时间戳（秒）")


class Pricing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    estimated_cost: float = Field(alias="estimatedCost")
    currency: str = "USD"


class InfoResponse(BaseModel):
    id: str
    name: str
    description: str
    version: str
    capabilities: list[str]
    pricing: Pricing
