"""数据模型 -- Claude 请求/响应 + TokenUsage + ExecutionResult

结果载荷使用带标签的联合类型（object / text），仅在序列化时转换为对外 JSON。
"""

from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class UpstreamMessage(BaseModel):
    """发送给 Claude API 的单条消息"""

    role: Literal["user", "assistant"] = "user"
    content: str


class UpstreamRequest(BaseModel):
    """Claude Messages API 请求体"""

    model: str
    max_tokens: int = Field(ge=1)
    system: str | None = None
    messages: list[UpstreamMessage]


class ContentBlock(BaseModel):
    """响应内容块，非 text 类型（如 tool_use）的 text 为空"""

    type: str
    text: str = ""


class UpstreamUsage(BaseModel):
    """Claude API 返回的 token 计数"""

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)


class UpstreamResponse(BaseModel):
    """Claude Messages API 响应体（只读）

    content 与 usage 为必填；其余字段缺失时取空字符串。
    """

    id: str = ""
    type: str = ""
    role: str = ""
    model: str = ""
    content: list[ContentBlock]
    usage: UpstreamUsage

    @property
    def first_text(self) -> str:
        """第一个内容块的文本，无内容块时为空字符串"""
        return self.content[0].text if self.content else ""


class TokenUsage(BaseModel):
    """Token 使用统计，对外字段名为 input / output"""

    input: int = Field(default=0, ge=0, description="输入 token 数")
    output: int = Field(default=0, ge=0, description="输出 token 数")


class ObjectResult(BaseModel):
    """模型返回了合法 JSON 对象"""

    kind: Literal["object"] = "object"
    data: dict[str, Any]

    def to_payload(self) -> dict[str, Any]:
        return self.data


class TextResult(BaseModel):
    """模型未按 JSON 格式返回，保留原始文本"""

    kind: Literal["text"] = "text"
    text: str

    def to_payload(self) -> dict[str, Any]:
        return {"text": self.text}


ResultPayload = Annotated[ObjectResult | TextResult, Field(discriminator="kind")]


class ExecutionResult(BaseModel):
    """一次 execute 调用的归一化结果

    每个请求构造一次，返回给调用方，不持久化。
    """

    result: ResultPayload
    cost: Decimal = Field(ge=0, decimal_places=4, description="本次调用的 USD 成本")
    duration_ms: int = Field(ge=0, description="上游调用耗时（毫秒）")
    model: str = Field(description="配置的模型标识")
    tokens_used: TokenUsage = Field(default_factory=TokenUsage)
