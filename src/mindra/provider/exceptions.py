"""Provider 异常体系

配置错误在启动期致命；上游调用错误按请求恢复，由 HTTP 边界转换为错误信封。
"""


class ProviderError(Exception):
    """Provider 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否只影响当前请求（False 表示进程无法继续）
        """
        super().__init__(message)
        self.recoverable = recoverable


class ConfigError(ProviderError):
    """启动配置缺失或非法（如未设置 ANTHROPIC_API_KEY）

    仅在启动期抛出，进程应在绑定端口前退出。
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, recoverable=False)


class UpstreamError(ProviderError):
    """Claude API 调用失败基类（连接失败、DNS 解析失败等传输层错误）"""


class UpstreamTimeoutError(UpstreamError):
    """Claude API 调用超时"""

    def __init__(self, timeout_s: float, original_error: Exception | None = None) -> None:
        super().__init__(f"Claude API request timed out after {timeout_s:g}s")
        self.timeout_s = timeout_s
        self.original_error = original_error


class UpstreamHTTPError(UpstreamError):
    """Claude API 返回非 2xx 状态码，保留状态码与原始响应体"""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Claude API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class UpstreamDecodeError(UpstreamError):
    """Claude API 响应体不是合法 JSON 或结构不符"""

    def __init__(self, message: str = "failed to decode Claude API response") -> None:
        super().__init__(message)
