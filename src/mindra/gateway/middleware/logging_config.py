"""structlog 配置模块

dev 模式：ConsoleRenderer 可读输出
json 模式：每行一个 JSON 事件，供容器日志采集
标准库 logging（uvicorn、httpx）经 ProcessorFormatter 渲染成同一格式。
Logfire APM：LOGFIRE_SEND_TO_LOGFIRE 环境变量控制，false 时仅本地日志。
"""

import logging
import os

import structlog
from fastapi import FastAPI

# 访问日志由 LoggingMiddleware 输出；httpx 每次请求一条 INFO，压到 WARNING
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _render_chain(log_format: str) -> list[structlog.types.Processor]:
    if log_format == "json":
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog + 标准库 logging

    Args:
        log_format: "json" 或 "dev"，None 时读取 MINDRA_LOG_FORMAT（默认 dev）
        log_level: 日志级别名，None 时读取 MINDRA_LOG_LEVEL（默认 INFO）

    可重复调用；每次调用替换 root logger 的 handler。
    """
    log_format = log_format or os.environ.get("MINDRA_LOG_FORMAT", "dev")
    log_level = log_level or os.environ.get("MINDRA_LOG_LEVEL", "INFO")
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(log_format),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def setup_logfire(app: FastAPI) -> None:
    """Logfire 可选初始化

    LOGFIRE_SEND_TO_LOGFIRE 环境变量控制：
    - "true": 启用 Logfire APM（需要 LOGFIRE_TOKEN，安装 observability extra）
    - "false" (默认): 纯本地日志
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure(service_name="mindra-agent")
        logfire.instrument_fastapi(app)
    except Exception as e:
        # Logfire 不可用时不影响请求处理
        structlog.get_logger().warning("logfire_init_failed", error=str(e))
