"""FastAPI 应用主文件

app 创建 + lifespan 管理：加载配置 + 初始化 AnthropicClient / AgentService + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from mindra.provider import AgentConfig, AnthropicClient, load_agent_config

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .profile import SERVICE_NAME, SERVICE_VERSION
from .routes import execute, health, info
from .services.agent_service import AgentService

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时构建 Agent 组件，关闭时释放 HTTP 连接池

    未显式传入配置时从环境变量加载；ConfigError 会中止启动（在绑定端口之前）。
    """
    config: AgentConfig = app.state.agent_config or load_agent_config()
    app.state.agent_config = config

    client = AnthropicClient.from_config(config)
    app.state.anthropic_client = client
    app.state.agent_service = AgentService(client)

    log.info(
        "agent_service_initialized",
        model=config.model,
        timeout_s=config.timeout_s,
        base_url=config.base_url,
    )

    yield

    await client.aclose()


def create_app(config: AgentConfig | None = None) -> FastAPI:
    """创建 FastAPI 应用实例

    Args:
        config: 启动配置，None 时在 lifespan 中从环境变量加载
    """
    app = FastAPI(
        title=SERVICE_NAME,
        version=SERVICE_VERSION,
        description="Claude 驱动的数据分析 Agent 模板",
        lifespan=lifespan,
    )
    app.state.agent_config = config

    app.add_middleware(LoggingMiddleware)

    setup_logging()
    setup_logfire(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(info.router, tags=["info"])
    app.include_router(execute.router, tags=["execute"])

    return app


# 默认 app 实例（uvicorn mindra.gateway.main:app 入口）
app = create_app()
