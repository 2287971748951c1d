"""依赖注入模块 -- 通过 FastAPI Depends 注入 AgentService

AgentService 通过 app.state 管理，在 lifespan 中初始化。
"""

from fastapi import Request

from .services.agent_service import AgentService


def get_agent_service(request: Request) -> AgentService:
    """从 app.state 获取 AgentService 实例"""
    return request.app.state.agent_service
