"""gateway 测试配置 -- FastAPI app + httpx AsyncClient"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mindra.gateway.services.agent_service import AgentService


@pytest_asyncio.fixture
async def test_app(agent_config, stub_client):
    """创建测试用 FastAPI app，AgentService 接入 Claude 桩"""
    from mindra.gateway.main import create_app

    app = create_app(agent_config)

    # 手动初始化（绕过 lifespan）
    app.state.anthropic_client = stub_client
    app.state.agent_service = AgentService(stub_client)

    yield app


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac
