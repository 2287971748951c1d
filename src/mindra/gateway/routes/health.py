"""根路由与健康检查

GET /: 服务名称、版本、运行状态。
GET /health: Liveness 检查，永远返回 200。
"""

import time

from fastapi import APIRouter

from ..profile import SERVICE_NAME, SERVICE_VERSION
from ..schemas import HealthResponse, RootResponse

router = APIRouter()


@router.get("/", response_model=RootResponse)
async def root():
    return RootResponse(name=SERVICE_NAME, version=SERVICE_VERSION, status="running")


@router.get("/health", response_model=HealthResponse)
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return HealthResponse(status="healthy", timestamp=int(time.time()))
