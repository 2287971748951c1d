"""Agent 元数据路由 -- GET /info"""

from fastapi import APIRouter

from ..profile import AGENT_INFO
from ..schemas import InfoResponse

router = APIRouter()


@router.get("/info", response_model=InfoResponse)
async def info():
    return AGENT_INFO
