"""Agent 执行路由

POST /execute: 解码请求体，调用 AgentService，将结果或错误转换为统一 JSON 信封。
- 请求体非法 -> 400，不调用上游
- 上游失败 -> 500，{result: null, metadata: {cost: 0, duration: 0}, error}
其他 HTTP 方法由路由层返回 405。
"""

import structlog
from fastapi import APIRouter, Depends, Request
from mindra.provider import ProviderError
from starlette.responses import JSONResponse

from ..deps import get_agent_service
from ..schemas import ExecuteResponse, RequestDecodeError, decode_execute_request
from ..services.agent_service import AgentService

log = structlog.get_logger()

router = APIRouter()


@router.post("/execute")
async def execute(
    request: Request,
    service: AgentService = Depends(get_agent_service),
):
    """执行 Agent

    - 成功返回 200 + result/metadata
    - 请求体非法返回 400 + error
    - 上游失败返回 500 + 错误信封
    """
    raw = await request.body()
    try:
        body = decode_execute_request(raw)
    except RequestDecodeError as e:
        log.warning("execute_request_invalid", error=str(e))
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid request body: {e}"},
        )

    # 调用方元数据只用于日志关联；metadata.timeout 不作用于上游调用
    structlog.contextvars.bind_contextvars(
        caller_request_id=body.metadata.request_id,
        user_id=body.metadata.user_id,
    )
    log.info(
        "execute_started",
        prompt_chars=len(body.input.prompt),
        context_keys=len(body.input.context or {}),
        caller_timeout_ms=body.metadata.timeout,
    )

    try:
        execution = await service.execute(body.input.prompt, body.input.context)
        # JSONResponse 在构造时完成编码，编码失败同样走 500 信封
        return JSONResponse(
            status_code=200,
            content=ExecuteResponse.from_result(execution).to_body(),
        )
    except ProviderError as e:
        log.error("execute_failed", error=str(e), error_type=type(e).__name__)
        return _error_response(f"Claude API call failed: {e}")
    except Exception as e:
        log.exception("execute_unexpected_error", error_type=type(e).__name__)
        return _error_response(f"internal error: {e}")


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ExecuteResponse.from_error(message).to_body(),
    )
