"""进程入口 -- python -m mindra.gateway

加载配置后启动 uvicorn；配置缺失时以非零状态退出，不绑定端口。
"""

import sys

import structlog
import uvicorn
from mindra.provider import ConfigError, load_agent_config

from .main import create_app
from .middleware.logging_config import setup_logging
from .profile import ENDPOINTS, SERVICE_NAME

log = structlog.get_logger()


def main() -> None:
    """进程主入口"""
    setup_logging()

    try:
        config = load_agent_config()
    except ConfigError as e:
        log.error("agent_startup_failed", error=str(e))
        sys.exit(1)

    log.info(
        "agent_starting",
        service=SERVICE_NAME,
        host=config.host,
        port=config.port,
        model=config.model,
        endpoints=[f"{method} {path} - {desc}" for method, path, desc in ENDPOINTS],
        health_check=f"curl http://localhost:{config.port}/health",
    )

    # log_config=None：沿用 setup_logging() 的 structlog formatter
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
