"""Agent 静态元数据 -- GET / 与 GET /info 的内容

每个部署固定，不随请求变化。
"""

from .schemas import InfoResponse, Pricing

SERVICE_NAME = "Mindra Python Agent"
SERVICE_VERSION = "1.0.0"

AGENT_INFO = InfoResponse(
    id="agent-python-template",
    name="Python Template Agent",
    description="Template for building Python-based agents",
    version=SERVICE_VERSION,
    capabilities=[
        "Data analysis",
        "Insight generation",
        "Custom processing",
    ],
    pricing=Pricing(estimated_cost=0.45, currency="USD"),
)

ENDPOINTS = [
    ("GET", "/", "Root"),
    ("GET", "/health", "Health check"),
    ("GET", "/info", "Agent metadata"),
    ("POST", "/execute", "Execute agent"),
]
