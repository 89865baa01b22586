"""Collaborators shared by the route modules."""

from dataclasses import dataclass
from typing import Any

from pdfqa.constants import DEFAULT_MCP_SERVER_URL
from pdfqa.errors import UpstreamError


@dataclass
class RouteConfig:
    """What the blueprints need at request time.

    Attributes:
        pipeline: RAGPipeline serving the upload, ask and document routes
        mcp_server_url: MCP server probed by /api/mcp-status
    """

    pipeline: Any = None
    mcp_server_url: str = DEFAULT_MCP_SERVER_URL

    def require_pipeline(self) -> Any:
        if self.pipeline is None:
            raise UpstreamError("Service not initialized", details="No pipeline configured")
        return self.pipeline


_config = RouteConfig()


def get_config() -> RouteConfig:
    return _config


def init_config(pipeline: Any = None, mcp_server_url: str | None = None) -> None:
    """Install collaborators at startup; ``None`` leaves a field unchanged."""
    if pipeline is not None:
        _config.pipeline = pipeline
    if mcp_server_url is not None:
        _config.mcp_server_url = mcp_server_url
