"""Health check and status API routes."""

import logging

from flask import Blueprint, jsonify

from pdfqa.client.routes.config import get_config
from pdfqa.service.mcp_helpers import check_mcp_server, run_async

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status
    """
    pipeline = get_config().pipeline
    return jsonify(
        {
            "status": "healthy",
            "pipeline": "initialized" if pipeline else "not initialized",
            "llm_service": "initialized" if pipeline and pipeline.llm_service else "not initialized",
        }
    )


@health_bp.route("/api/test-db", methods=["GET"])
def test_db():
    """Check that the document store is reachable.

    Returns:
        JSON with success flag and the number of stored documents
    """
    pipeline = get_config().pipeline
    if pipeline is None:
        return jsonify({"success": False, "error": "Service not initialized"}), 500

    try:
        documents = pipeline.store.list_documents()
    except Exception as e:
        logger.error(f"❌ Database check failed: {e}", exc_info=True)
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Database connection failed",
                    "details": str(e),
                }
            ),
            500,
        )

    return jsonify(
        {
            "success": True,
            "message": "Database connection successful",
            "documents": len(documents),
        }
    )


@health_bp.route("/api/mcp-status", methods=["GET"])
def get_mcp_status():
    """Get status of the pdfqa MCP server.

    Returns:
        JSON response with the server status
    """
    url = get_config().mcp_server_url
    logger.info(f"🔌 Checking MCP server status at {url}...")
    result = run_async(check_mcp_server(url))
    return jsonify(result)
