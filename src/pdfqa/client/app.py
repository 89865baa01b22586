"""Flask web application for PDF question answering.

Endpoints:
    POST /api/upload          Upload a PDF and index its chunks
    POST /api/ask             Answer a question with page citations
    GET  /api/documents       List uploaded documents
    GET/DELETE /api/documents/<id>
    GET  /health, /api/test-db, /api/mcp-status

All routes delegate to one RAGPipeline built by :func:`initialize_services`.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import RequestEntityTooLarge

from pdfqa.client.routes import (
    ask_bp,
    documents_bp,
    health_bp,
    init_config,
    upload_bp,
)
from pdfqa.constants import DEFAULT_MCP_SERVER_URL, MAX_UPLOAD_SIZE_BYTES
from pdfqa.service.pipeline import create_pipeline

load_dotenv()

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "DEBUG")),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Multipart framing needs some room on top of the largest accepted file.
MAX_REQUEST_BYTES = MAX_UPLOAD_SIZE_BYTES + 1024 * 1024


def _too_large(_error: RequestEntityTooLarge):
    logger.warning("❌ Rejected request body over the upload limit")
    limit_mb = MAX_UPLOAD_SIZE_BYTES // (1024 * 1024)
    return jsonify({"error": "File too large", "details": f"Maximum upload size is {limit_mb}MB"}), 413


def _build_app() -> Flask:
    flask_app = Flask(__name__)
    flask_app.config["MAX_CONTENT_LENGTH"] = MAX_REQUEST_BYTES
    for blueprint in (upload_bp, ask_bp, documents_bp, health_bp):
        flask_app.register_blueprint(blueprint)
    flask_app.register_error_handler(RequestEntityTooLarge, _too_large)
    return flask_app


app = _build_app()


def initialize_services() -> None:
    """Build the pipeline from the environment and hand it to the routes."""
    service = os.getenv("LLM_SERVICE", "ollama")
    logger.info(f"🔧 Building pipeline with the {service} LLM service")
    pipeline = create_pipeline({"service": service})

    mcp_server_url = os.getenv("MCP_SERVER_URL", DEFAULT_MCP_SERVER_URL)
    init_config(pipeline=pipeline, mcp_server_url=mcp_server_url)
    logger.info(f"✅ Services ready (MCP server: {mcp_server_url})")


def create_app() -> Flask:
    """WSGI entry point, e.g. ``gunicorn 'pdfqa.client.app:create_app()'``."""
    initialize_services()
    return app


def main() -> None:
    """Run the development server (``pdfqa-app``)."""
    initialize_services()

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🚀 pdfqa listening on http://{host}:{port} (debug={debug}), CTRL+C to quit")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
