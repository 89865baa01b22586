"""Question answering API route."""

import logging

from flask import Blueprint, jsonify, request

from pdfqa.client.routes.config import get_config
from pdfqa.errors import PdfQAError
from pdfqa.service.mcp_helpers import run_async

logger = logging.getLogger(__name__)

ask_bp = Blueprint("ask", __name__)


@ask_bp.route("/api/ask", methods=["POST"])
def ask():
    """Answer a question from the uploaded documents.

    Request:
        {
            "question": "What does the report conclude?",
            "documentId": "0c6f..."  # Optional, restricts the search to one document
        }

    Response:
        {
            "answer": "The report concludes ... [Page 3]",
            "citations": [
                {"page": 3, "text": "First 150 characters...", "similarity": 0.82},
                ...
            ]
        }

    Returns:
        JSON response with answer and citations, or {error, details} with
        400 (missing/empty question), 404 (unknown document) or 500
    """
    config = get_config()
    logger.info("📨 Received ask request")
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "question" not in data:
            logger.warning("❌ Missing 'question' field in request")
            return jsonify({"error": "Missing 'question' field in request"}), 400

        document_id = data.get("documentId") or data.get("document_id")
        pipeline = config.require_pipeline()
        result = run_async(pipeline.ask(data["question"], document_id))

        logger.info("✅ Ask request completed successfully")
        return jsonify(result.to_dict())

    except PdfQAError as e:
        logger.warning(f"❌ Ask request failed: {e.message} ({e.details})")
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"❌ Error processing ask request: {e}", exc_info=True)
        return jsonify({"error": "Internal server error", "details": str(e)}), 500
