"""Upload API route for document ingestion."""

import logging

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import HTTPException

from pdfqa.client.routes.config import get_config
from pdfqa.errors import PdfQAError
from pdfqa.service.mcp_helpers import run_async

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__)


@upload_bp.route("/api/upload", methods=["POST"])
def upload_document():
    """Handle a PDF upload: extract, chunk, embed and store it.

    Expects multipart form data with:
        - file: One PDF file

    Response:
        {
            "document": {"id": "...", "filename": "paper.pdf",
                         "total_pages": 3, "total_chunks": 7},
            "chunks": 7
        }

    Returns:
        JSON response with the stored document, or {error, details} with
        400 (no file / unsupported type / no text), 413 (too large) or 500
    """
    logger.info("📤 Received document upload request")
    config = get_config()

    try:
        file = request.files.get("file")
        if file is None or not file.filename:
            logger.warning("❌ No file in request")
            return jsonify({"error": "No file provided"}), 400

        data = file.read()
        pipeline = config.require_pipeline()
        result = run_async(pipeline.upload(file.filename, data, file.mimetype))

        logger.info(f"✅ Uploaded {file.filename}: {result.chunks} chunks")
        return jsonify(result.to_dict())

    except PdfQAError as e:
        logger.warning(f"❌ Upload failed: {e.message} ({e.details})")
        return jsonify(e.to_dict()), e.status_code
    except HTTPException:
        # Oversized bodies are answered by the app-level 413 handler
        raise
    except Exception as e:
        logger.error(f"❌ Error in upload handler: {e}", exc_info=True)
        return jsonify({"error": "Failed to process file", "details": str(e)}), 500
