"""Document management API routes."""

import logging

from flask import Blueprint, jsonify

from pdfqa.client.routes.config import get_config
from pdfqa.errors import PdfQAError

logger = logging.getLogger(__name__)

documents_bp = Blueprint("documents", __name__)


@documents_bp.route("/api/documents", methods=["GET"])
def list_documents():
    """List uploaded documents.

    Returns:
        JSON response with a "documents" list
    """
    logger.info("📂 Fetching documents")
    try:
        documents = get_config().require_pipeline().list_documents()
        logger.info(f"✅ Found {len(documents)} documents")
        return jsonify({"documents": [document.to_dict() for document in documents]})
    except PdfQAError as e:
        logger.warning(f"❌ Could not list documents: {e.message}")
        return jsonify(e.to_dict()), e.status_code


@documents_bp.route("/api/documents/<document_id>", methods=["GET"])
def get_document(document_id: str):
    """Return one document's metadata."""
    try:
        document = get_config().require_pipeline().get_document(document_id)
        return jsonify({"document": document.to_dict()})
    except PdfQAError as e:
        return jsonify(e.to_dict()), e.status_code


@documents_bp.route("/api/documents/<document_id>", methods=["DELETE"])
def delete_document(document_id: str):
    """Delete a document and all of its chunks."""
    logger.info(f"🗑️ Deleting document {document_id}")
    try:
        get_config().require_pipeline().delete_document(document_id)
        return jsonify({"success": True, "id": document_id})
    except PdfQAError as e:
        logger.warning(f"❌ Could not delete document {document_id}: {e.message}")
        return jsonify(e.to_dict()), e.status_code
