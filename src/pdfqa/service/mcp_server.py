"""FastMCP server exposing document question answering as tools."""

import asyncio
import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP

from pdfqa.errors import PdfQAError
from pdfqa.service.pipeline import RAGPipeline, create_pipeline

# Configure logging
log_level = os.getenv("LOG_LEVEL", "DEBUG")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded for MCP server")

mcp = FastMCP("pdfqa Document Q&A")

_pipeline: RAGPipeline | None = None


def get_pipeline() -> RAGPipeline:
    """Return the shared pipeline, creating it on first use."""
    global _pipeline
    if _pipeline is None:
        _pipeline = create_pipeline()
    return _pipeline


async def ask_question_impl(
    pipeline: RAGPipeline, question: str, document_id: str | None = None
) -> dict[str, Any]:
    """Answer a question; errors are returned in the {error, details} shape."""
    logger.debug(f"MCP Tool ask_question: question='{question[:100]}', document_id={document_id}")
    try:
        result = await pipeline.ask(question, document_id)
    except PdfQAError as e:
        logger.warning(f"❌ MCP Tool ask_question: {e.message}")
        return e.to_dict()

    logger.info(f"✅ MCP Tool: answered with {len(result.citations)} citations")
    return result.to_dict()


async def retrieve_document_chunks_impl(
    pipeline: RAGPipeline, question: str, document_id: str | None = None
) -> list[dict[str, Any]]:
    """Return the chunks most similar to a question, best first."""
    try:
        chunks = await asyncio.to_thread(pipeline.retriever.retrieve, question, document_id)
    except PdfQAError as e:
        logger.error(f"❌ MCP Tool retrieve_document_chunks: {e.message}")
        raise ValueError(f"{e.message}: {e.details}" if e.details else e.message) from e

    logger.info(f"✅ MCP Tool: Returning {len(chunks)} chunks to MCP client")
    return [chunk.to_dict() for chunk in chunks]


def list_documents_impl(pipeline: RAGPipeline) -> list[dict[str, Any]]:
    try:
        documents = pipeline.list_documents()
    except PdfQAError as e:
        logger.error(f"❌ MCP Tool list_documents: {e.message}")
        raise ValueError(e.message) from e
    return [document.to_dict() for document in documents]


@mcp.tool()
async def ask_question(question: str, document_id: str | None = None) -> dict[str, Any]:
    """
    Answers a question using only the content of uploaded PDF documents.
    Returns the answer and citations with page numbers and similarity scores.

    Args:
        question: The question to answer
        document_id: Optional id of a single document to search (None = all documents)
    """
    return await ask_question_impl(get_pipeline(), question, document_id)


@mcp.tool()
async def retrieve_document_chunks(
    question: str, document_id: str | None = None
) -> list[dict[str, Any]]:
    """
    Searches the uploaded documents for text chunks semantically similar to
    the question. Use this tool to see the raw evidence behind an answer.

    Args:
        question: The search text
        document_id: Optional id of a single document to search (None = all documents)
    """
    return await retrieve_document_chunks_impl(get_pipeline(), question, document_id)


@mcp.tool()
async def list_documents() -> list[dict[str, Any]]:
    """
    Lists all uploaded documents with their ids, filenames, page and chunk counts.
    """
    logger.info("📂 MCP Tool list_documents: Fetching uploaded documents")
    return list_documents_impl(get_pipeline())


def main() -> None:
    """Entry point for the MCP server command-line interface."""
    logger.info("🚀 Starting pdfqa MCP Server...")
    host = os.getenv("MCP_HOST", "0.0.0.0")
    port = int(os.getenv("MCP_PORT", "8001"))
    mcp.run(transport="sse", host=host, port=port)


if __name__ == "__main__":
    main()
