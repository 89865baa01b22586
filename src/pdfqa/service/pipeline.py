"""Upload and ask pipelines.

``RAGPipeline`` is the orchestration boundary: it wires the chunker,
retriever, context assembler, citation builder, answer generator and upload
saga around an injected store and LLM service. Everything it raises is a
``PdfQAError``.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any

from pdfqa.service.ingest import chunk_pages, extract_pages_from_pdf, validate_upload
from pdfqa.constants import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TOP_K,
    EMBEDDING_BATCH_SIZE,
    INSERT_BATCH_SIZE,
    MAX_CHUNKS_PER_DOCUMENT,
    MAX_QUESTION_LENGTH,
)
from pdfqa.errors import InvalidInputError, NotFoundError, UpstreamError
from pdfqa.llm import LLMService, get_llm_service
from pdfqa.service.context import Citation, assemble_context, build_citations
from pdfqa.service.database.models import Document
from pdfqa.service.database.store import ChunkStore, RavenChunkStore
from pdfqa.service.generator import AnswerGenerator
from pdfqa.service.retriever import Retriever, normalize_question
from pdfqa.service.upload_saga import UploadSaga

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Tunable parameters of the upload and ask pipelines."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    max_chunks: int = MAX_CHUNKS_PER_DOCUMENT
    top_k: int = DEFAULT_TOP_K
    max_question_length: int = MAX_QUESTION_LENGTH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    embedding_batch_size: int = EMBEDDING_BATCH_SIZE
    insert_batch_size: int = INSERT_BATCH_SIZE

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Read CHUNK_SIZE, CHUNK_OVERLAP, TOP_K and REQUEST_TIMEOUT from the environment."""
        return cls(
            chunk_size=int(os.getenv("CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))),
            chunk_overlap=int(os.getenv("CHUNK_OVERLAP", str(DEFAULT_CHUNK_OVERLAP))),
            top_k=int(os.getenv("TOP_K", str(DEFAULT_TOP_K))),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))),
        )


@dataclass
class UploadResult:
    document: Document
    chunks: int

    def to_dict(self) -> dict[str, Any]:
        return {"document": self.document.to_dict(), "chunks": self.chunks}


@dataclass
class AskResult:
    answer: str
    citations: list[Citation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "citations": [citation.to_dict() for citation in self.citations],
        }


class RAGPipeline:
    """Retrieval-augmented question answering over uploaded PDFs."""

    def __init__(
        self,
        store: ChunkStore,
        llm_service: LLMService,
        config: PipelineConfig | None = None,
    ) -> None:
        self.store = store
        self.llm_service = llm_service
        self.config = config or PipelineConfig()
        self.retriever = Retriever(
            store,
            llm_service,
            top_k=self.config.top_k,
            max_question_length=self.config.max_question_length,
        )
        self.generator = AnswerGenerator(llm_service, timeout=self.config.request_timeout)

    async def upload(
        self, filename: str | None, data: bytes, content_type: str | None = None
    ) -> UploadResult:
        """Chunk, embed and store one PDF.

        Raises:
            InvalidInputError: Missing file, wrong type, unparsable or empty PDF
            PayloadTooLargeError: File over the size limit
            UpstreamError: The document row could not be created
            PartialFailureError: Embedding or storage failed (rolled back)
        """
        validate_upload(filename, content_type, len(data))
        logger.info(f"📤 Processing file: {filename}")

        try:
            pages = await asyncio.to_thread(extract_pages_from_pdf, data)
        except Exception as e:
            logger.warning(f"❌ PDF parsing error: {e}")
            raise InvalidInputError("Failed to parse PDF", details=str(e)) from e

        chunks = chunk_pages(
            pages,
            chunk_size=self.config.chunk_size,
            overlap=self.config.chunk_overlap,
            max_chunks=self.config.max_chunks,
        )
        if not chunks:
            raise InvalidInputError("PDF appears to be empty or could not extract text")

        saga = UploadSaga(
            self.store,
            self.llm_service,
            embedding_batch_size=self.config.embedding_batch_size,
            insert_batch_size=self.config.insert_batch_size,
        )
        document = await saga.run(filename, len(pages), chunks)
        return UploadResult(document=document, chunks=document.total_chunks)

    async def ask(self, question: str | None, document_id: str | None = None) -> AskResult:
        """Answer a question from the most similar stored chunks.

        The question is trimmed and truncated once; only that text is
        embedded and sent to the model.

        Raises:
            InvalidInputError: Blank question
            NotFoundError: Unknown document_id
            UpstreamError: Embedding, search or generation failure
        """
        question = normalize_question(question, self.config.max_question_length)
        logger.info(f"🔍 Question: '{question[:100]}' (document: {document_id or 'all'})")

        chunks = await asyncio.to_thread(self.retriever.retrieve, question, document_id)
        citations = build_citations(chunks)
        context = assemble_context(chunks)
        answer = await self.generator.generate(context, question)

        return AskResult(answer=answer, citations=citations)

    def list_documents(self) -> list[Document]:
        try:
            return self.store.list_documents()
        except Exception as e:
            raise UpstreamError("Failed to list documents", details=str(e)) from e

    def get_document(self, document_id: str) -> Document:
        try:
            document = self.store.get_document(document_id)
        except Exception as e:
            raise UpstreamError("Failed to look up document", details=str(e)) from e
        if document is None:
            raise NotFoundError("Document not found")
        return document

    def delete_document(self, document_id: str) -> None:
        self.get_document(document_id)
        try:
            self.store.delete_document(document_id)
        except Exception as e:
            raise UpstreamError("Failed to delete document", details=str(e)) from e
        logger.info(f"🗑️ Deleted document {document_id}")


def create_pipeline(llm_config: dict | None = None) -> RAGPipeline:
    """Build a pipeline on RavenDB and the configured LLM service.

    Args:
        llm_config: Optional overrides passed to get_llm_service

    Returns:
        RAGPipeline: Pipeline configured from the environment
    """
    store = RavenChunkStore.connect()
    llm_service = get_llm_service(llm_config)
    return RAGPipeline(store, llm_service, PipelineConfig.from_env())
