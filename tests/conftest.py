"""Pytest configuration and shared fixtures for the test suite."""

import threading
import uuid

import fitz  # PyMuPDF
import pytest
import requests

from pdfqa.service.database.models import Document, DocumentChunk, RetrievedChunk
from pdfqa.service.database.utils import cosine_similarity, normalize_similarity
from pdfqa.service.pipeline import PipelineConfig, RAGPipeline


# Service availability checks
def ollama_available() -> bool:
    """Check if Ollama server is running and accessible.

    Returns:
        True if Ollama is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:11434/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def ravendb_available() -> bool:
    """Check if RavenDB server is running and accessible.

    Returns:
        True if RavenDB is available, False otherwise
    """
    try:
        response = requests.get("http://localhost:8080/databases", timeout=2)
        return response.status_code in (200, 401)  # Auth required is OK
    except requests.RequestException:
        return False


class FakeLLMService:
    """In-memory LLMService recording every call it receives."""

    VOCABULARY = "aeiostnrl"

    def __init__(self, answer: str = "The answer is on page 1. [Page 1]") -> None:
        self.answer = answer
        self.embedded_texts: list[str] = []
        self.messages_received: list[list[dict]] = []
        self.embedding_error: Exception | None = None
        self.response_error: Exception | None = None
        self._lock = threading.Lock()

    def embed(self, text: str) -> list[float]:
        lowered = text.lower()
        return [float(lowered.count(letter)) + 1.0 for letter in self.VOCABULARY]

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        if self.embedding_error is not None:
            raise self.embedding_error
        with self._lock:
            self.embedded_texts.extend(texts)
        return [self.embed(text) for text in texts]

    async def generate_response(self, messages: list[dict]) -> str:
        self.messages_received.append(messages)
        if self.response_error is not None:
            raise self.response_error
        return self.answer


class FakeChunkStore:
    """In-memory ChunkStore with brute-force cosine search.

    Set ``failures[method_name]`` to make a method raise, or
    ``search_results`` to pin what similarity_search returns.
    """

    def __init__(self) -> None:
        self.documents: dict[str, Document] = {}
        self.chunks: dict[str, DocumentChunk] = {}
        self.failures: dict[str, Exception] = {}
        self.search_results: list[RetrievedChunk] | None = None
        self.calls: list[str] = []
        self.search_calls: list[dict] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    def create_document(self, filename: str, total_pages: int) -> Document:
        self._record("create_document")
        document = Document(Id=str(uuid.uuid4()), filename=filename, total_pages=total_pages)
        self.documents[document.Id] = document
        return document

    def get_document(self, document_id: str) -> Document | None:
        self._record("get_document")
        return self.documents.get(document_id)

    def list_documents(self) -> list[Document]:
        self._record("list_documents")
        return list(self.documents.values())

    def update_chunk_count(self, document_id: str, total_chunks: int) -> None:
        self._record("update_chunk_count")
        self.documents[document_id].total_chunks = total_chunks

    def delete_document(self, document_id: str) -> None:
        self._record("delete_document")
        self.delete_chunks(document_id)
        self.documents.pop(document_id, None)

    def insert_chunks(self, chunks: list[DocumentChunk]) -> int:
        self._record("insert_chunks")
        for chunk in chunks:
            self.chunks[chunk.Id] = chunk
        return len(chunks)

    def delete_chunks(self, document_id: str) -> int:
        self._record("delete_chunks")
        doomed = [key for key, chunk in self.chunks.items() if chunk.document_id == document_id]
        for key in doomed:
            del self.chunks[key]
        return len(doomed)

    def chunks_for(self, document_id: str) -> list[DocumentChunk]:
        return sorted(
            (c for c in self.chunks.values() if c.document_id == document_id),
            key=lambda c: c.chunk_index,
        )

    def similarity_search(
        self, embedding: list[float], limit: int, document_id: str | None = None
    ) -> list[RetrievedChunk]:
        self._record("similarity_search")
        self.search_calls.append(
            {"embedding": embedding, "limit": limit, "document_id": document_id}
        )
        if self.search_results is not None:
            return list(self.search_results)

        candidates = [
            c for c in self.chunks.values() if document_id is None or c.document_id == document_id
        ]
        scored = sorted(
            candidates,
            key=lambda c: cosine_similarity(embedding, c.embedding),
            reverse=True,
        )[:limit]
        return [
            RetrievedChunk(
                chunk_id=c.Id,
                document_id=c.document_id,
                content=c.content,
                page_number=c.page_number,
                chunk_index=c.chunk_index,
                similarity=normalize_similarity(cosine_similarity(embedding, c.embedding)),
            )
            for c in scored
        ]


@pytest.fixture
def fake_llm() -> FakeLLMService:
    return FakeLLMService()


@pytest.fixture
def fake_store() -> FakeChunkStore:
    return FakeChunkStore()


@pytest.fixture
def pipeline(fake_store, fake_llm) -> RAGPipeline:
    """Pipeline on in-memory collaborators with the default configuration."""
    return RAGPipeline(fake_store, fake_llm, PipelineConfig())


@pytest.fixture
def make_pdf():
    """Factory fixture building PDF bytes with one text block per page.

    Returns:
        Function taking a list of page texts and returning PDF bytes
    """

    def _make_pdf(pages: list[str]) -> bytes:
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text, fontsize=11)
        data = doc.tobytes()
        doc.close()
        return data

    return _make_pdf


@pytest.fixture
def make_retrieved_chunk():
    """Factory fixture to create RetrievedChunk values.

    Returns:
        Function that creates a retrieved chunk with custom parameters
    """

    def _make_chunk(
        content: str = "Test chunk text",
        page_number: int = 1,
        chunk_index: int = 0,
        similarity: float = 0.9,
        document_id: str = "doc-1",
    ) -> RetrievedChunk:
        return RetrievedChunk(
            chunk_id=f"{document_id}_chunk_{chunk_index}",
            document_id=document_id,
            content=content,
            page_number=page_number,
            chunk_index=chunk_index,
            similarity=similarity,
        )

    return _make_chunk


# Service fixtures with skip markers
@pytest.fixture
def ollama_service():
    """Provide OllamaService instance, skip if Ollama not available."""
    if not ollama_available():
        pytest.skip("Ollama server not running on localhost:11434")

    from pdfqa.llm import OllamaService

    return OllamaService(host="http://localhost:11434", model="llama3")


@pytest.fixture
def ravendb_chunk_store():
    """Provide a RavenChunkStore, skip if RavenDB not available."""
    if not ravendb_available():
        pytest.skip("RavenDB server not running on localhost:8080")

    from pdfqa.service.database import RavenChunkStore, create_database, database_exists

    if not database_exists():
        create_database()
    store = RavenChunkStore.connect()
    yield store
    store.close()
