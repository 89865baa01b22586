"""Data models for RavenDB document storage."""

from dataclasses import dataclass, field
from typing import Any

DOCUMENTS_COLLECTION = "Documents"
CHUNKS_COLLECTION = "DocumentChunks"


@dataclass(eq=False)
class Document:
    """An uploaded PDF.

    Note: eq=False keeps instances hashable by identity, which is required
    for RavenDB's session entity tracking.

    Attributes:
        Id: Store-assigned identifier
        filename: Original upload filename
        total_pages: Number of pages in the PDF
        total_chunks: Number of chunks persisted for the document
    """

    Id: str | None = None
    filename: str = ""
    total_pages: int = 0
    total_chunks: int = 0

    def __hash__(self) -> int:
        return id(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.Id,
            "filename": self.filename,
            "total_pages": self.total_pages,
            "total_chunks": self.total_chunks,
        }


@dataclass(eq=False)
class DocumentChunk:
    """A chunk of a document's text with its embedding.

    Attributes:
        Id: RavenDB document ID ("<document_id>_chunk_<chunk_index>")
        document_id: Id of the owning Document
        content: The text content of the chunk
        page_number: 1-based page the chunk was cut from
        chunk_index: 0-based position of the chunk within the document
        embedding: Vector embedding of the content
    """

    Id: str | None = None
    document_id: str = ""
    content: str = ""
    page_number: int = 1
    chunk_index: int = 0
    embedding: list[float] = field(default_factory=list)

    def __hash__(self) -> int:
        return id(self)


@dataclass(frozen=True)
class RetrievedChunk:
    """A chunk returned by similarity search, with its score.

    ``similarity`` is cosine similarity clamped to [0, 1]; higher is more
    relevant.
    """

    chunk_id: str
    document_id: str
    content: str
    page_number: int
    chunk_index: int
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunk_id": self.chunk_id,
            "document_id": self.document_id,
            "content": self.content,
            "page_number": self.page_number,
            "chunk_index": self.chunk_index,
            "similarity": self.similarity,
        }
