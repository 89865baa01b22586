"""Document and chunk storage with vector search, backed by RavenDB."""

import logging
import uuid
from typing import Any, Protocol

from ravendb import DocumentStore

from pdfqa.service.database.models import (
    CHUNKS_COLLECTION,
    DOCUMENTS_COLLECTION,
    Document,
    DocumentChunk,
    RetrievedChunk,
)
from pdfqa.service.database.operations import (
    VECTOR_INDEX_NAME,
    create_document_store,
    ensure_index_exists,
)
from pdfqa.service.database.utils import cosine_similarity, normalize_similarity

logger = logging.getLogger(__name__)


class ChunkStore(Protocol):
    """Interface the pipeline needs from a document/chunk store."""

    def create_document(self, filename: str, total_pages: int) -> Document: ...

    def get_document(self, document_id: str) -> Document | None: ...

    def list_documents(self) -> list[Document]: ...

    def update_chunk_count(self, document_id: str, total_chunks: int) -> None: ...

    def delete_document(self, document_id: str) -> None: ...

    def insert_chunks(self, chunks: list[DocumentChunk]) -> int: ...

    def delete_chunks(self, document_id: str) -> int: ...

    def similarity_search(
        self, embedding: list[float], limit: int, document_id: str | None = None
    ) -> list[RetrievedChunk]: ...


def chunk_id_for(document_id: str, chunk_index: int) -> str:
    """Build the stable RavenDB id of a chunk."""
    return f"{document_id}_chunk_{chunk_index}"


class RavenChunkStore:
    """ChunkStore implementation on top of a RavenDB DocumentStore.

    Documents live in the "Documents" collection and chunks in
    "DocumentChunks". Deleting a document also deletes its chunks.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @classmethod
    def connect(cls, url: str | None = None, database: str | None = None) -> "RavenChunkStore":
        """Open a DocumentStore and make sure the vector index exists."""
        store = create_document_store(url, database)
        ensure_index_exists(store)
        logger.info("✅ Connected to RavenDB chunk store")
        return cls(store)

    def close(self) -> None:
        self._store.close()

    def create_document(self, filename: str, total_pages: int) -> Document:
        document = Document(
            Id=str(uuid.uuid4()),
            filename=filename,
            total_pages=total_pages,
            total_chunks=0,
        )
        with self._store.open_session() as session:
            session.store(document, document.Id)
            session.advanced.get_metadata_for(document)["@collection"] = DOCUMENTS_COLLECTION
            session.save_changes()
        logger.debug(f"Stored document {document.Id} ({filename})")
        return document

    def get_document(self, document_id: str) -> Document | None:
        """Load a Document; ids of records in other collections resolve to None."""
        with self._store.open_session() as session:
            document = session.load(document_id, Document)
            if document is None:
                return None
            if session.advanced.get_metadata_for(document).get("@collection") != DOCUMENTS_COLLECTION:
                return None
            return document

    def list_documents(self) -> list[Document]:
        with self._store.open_session() as session:
            return list(session.query_collection(DOCUMENTS_COLLECTION, object_type=Document))

    def update_chunk_count(self, document_id: str, total_chunks: int) -> None:
        with self._store.open_session() as session:
            document = session.load(document_id, Document)
            if document is None:
                raise KeyError(f"Document {document_id} does not exist")
            document.total_chunks = total_chunks
            session.save_changes()

    def delete_document(self, document_id: str) -> None:
        self.delete_chunks(document_id)
        with self._store.open_session() as session:
            session.delete(document_id)
            session.save_changes()
        logger.debug(f"Deleted document {document_id}")

    def insert_chunks(self, chunks: list[DocumentChunk]) -> int:
        """Store a batch of chunks in a single session."""
        if not chunks:
            return 0

        with self._store.open_session() as session:
            for chunk in chunks:
                if chunk.Id is None:
                    chunk.Id = chunk_id_for(chunk.document_id, chunk.chunk_index)
                session.store(chunk, chunk.Id)
                session.advanced.get_metadata_for(chunk)["@collection"] = CHUNKS_COLLECTION
            session.save_changes()

        return len(chunks)

    def delete_chunks(self, document_id: str) -> int:
        with self._store.open_session() as session:
            chunks = list(
                session.query_collection(CHUNKS_COLLECTION, object_type=DocumentChunk)
                .wait_for_non_stale_results()
                .where_equals("document_id", document_id)
            )
            for chunk in chunks:
                session.delete(chunk)
            session.save_changes()

        logger.debug(f"Deleted {len(chunks)} chunks of document {document_id}")
        return len(chunks)

    def similarity_search(
        self, embedding: list[float], limit: int, document_id: str | None = None
    ) -> list[RetrievedChunk]:
        """Return the top `limit` chunks closest to `embedding`, best first.

        Runs on the static vector index, which maps `document_id` for scoping.

        Args:
            embedding: Query vector
            limit: Maximum number of chunks to return
            document_id: Restrict the search to one document (None = all documents)

        Returns:
            list[RetrievedChunk]: Chunks in the order ranked by RavenDB
        """
        with self._store.open_session() as session:
            query = session.query_index(VECTOR_INDEX_NAME, dict)
            if document_id:
                query = query.where_equals("document_id", document_id).and_also()
            results = list(query.vector_search("embedding", embedding).order_by_score().take(limit))

        return [self._to_retrieved_chunk(result, embedding) for result in results]

    @staticmethod
    def _to_retrieved_chunk(result: dict[str, Any], query_embedding: list[float]) -> RetrievedChunk:
        metadata = result.get("@metadata", {})
        index_score = metadata.get("@index-score")
        if index_score is not None:
            score = float(index_score)
        else:
            score = cosine_similarity(query_embedding, result.get("embedding", []))

        return RetrievedChunk(
            chunk_id=metadata.get("@id", result.get("Id", "")),
            document_id=result.get("document_id", ""),
            content=result.get("content", ""),
            page_number=int(result.get("page_number", 1)),
            chunk_index=int(result.get("chunk_index", 0)),
            similarity=normalize_similarity(score),
        )
