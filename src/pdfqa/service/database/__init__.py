"""Database configuration and storage for RavenDB.

This package provides a unified interface for RavenDB operations:
- Configuration management (RavenDBConfig)
- Document store creation and index management
- Administration (create, delete, count)
- The ChunkStore protocol and its RavenDB implementation

Usage:
    from pdfqa.service.database import RavenChunkStore

    store = RavenChunkStore.connect()
    document = store.create_document("paper.pdf", total_pages=3)
"""

from pdfqa.service.database.config import RavenDBConfig
from pdfqa.service.database.models import Document, DocumentChunk, RetrievedChunk
from pdfqa.service.database.operations import (
    count_documents,
    create_database,
    create_document_store,
    database_exists,
    delete_database,
    ensure_index_exists,
)
from pdfqa.service.database.store import ChunkStore, RavenChunkStore, chunk_id_for
from pdfqa.service.database.utils import cosine_similarity, normalize_similarity

__all__ = [
    # Config
    "RavenDBConfig",
    # Models
    "Document",
    "DocumentChunk",
    "RetrievedChunk",
    # Operations
    "create_document_store",
    "ensure_index_exists",
    "database_exists",
    "create_database",
    "delete_database",
    "count_documents",
    # Store
    "ChunkStore",
    "RavenChunkStore",
    "chunk_id_for",
    # Utils
    "cosine_similarity",
    "normalize_similarity",
]
