"""RavenDB server administration: stores, the vector index and databases.

Every helper accepts an optional ``url`` and ``database``; missing values
come from :meth:`RavenDBConfig.from_env`.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager

import requests
from ravendb import DocumentStore
from ravendb.documents.indexes.definitions import (
    FieldIndexing,
    FieldStorage,
    IndexDefinition,
    IndexFieldOptions,
)
from ravendb.documents.indexes.vector.options import VectorOptions
from ravendb.documents.operations.indexes import GetIndexNamesOperation, PutIndexesOperation
from ravendb.serverwide.operations.common import DeleteDatabaseOperation

from pdfqa.constants import DEFAULT_EMBEDDING_DIMENSIONS
from pdfqa.service.database.config import RavenDBConfig
from pdfqa.service.database.models import DOCUMENTS_COLLECTION

VECTOR_INDEX_NAME = "DocumentChunks/ByEmbedding"
ADMIN_REQUEST_TIMEOUT = 30

# Chunks without an embedding never reach the index.
_CHUNK_MAP = """from chunk in docs.DocumentChunks
where chunk.embedding != null
select new {
    document_id = chunk.document_id,
    page_number = chunk.page_number,
    chunk_index = chunk.chunk_index,
    embedding = CreateField("embedding", chunk.embedding, new CreateFieldOptions { Storage = FieldStorage.Yes, Indexing = FieldIndexing.No })
}"""


def create_document_store(url: str | None = None, database: str | None = None) -> DocumentStore:
    """Return an initialized DocumentStore for the configured database."""
    config = RavenDBConfig.from_env(url, database)
    store = DocumentStore([config.url], config.database)
    store.initialize()
    return store


@contextmanager
def _open_store(url: str | None, database: str | None) -> Iterator[DocumentStore]:
    store = create_document_store(url, database)
    try:
        yield store
    finally:
        store.close()


def _vector_index_definition() -> IndexDefinition:
    dimensions = int(os.getenv("EMBEDDING_DIMENSIONS", str(DEFAULT_EMBEDDING_DIMENSIONS)))

    definition = IndexDefinition()
    definition.name = VECTOR_INDEX_NAME
    definition.maps = {_CHUNK_MAP}
    definition.fields = {
        "embedding": IndexFieldOptions(
            storage=FieldStorage.YES,
            indexing=FieldIndexing.NO,
            vector=VectorOptions(dimensions=dimensions),
        )
    }
    return definition


def ensure_index_exists(store: DocumentStore) -> None:
    """Deploy the chunk vector index unless the server already has it.

    The index stores each chunk's embedding as a vector field (dimension from
    EMBEDDING_DIMENSIONS) next to the ``document_id`` used to scope searches.
    """
    if VECTOR_INDEX_NAME in store.maintenance.send(GetIndexNamesOperation(0, 100)):
        return
    store.maintenance.send(PutIndexesOperation(_vector_index_definition()))


def database_exists(url: str | None = None, database: str | None = None) -> bool:
    """Return True when the server answers and lists the database."""
    config = RavenDBConfig.from_env(url, database)
    try:
        response = requests.get(f"{config.url}/databases", timeout=ADMIN_REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException:
        return False

    names = {entry.get("Name") for entry in response.json().get("Databases", [])}
    return config.database in names


def create_database(url: str | None = None, database: str | None = None) -> None:
    """Create the database through the server's admin REST endpoint.

    Raises:
        requests.HTTPError: If the server rejects the request
    """
    config = RavenDBConfig.from_env(url, database)
    response = requests.put(
        f"{config.url}/admin/databases",
        json={"DatabaseName": config.database, "Settings": {}, "Disabled": False},
        timeout=ADMIN_REQUEST_TIMEOUT,
    )
    response.raise_for_status()


def delete_database(url: str | None = None, database: str | None = None) -> None:
    """Hard-delete the database with every Document and chunk in it."""
    config = RavenDBConfig.from_env(url, database)
    with _open_store(config.url, config.database) as store:
        store.maintenance.server.send(
            DeleteDatabaseOperation(database_name=config.database, hard_delete=True)
        )


def count_documents(url: str | None = None, database: str | None = None) -> int:
    """Number of uploaded Documents stored in the database."""
    with _open_store(url, database) as store:
        with store.open_session() as session:
            return session.query_collection(DOCUMENTS_COLLECTION).count()
