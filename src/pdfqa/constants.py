"""Defaults and limits shared across pdfqa.

Environment variables override some of these at runtime; see the helpers at
the bottom of this module and PipelineConfig.from_env.
"""

import os

# =============================================================================
# File Upload Limits
# =============================================================================
MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
PDF_MIME_TYPE = "application/pdf"
ALLOWED_EXTENSIONS = {"pdf"}

# =============================================================================
# Chunking Settings
# =============================================================================
DEFAULT_CHUNK_SIZE = 800  # Characters per chunk window
DEFAULT_CHUNK_OVERLAP = 100  # Characters shared by consecutive chunks
MAX_CHUNKS_PER_DOCUMENT = 1000  # Chunks beyond this are dropped

# =============================================================================
# Upload Batching
# =============================================================================
EMBEDDING_BATCH_SIZE = 64  # Concurrent embedding calls per batch
INSERT_BATCH_SIZE = 500  # Chunks written per store session

# =============================================================================
# Retrieval & Generation Settings
# =============================================================================
DEFAULT_TOP_K = 5  # Number of chunks returned by vector search
MAX_QUESTION_LENGTH = 1000  # Longer questions are truncated
MAX_CONTEXT_CHUNK_LENGTH = 1200  # Characters of each chunk sent to the model
DEFAULT_TEMPERATURE = 0.2
DEFAULT_REQUEST_TIMEOUT = 60.0  # Seconds allowed for a completion call

NO_RESULTS_ANSWER = (
    "I couldn't find relevant information in the document to answer your question."
)
EMPTY_ANSWER = "No answer."

# =============================================================================
# Display Settings
# =============================================================================
CITATION_EXCERPT_LENGTH = 150  # Characters of chunk content in a citation

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_MCP_SERVER_URL = "http://localhost:8001/sse"
DEFAULT_RAVENDB_URL = "http://localhost:8080"
DEFAULT_RAVENDB_DATABASE = "pdfqa"

# =============================================================================
# Embedding Model Defaults
# =============================================================================
EMBEDDING_DEFAULTS = {
    "ollama": "nomic-embed-text",
    "gemini": "text-embedding-004",
}

# Vector index width; must match the embedding model (EMBEDDING_DIMENSIONS)
DEFAULT_EMBEDDING_DIMENSIONS = 768


def get_embedding_model(service: str | None = None) -> str:
    """Embedding model name: EMBEDDING_MODEL if set, else the provider default.

    ``service`` defaults to LLM_SERVICE; unknown providers get the Ollama model.
    """
    override = os.getenv("EMBEDDING_MODEL")
    if override:
        return override
    provider = service or os.getenv("LLM_SERVICE", "ollama")
    return EMBEDDING_DEFAULTS.get(provider, EMBEDDING_DEFAULTS["ollama"])


def get_temperature() -> float:
    """Get the sampling temperature from LLM_TEMPERATURE, or the default."""
    return float(os.getenv("LLM_TEMPERATURE", str(DEFAULT_TEMPERATURE)))
