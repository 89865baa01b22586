"""LLMService backed by a local Ollama server."""

import asyncio
import logging

import ollama

from pdfqa.constants import DEFAULT_TEMPERATURE, get_embedding_model

logger = logging.getLogger(__name__)


class OllamaService:
    """Chat completions and embeddings from models served by Ollama.

    Args:
        host: Ollama server URL, e.g. "http://localhost:11434"
        model: Chat model name, e.g. "llama3"
        temperature: Sampling temperature for chat completions
    """

    def __init__(self, host: str, model: str, temperature: float = DEFAULT_TEMPERATURE) -> None:
        self.host = host
        self.model = model
        self.temperature = temperature
        self.client = ollama.Client(host=host)
        logger.info(f"🤖 Ollama service ready: {model} at {host}")

    async def generate_response(self, messages: list[dict]) -> str:
        logger.info(f"🗣️  Asking {self.model} ({len(messages)} messages)")
        try:
            # The HTTP client blocks; keep it off the event loop.
            response = await asyncio.to_thread(
                self.client.chat,
                model=self.model,
                messages=messages,
                options={"temperature": self.temperature},
            )
        except Exception as e:
            logger.error(f"❌ Ollama chat failed: {e}", exc_info=True)
            raise

        content = response.message.content or ""
        logger.info(f"✅ {self.model} replied with {len(content)} characters")
        return content

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed all ``texts`` in a single ``/api/embed`` request.

        Without ``model`` the EMBEDDING_MODEL variable or nomic-embed-text is used.
        """
        if not texts:
            return []
        embedding_model = model or get_embedding_model("ollama")
        response = self.client.embed(model=embedding_model, input=texts)
        embeddings = [list(vector) for vector in response["embeddings"]]
        logger.debug(f"{embedding_model} embedded {len(embeddings)} text(s)")
        return embeddings
