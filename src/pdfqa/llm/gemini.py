"""LLMService backed by the Google Gemini API.

The ``genai.Client`` reads its key from GEMINI_API_KEY.
"""

import asyncio
import logging

from google import genai

from pdfqa.constants import DEFAULT_TEMPERATURE, get_embedding_model

logger = logging.getLogger(__name__)


def _split_messages(messages: list[dict]) -> tuple[str | None, str]:
    """Separate system prompts (Gemini's system instruction) from the prompt text."""
    system = [m.get("content", "") for m in messages if m.get("role") == "system"]
    prompt = [m.get("content", "") for m in messages if m.get("role") != "system"]
    return ("\n".join(system) or None), "\n".join(prompt)


class GeminiService:
    def __init__(self, model: str, temperature: float = DEFAULT_TEMPERATURE) -> None:
        self.model = model
        self.temperature = temperature
        self.client = genai.Client()
        logger.info(f"🤖 Gemini service ready: {model}")

    async def generate_response(self, messages: list[dict]) -> str:
        system_instruction, contents = _split_messages(messages)
        config = genai.types.GenerateContentConfig(
            temperature=self.temperature,
            system_instruction=system_instruction,
        )

        logger.info(f"🗣️  Asking {self.model} ({len(messages)} messages)")
        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=self.model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"❌ Gemini request failed: {e}", exc_info=True)
            raise

        content = response.text or ""
        logger.info(f"✅ {self.model} replied with {len(content)} characters")
        return content

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed ``texts`` with one ``embed_content`` call.

        Without ``model`` the EMBEDDING_MODEL variable or text-embedding-004 is used.
        """
        if not texts:
            return []
        embedding_model = model or get_embedding_model("gemini")
        try:
            response = self.client.models.embed_content(model=embedding_model, contents=texts)
        except Exception as e:
            logger.error(f"❌ Gemini embedding failed: {e}", exc_info=True)
            raise
        return [list(embedding.values) for embedding in response.embeddings]
