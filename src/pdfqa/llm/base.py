"""The model-provider interface every pdfqa pipeline depends on."""

from typing import Protocol


class LLMService(Protocol):
    """Embedding gateway and completion model behind one object.

    Pipelines take an ``LLMService`` in their constructor instead of building
    a provider client themselves; tests hand in an in-memory fake.
    """

    async def generate_response(self, messages: list[dict]) -> str:
        """Complete a chat transcript.

        ``messages`` are ``{"role": ..., "content": ...}`` dicts, system
        prompt first. Returns the model's reply, or "" when it sent none.
        """
        ...

    def generate_embeddings(self, texts: list[str], model: str | None = None) -> list[list[float]]:
        """Embed ``texts``; one vector per text, in input order.

        ``model`` overrides the provider's default embedding model.
        """
        ...
