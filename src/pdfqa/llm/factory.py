"""Build the configured LLMService."""

import logging
import os

from dotenv import load_dotenv

from pdfqa.constants import DEFAULT_OLLAMA_HOST, get_temperature
from pdfqa.llm.base import LLMService
from pdfqa.llm.gemini import GeminiService
from pdfqa.llm.ollama import OllamaService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODELS = {
    "ollama": "llama3",
    "gemini": "gemini-2.5-flash",
}


def get_llm_service(config: dict | None = None) -> LLMService:
    """Create the LLM service named by ``config`` or the environment.

    Recognized ``config`` keys, each falling back to an environment variable:
    ``service`` (LLM_SERVICE, "ollama" or "gemini"), ``model`` (LLM_MODEL),
    ``temperature`` (LLM_TEMPERATURE) and, for Ollama, ``host`` (OLLAMA_HOST).

    Raises:
        ValueError: If the service type is not supported.
    """
    settings = config or {}
    service_type = settings.get("service", os.getenv("LLM_SERVICE", "ollama"))
    if service_type not in DEFAULT_CHAT_MODELS:
        raise ValueError(f"Unsupported service type: {service_type}")

    model = settings.get("model", os.getenv("LLM_MODEL", DEFAULT_CHAT_MODELS[service_type]))
    temperature = settings.get("temperature", get_temperature())
    logger.debug(f"Selected {service_type} service with model {model}")

    if service_type == "gemini":
        return GeminiService(model=model, temperature=temperature)

    host = settings.get("host", os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST))
    return OllamaService(host=host, model=model, temperature=temperature)
