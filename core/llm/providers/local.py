import os

from config.models import ModelConfig
from core.llm.providers.openai import OpenAIProvider
from core.registry import provider_registry


@provider_registry.register("local")
class LocalProvider(OpenAIProvider):
    """
    A provider for local OpenAI-compatible servers such as Ollama.
    The base URL must come from the config or OLLAMA_BASE_URL; the key is optional.
    """

    display_name = "Local provider"
    default_base_url = None
    api_key_env = ("LOCAL_API_KEY",)
    default_api_key = "ollama"

    def __init__(self, config: ModelConfig):
        if not config.base_url and os.getenv("OLLAMA_BASE_URL"):
            config = config.model_copy(update={"base_url": os.getenv("OLLAMA_BASE_URL")})
        super().__init__(config)
