from core.llm.providers.openai import OpenAIProvider
from core.registry import provider_registry


@provider_registry.register("gemini")
class GeminiProvider(OpenAIProvider):
    """
    Google Gemini through its OpenAI-compatible endpoint.
    """

    display_name = "Gemini"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta/openai"
    api_key_env = ("GEMINI_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY", "GOOGLE_API_KEY")
