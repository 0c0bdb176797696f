from core.llm.providers.openai import OpenAIProvider
from core.registry import provider_registry

@provider_registry.register("deepseek")
class DeepSeekProvider(OpenAIProvider):
    """
    A provider for the DeepSeek API, which is compatible with the OpenAI API.
    """

    display_name = "DeepSeek"
    default_base_url = "https://api.deepseek.com/v1"
    api_key_env = ("DEEPSEEK_API_KEY",)
