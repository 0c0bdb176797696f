# Importing the provider modules registers them in provider_registry
from core.llm.providers import claude, deepseek, dummy_provider, gemini, local, openai  # noqa: F401
