from conceptmap import config
from .chat_completions_client import ChatCompletionsClient


def get_llm_client() -> ChatCompletionsClient:
    return ChatCompletionsClient(
        base_url=config.LLM_BASE_URL,
        model=config.LLM_MODEL,
        temperature=config.LLM_TEMPERATURE,
        api_key=config.LLM_API_KEY or None,
        timeout=config.LLM_TIMEOUT,
    )
