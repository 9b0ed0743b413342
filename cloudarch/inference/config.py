from cloudarch import config
from cloudarch.inference.base import GenerationBackend
from cloudarch.inference.chat_completions_client import ChatCompletionsBackend
from cloudarch.inference.gemini_client import GeminiBackend


def get_generation_backend(kind: str = config.GENERATION_BACKEND) -> GenerationBackend:
    kind = kind.strip().lower()

    if kind == "gemini":
        return GeminiBackend(
            api_key=config.GEMINI_API_KEY,
            model=config.GEMINI_MODEL,
            thinking_budget=config.THINKING_BUDGET,
        )

    if kind == "chat_completions":
        return ChatCompletionsBackend(
            base_url=config.LLM_BASE_URL,
            model=config.LLM_MODEL,
            temperature=config.LLM_TEMPERATURE,
            reasoning_effort=config.LLM_REASONING_EFFORT,
            timeout=config.LLM_TIMEOUT,
        )

    raise ValueError(f"Unknown generation backend: {kind!r}")
