# src/pedsage/providers/litellm/models.py
"""Curated model constants for the LiteLLM provider.

Any valid LiteLLM model string works; these exist for autocomplete.
"""


class ChatModels:
    """Chat/completion models for LLMComposer (via LiteLLMClient)."""

    # OpenAI
    GPT_5_MINI = "openai/gpt-5-mini"
    GPT_5_NANO = "openai/gpt-5-nano"

    # Anthropic
    CLAUDE_SONNET_45 = "anthropic/claude-sonnet-4-5-20250929"
    CLAUDE_HAIKU_45 = "anthropic/claude-haiku-4-5-20251001"

    # Google Gemini
    GEMINI_3_FLASH = "gemini/gemini-3-flash-preview"

    # Local
    OLLAMA_QWEN_25 = "ollama/qwen2.5:7b-instruct"


class EmbeddingModels:
    """Embedding models for LiteLLMEmbeddingClient / ClientEmbedder."""

    # OpenAI
    TEXT_3_SMALL = "openai/text-embedding-3-small"
    TEXT_3_LARGE = "openai/text-embedding-3-large"

    # Google Gemini
    GEMINI_EMBEDDING_001 = "gemini/gemini-embedding-001"

    # AWS Bedrock
    BEDROCK_TITAN_V2 = "bedrock/amazon.titan-embed-text-v2:0"
