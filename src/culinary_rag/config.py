"""
Service configuration.

Loads settings from environment variables. The CLI loads a .env file
first, so the same variables can live there.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


@dataclass
class RagConfig:
    """Configuration for the RAG service.

    Environment Variables:
        CULINARY_API_KEY: Key for the model endpoint (falls back to COHERE_API_KEY)
        CULINARY_API_BASE_URL: OpenAI-compatible endpoint (default: Cohere compatibility API)
        CULINARY_EMBED_MODEL: Embedding model (default: embed-multilingual-v3.0)
        CULINARY_EMBED_DIM: Embedding dimension (default: 1024)
        CULINARY_CHAT_MODEL: Chat model (default: command-r-plus)
        CULINARY_SEND_INPUT_TYPE: Send the embedding intent as input_type (default: true)
        CULINARY_BATCH_SIZE: Documents per embedding request (default: 96)
        CULINARY_BATCH_DELAY_SECONDS: Pause between embedding requests (default: 2.0)
        CULINARY_TOP_K: Documents retrieved per query (default: 8)
        CULINARY_TEMPERATURE: Chat temperature (default: 0.3)
        CULINARY_DOCUMENTS_DIR: Directory holding the knowledge files (default: documents)
        CULINARY_CACHE_PATH: Embedding cache file (default: embeddings/embeddings.json)
        USE_MOCK_GATEWAY: Use the offline mock gateway (default: false)
    """

    api_key: str | None = None
    api_base_url: str = "https://api.cohere.ai/compatibility/v1"
    embed_model: str = "embed-multilingual-v3.0"
    embed_dim: int = 1024
    chat_model: str = "command-r-plus"
    send_input_type: bool = True
    batch_size: int = 96
    batch_delay_seconds: float = 2.0
    top_k: int = 8
    temperature: float = 0.3
    documents_dir: Path = Path("documents")
    cache_path: Path = Path("embeddings") / "embeddings.json"
    use_mock_gateway: bool = False

    @classmethod
    def from_env(cls) -> "RagConfig":
        """Load config from environment variables."""
        return cls(
            api_key=os.environ.get("CULINARY_API_KEY") or os.environ.get("COHERE_API_KEY") or None,
            api_base_url=os.environ.get("CULINARY_API_BASE_URL", cls.api_base_url),
            embed_model=os.environ.get("CULINARY_EMBED_MODEL", cls.embed_model),
            embed_dim=int(os.environ.get("CULINARY_EMBED_DIM", cls.embed_dim)),
            chat_model=os.environ.get("CULINARY_CHAT_MODEL", cls.chat_model),
            send_input_type=_env_bool("CULINARY_SEND_INPUT_TYPE", "true"),
            batch_size=int(os.environ.get("CULINARY_BATCH_SIZE", cls.batch_size)),
            batch_delay_seconds=float(
                os.environ.get("CULINARY_BATCH_DELAY_SECONDS", cls.batch_delay_seconds)
            ),
            top_k=int(os.environ.get("CULINARY_TOP_K", cls.top_k)),
            temperature=float(os.environ.get("CULINARY_TEMPERATURE", cls.temperature)),
            documents_dir=Path(os.environ.get("CULINARY_DOCUMENTS_DIR", "documents")),
            cache_path=Path(
                os.environ.get("CULINARY_CACHE_PATH", str(Path("embeddings") / "embeddings.json"))
            ),
            use_mock_gateway=_env_bool("USE_MOCK_GATEWAY"),
        )


# Global config singleton
_config: RagConfig | None = None


def get_config() -> RagConfig:
    """Get the global config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = RagConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
