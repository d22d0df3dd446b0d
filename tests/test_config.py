"""
Tests for service configuration loading.
"""

from pathlib import Path
from unittest.mock import patch

from culinary_rag.config import RagConfig, get_config, reset_config


class TestRagConfig:
    """Test configuration loading from the environment."""

    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = RagConfig.from_env()

        assert config.api_key is None
        assert config.api_base_url == "https://api.cohere.ai/compatibility/v1"
        assert config.embed_model == "embed-multilingual-v3.0"
        assert config.embed_dim == 1024
        assert config.chat_model == "command-r-plus"
        assert config.send_input_type is True
        assert config.batch_size == 96
        assert config.batch_delay_seconds == 2.0
        assert config.top_k == 8
        assert config.temperature == 0.3
        assert config.documents_dir == Path("documents")
        assert config.cache_path == Path("embeddings") / "embeddings.json"
        assert config.use_mock_gateway is False

    def test_overrides(self):
        env = {
            "CULINARY_API_KEY": "key-1",
            "CULINARY_EMBED_DIM": "384",
            "CULINARY_SEND_INPUT_TYPE": "false",
            "CULINARY_BATCH_SIZE": "10",
            "CULINARY_BATCH_DELAY_SECONDS": "0",
            "CULINARY_TOP_K": "3",
            "CULINARY_TEMPERATURE": "0.7",
            "CULINARY_DOCUMENTS_DIR": "/data/kb",
            "CULINARY_CACHE_PATH": "/data/cache.json",
            "USE_MOCK_GATEWAY": "1",
        }
        with patch.dict("os.environ", env, clear=True):
            config = RagConfig.from_env()

        assert config.api_key == "key-1"
        assert config.embed_dim == 384
        assert config.send_input_type is False
        assert config.batch_size == 10
        assert config.batch_delay_seconds == 0.0
        assert config.top_k == 3
        assert config.temperature == 0.7
        assert config.documents_dir == Path("/data/kb")
        assert config.cache_path == Path("/data/cache.json")
        assert config.use_mock_gateway is True

    def test_cohere_key_fallback(self):
        with patch.dict("os.environ", {"COHERE_API_KEY": "co-key"}, clear=True):
            assert RagConfig.from_env().api_key == "co-key"

    def test_culinary_key_wins(self):
        env = {"COHERE_API_KEY": "co-key", "CULINARY_API_KEY": "own-key"}
        with patch.dict("os.environ", env, clear=True):
            assert RagConfig.from_env().api_key == "own-key"

    def test_get_config_singleton(self):
        assert get_config() is get_config()

    def test_reset_config_reloads(self):
        with patch.dict("os.environ", {"CULINARY_TOP_K": "4"}):
            reset_config()
            assert get_config().top_k == 4
        reset_config()
