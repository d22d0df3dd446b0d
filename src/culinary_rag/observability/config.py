"""
Tracing configuration.

Loads OpenTelemetry settings from environment variables. Tracing is off
unless explicitly enabled.
"""

import os
from dataclasses import dataclass


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing.

    Environment Variables:
        TRACING_ENABLED: Enable span export (default: false)
        TRACING_SERVICE_NAME: Service name on exported spans (default: culinary-rag)
        TRACING_COLLECTOR_ENDPOINT: OTLP/HTTP endpoint (default: SDK default)
        TRACING_CAPTURE_CONTENT: Attach prompt text to spans (default: false)
    """

    enabled: bool = False
    service_name: str = "culinary-rag"
    collector_endpoint: str | None = None
    capture_content: bool = False

    @classmethod
    def from_env(cls) -> "TracingConfig":
        """Load config from environment variables."""
        return cls(
            enabled=os.environ.get("TRACING_ENABLED", "false").lower() in ("true", "1", "yes"),
            service_name=os.environ.get("TRACING_SERVICE_NAME", "culinary-rag"),
            collector_endpoint=os.environ.get("TRACING_COLLECTOR_ENDPOINT") or None,
            capture_content=os.environ.get("TRACING_CAPTURE_CONTENT", "false").lower() in ("true", "1", "yes"),
        )


_config: TracingConfig | None = None


def get_tracing_config() -> TracingConfig:
    """Get the global tracing config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = TracingConfig.from_env()
    return _config


def reset_tracing_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
