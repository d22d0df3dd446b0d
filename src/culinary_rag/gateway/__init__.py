"""
Gateway module - access to the remote embedding and chat model.

1. Protocol (GenerationGateway, in core.protocols) defines the interface
2. Production implementation (OpenAIGateway)
3. Test double (MockGateway) for fast testing
4. Factory function (get_gateway)
"""

from culinary_rag.gateway.openai_gateway import (
    CITATION_INSTRUCTIONS,
    MockGateway,
    OpenAIGateway,
    get_gateway,
    parse_citations,
)

__all__ = [
    "CITATION_INSTRUCTIONS",
    "MockGateway",
    "OpenAIGateway",
    "get_gateway",
    "parse_citations",
]
