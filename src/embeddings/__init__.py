"""Static embedding retrieval through an external vector tool."""

from .cache import EmbeddingCache
from .retriever import EmbeddingRetriever, parse_vectors, run_vector_tool
from .tool import DEFAULT_DIM, EmbeddingToolConfig, validate_model_path

__all__ = [
    "DEFAULT_DIM",
    "EmbeddingCache",
    "EmbeddingRetriever",
    "EmbeddingToolConfig",
    "parse_vectors",
    "run_vector_tool",
    "validate_model_path",
]
