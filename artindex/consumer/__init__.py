"""Index consumers fed by the article walker."""

from .base import ConsumerError, IndexBuildError, IndexConsumer, Port
from .builder import ArticleIndexBuilder

__all__ = [
    "ArticleIndexBuilder",
    "ConsumerError",
    "IndexBuildError",
    "IndexConsumer",
    "Port",
]
