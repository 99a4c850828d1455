"""Static pattern tables and package knowledge."""

from .base import (
    DEFAULT_KNOWLEDGE_BASE,
    DEFAULT_TABLES,
    KnowledgeBase,
    KnowledgeBaseDocument,
    PatternTables,
    load_knowledge_base,
)

__all__ = [
    "DEFAULT_KNOWLEDGE_BASE",
    "DEFAULT_TABLES",
    "KnowledgeBase",
    "KnowledgeBaseDocument",
    "PatternTables",
    "load_knowledge_base",
]
