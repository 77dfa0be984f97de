"""Domain port definitions for adapters."""

from __future__ import annotations

from .generation import GenerationOptions, TextGenerator
from .intelligence import AgentReply, FieldUpdate, NewsItem, UnionIntelligence
from .persistence import UnionStore

__all__ = [
    "AgentReply",
    "FieldUpdate",
    "GenerationOptions",
    "NewsItem",
    "TextGenerator",
    "UnionIntelligence",
    "UnionStore",
]
