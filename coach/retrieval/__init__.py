"""Relevance scoring and retrieval context assembly."""

from coach.retrieval.context import ContextAssembler, RetrievalContext
from coach.retrieval.scoring import RelevanceScore, ScoringTables, score, select_top

__all__ = [
    "ContextAssembler",
    "RelevanceScore",
    "RetrievalContext",
    "ScoringTables",
    "score",
    "select_top",
]
