"""
Recommendation Module

Confidence-gated resolution of diagnosis labels to clinical advice.
"""
from .resolver import (
    RecommendationResolver,
    RecommendationBundle,
    Resolution,
    ClassificationOutcome,
    coerce_confidence,
    load_recommendation_table,
    parse_recommendation_table,
)

__all__ = [
    "RecommendationResolver",
    "RecommendationBundle",
    "Resolution",
    "ClassificationOutcome",
    "coerce_confidence",
    "load_recommendation_table",
    "parse_recommendation_table",
]
