"""Domain modules for the matching engine."""

from .models import (
    Candidate,
    ExperienceLevel,
    Language,
    MatchScore,
    Recommendation,
    RecommendationSet,
    Requirement,
    TrainingFormat,
)
from .scoring import score
from .weights import DEFAULT_WEIGHTS, WeightVector

__all__ = [
    "DEFAULT_WEIGHTS",
    "Candidate",
    "ExperienceLevel",
    "Language",
    "MatchScore",
    "Recommendation",
    "RecommendationSet",
    "Requirement",
    "TrainingFormat",
    "WeightVector",
    "score",
]
