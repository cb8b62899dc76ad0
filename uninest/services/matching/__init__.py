from uninest.services.matching.scorer import (
    CompatibilityScorer,
    CompatibilityWeights,
    ProfileData,
    compatibility_score,
)
from uninest.services.matching.engine import RankedCandidate, RoommateRankingEngine

__all__ = [
    "CompatibilityScorer",
    "CompatibilityWeights",
    "ProfileData",
    "compatibility_score",
    "RankedCandidate",
    "RoommateRankingEngine",
]
