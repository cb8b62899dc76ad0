from dataclasses import dataclass
from typing import Optional, Sequence
import uuid

from uninest.services.matching.scorer import CompatibilityScorer, ProfileData

@dataclass
class RankedCandidate:


    user_id: uuid.UUID
    score: Optional[int]
    same_major: bool = False

class RoommateRankingEngine:


    def __init__(self, scorer: Optional[CompatibilityScorer] = None):

        self.scorer = scorer or CompatibilityScorer()

    def rank(
        self,
        my_profile: Optional[ProfileData],
        candidates: Sequence[ProfileData],
    ) -> list[RankedCandidate]:
        """
        Score every candidate against the searcher's profile.

        Without a searcher profile the scores are None and the input order
        (recency) is kept. Otherwise candidates are sorted by score
        descending; the sort is stable, so equal scores keep input order.

        Args:
            my_profile: The searcher's profile data, or None
            candidates: Candidate profile data in recency order

        Returns:
            List of RankedCandidate objects
        """
        ranked: list[RankedCandidate] = []

        for candidate in candidates:
            if my_profile is None:
                ranked.append(RankedCandidate(user_id=candidate.user_id, score=None))
                continue

            ranked.append(RankedCandidate(
                user_id=candidate.user_id,
                score=self.scorer.score(my_profile, candidate),
                same_major=self.scorer.same_major(my_profile, candidate),
            ))

        if my_profile is not None:
            ranked.sort(key=lambda c: c.score or 0, reverse=True)

        return ranked

    def calculate_match_score(
        self,
        requester_profile: ProfileData,
        target_profile: ProfileData,
    ) -> int:

        return self.scorer.score(requester_profile, target_profile)
