from dataclasses import dataclass, field, fields
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
import uuid

@dataclass(frozen=True)
class CompatibilityWeights:

    budget: float = 25
    major: float = 10
    interests: float = 10
    cleanliness: float = 10
    noise: float = 10
    sleep_schedule: float = 10
    study_habits: float = 10
    smoking: float = 5
    pets: float = 5
    guests: float = 5

    @property
    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

# Share of a criterion's weight awarded when the comparison cannot be made
# or when one side holds the middle option.
NEUTRAL_SHARE = 0.5
EMPTY_INTERESTS_SHARE = 0.3
STUDY_HABITS_MIXED_SHARE = 0.7
GUESTS_SOMETIMES_SHARE = 0.7

LEVEL_SPAN = 4

@dataclass
class ProfileData:


    user_id: Optional[uuid.UUID] = None
    min_budget: Optional[float] = None
    max_budget: Optional[float] = None
    major: Optional[str] = None
    interests: list[str] = field(default_factory=list)
    cleanliness_level: Optional[int] = None
    noise_level: Optional[int] = None
    sleep_schedule: Optional[str] = None
    study_habits: Optional[str] = None
    smoking_allowed: bool = False
    pets_allowed: bool = False
    guests_allowed: Optional[str] = "sometimes"

    @property
    def has_budget_range(self) -> bool:
        return self.min_budget is not None and self.max_budget is not None

    @classmethod
    def from_model(cls, profile: Any) -> "ProfileData":

        return cls(
            user_id=profile.user_id,
            min_budget=float(profile.min_budget) if profile.min_budget is not None else None,
            max_budget=float(profile.max_budget) if profile.max_budget is not None else None,
            major=profile.major or None,
            interests=list(profile.interests or []),
            cleanliness_level=profile.cleanliness_level,
            noise_level=profile.noise_level,
            sleep_schedule=_enum_value(profile.sleep_schedule),
            study_habits=_enum_value(profile.study_habits),
            smoking_allowed=bool(profile.smoking_allowed),
            pets_allowed=bool(profile.pets_allowed),
            guests_allowed=_enum_value(profile.guests_allowed),
        )

def _enum_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "value", value)

def _round_half_up(value: float) -> int:
    # Through str() so float noise like 57.49999999 does not flip the rounding.
    return int(Decimal(str(round(value, 9))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

class CompatibilityScorer:
    """
    Weighted roommate compatibility over nine criteria.

    Each ``calculate_*`` method returns the points a criterion contributes,
    between 0 and its weight. Every criterion is symmetric, so
    ``score(a, b) == score(b, a)``.
    """

    def __init__(self, weights: Optional[CompatibilityWeights] = None):

        self.weights = weights or CompatibilityWeights()

    def calculate_budget_score(self, a: ProfileData, b: ProfileData) -> float:
        """
        Budget overlap points.

        Overlap length divided by the longer of the two ranges; a zero-length
        range never yields a zero denominator. Identical ranges score the full
        weight, disjoint ranges score 0, and a missing range scores half.
        """
        weight = self.weights.budget
        if not (a.has_budget_range and b.has_budget_range):
            return weight * NEUTRAL_SHARE

        if a.min_budget == b.min_budget and a.max_budget == b.max_budget:
            return weight

        overlap = min(a.max_budget, b.max_budget) - max(a.min_budget, b.min_budget)
        if overlap <= 0:
            return 0.0

        range_a = a.max_budget - a.min_budget
        range_b = b.max_budget - b.min_budget
        denominator = max(range_a, range_b, 1)

        return weight * min(1.0, overlap / denominator)

    def calculate_major_score(self, a: ProfileData, b: ProfileData) -> float:

        weight = self.weights.major
        if not a.major or not b.major:
            return weight * NEUTRAL_SHARE
        return weight if a.major == b.major else 0.0

    def calculate_interests_score(self, a: ProfileData, b: ProfileData) -> float:

        weight = self.weights.interests
        if not a.interests or not b.interests:
            return weight * EMPTY_INTERESTS_SHARE

        shared = len(set(a.interests) & set(b.interests))
        return weight * shared / max(len(a.interests), len(b.interests))

    def calculate_level_score(
        self,
        level_a: Optional[int],
        level_b: Optional[int],
        weight: float,
    ) -> float:
        """Proximity on the 1-5 scale: equal levels score full, 1 vs 5 scores 0."""
        if level_a is None or level_b is None:
            return weight * NEUTRAL_SHARE
        return weight * (1 - abs(level_a - level_b) / LEVEL_SPAN)

    def calculate_cleanliness_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.calculate_level_score(
            a.cleanliness_level, b.cleanliness_level, self.weights.cleanliness
        )

    def calculate_noise_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.calculate_level_score(a.noise_level, b.noise_level, self.weights.noise)

    def calculate_choice_score(
        self,
        choice_a: Optional[str],
        choice_b: Optional[str],
        weight: float,
        flexible_choice: str,
        flexible_share: float,
    ) -> float:
        """
        Score two picks from the same enumeration.

        Equal picks score full weight. When they differ and either side chose
        the flexible middle option, ``flexible_share`` of the weight is
        awarded; otherwise nothing. An unset side scores half.
        """
        if choice_a is None or choice_b is None:
            return weight * NEUTRAL_SHARE
        if choice_a == choice_b:
            return weight
        if flexible_choice in (choice_a, choice_b):
            return weight * flexible_share
        return 0.0

    def calculate_sleep_schedule_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.calculate_choice_score(
            a.sleep_schedule,
            b.sleep_schedule,
            self.weights.sleep_schedule,
            flexible_choice="normal",
            flexible_share=NEUTRAL_SHARE,
        )

    def calculate_study_habits_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.calculate_choice_score(
            a.study_habits,
            b.study_habits,
            self.weights.study_habits,
            flexible_choice="mixed",
            flexible_share=STUDY_HABITS_MIXED_SHARE,
        )

    def calculate_guests_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.calculate_choice_score(
            a.guests_allowed,
            b.guests_allowed,
            self.weights.guests,
            flexible_choice="sometimes",
            flexible_share=GUESTS_SOMETIMES_SHARE,
        )

    def calculate_smoking_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.weights.smoking if a.smoking_allowed == b.smoking_allowed else 0.0

    def calculate_pets_score(self, a: ProfileData, b: ProfileData) -> float:

        return self.weights.pets if a.pets_allowed == b.pets_allowed else 0.0

    def breakdown(self, a: ProfileData, b: ProfileData) -> dict[str, float]:
        """Points contributed by each criterion, keyed like ``CompatibilityWeights``."""
        return {
            "budget": self.calculate_budget_score(a, b),
            "major": self.calculate_major_score(a, b),
            "interests": self.calculate_interests_score(a, b),
            "cleanliness": self.calculate_cleanliness_score(a, b),
            "noise": self.calculate_noise_score(a, b),
            "sleep_schedule": self.calculate_sleep_schedule_score(a, b),
            "study_habits": self.calculate_study_habits_score(a, b),
            "smoking": self.calculate_smoking_score(a, b),
            "pets": self.calculate_pets_score(a, b),
            "guests": self.calculate_guests_score(a, b),
        }

    def score(self, a: ProfileData, b: ProfileData) -> int:
        """
        Overall compatibility from 0 to 100.

        The accumulated points are normalized by the total weight, so a custom
        ``CompatibilityWeights`` that does not sum to 100 is rescaled.
        """
        total_weight = self.weights.total
        if total_weight <= 0:
            return 0

        accumulated = sum(self.breakdown(a, b).values())
        result = _round_half_up(accumulated / total_weight * 100)
        return max(0, min(100, result))

    @staticmethod
    def same_major(a: ProfileData, b: ProfileData) -> bool:

        return bool(a.major) and a.major == b.major

_default_scorer = CompatibilityScorer()

def compatibility_score(a: ProfileData, b: ProfileData) -> int:

    return _default_scorer.score(a, b)
