"""
FitMatch — Gym match scoring.

Ranks gyms against a user's fitness goals and gym preferences with a
deterministic heuristic bounded to [0, 100]:

  1. Start at a base score of 70.
  2. Goal dimension: each goal resolves to a set of related amenities via a
     fixed lookup table.  Every (related amenity, gym amenity) substring hit
     adds to ``amenity_matches``; a goal with at least one hit is matched.
     The goal ratio only counts as a factor when more than half the goals
     matched.  Flat bonus: min(15, 3 * amenity_matches).
  3. Preference dimension: each (preference, amenity) pair that overlaps by
     substring or by a significant amenity word counts as a hit.
     Ratio = min(1, hits / preferences).  Flat bonus: min(20, 5 * hits).
  4. Factor bonus: (sum of ratios / factors considered) * 20.
  5. Clamp to [0, 100] and round half-up.

The scorer never raises: missing goals, preferences or amenities simply
contribute nothing.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Sequence, TypeVar

import structlog

logger = structlog.get_logger("fitmatch.gym_scorer")

G = TypeVar("G")


def _labels(values: Iterable[Any] | None) -> list[str]:
    """Normalise a label list: ``None`` becomes empty and blank labels are
    dropped, since an empty string is a substring of everything."""
    if not values:
        return []
    return [str(v) for v in values if v is not None and str(v).strip()]


def _overlaps(a: str, b: str) -> bool:
    """Case-insensitive substring containment in either direction."""
    a_lower = a.lower()
    b_lower = b.lower()
    return a_lower in b_lower or b_lower in a_lower


class GymScorer:
    """Score and rank gyms for a user profile.

    Stateless: every call depends only on its arguments, so identical inputs
    always produce identical scores and rankings.
    """

    BASE_SCORE: float = 70.0
    MIN_SCORE: int = 0
    MAX_SCORE: int = 100

    GOAL_MATCH_THRESHOLD: float = 0.5
    AMENITY_POINTS: int = 3
    AMENITY_BONUS_CAP: int = 15
    PREFERENCE_POINTS: int = 5
    PREFERENCE_BONUS_CAP: int = 20
    FACTOR_WEIGHT: float = 20.0
    MIN_SIGNIFICANT_WORD_LENGTH: int = 3  # words must be longer than this

    # ── Goal -> related amenity lookup ──────────────────────────────
    GOAL_AMENITIES: dict[str, list[str]] = {
        "Build Muscle": ["Free Weights", "Weight Training", "Personal Training", "Strength Equipment"],
        "Weight Loss": ["Cardio Equipment", "Classes", "Swimming Pool", "Group Training"],
        "Improve Strength": ["Free Weights", "Weight Training", "CrossFit", "Functional Training"],
        "Cardio": ["Treadmills", "Ellipticals", "Rowing Machines", "Cardio Equipment"],
        "Flexibility": ["Yoga Classes", "Stretching Area", "Group Classes"],
        "Endurance": ["Cardio Equipment", "Swimming Pool", "Running Track"],
        "Agility": ["Functional Training", "CrossFit", "Group Classes"],
    }

    FALLBACK_AMENITIES: list[str] = ["Classes", "Personal Training", "Equipment"]

    # ── Public API ──────────────────────────────────────────────────

    def score(self, profile: Any, gym: Any) -> int:
        """Return the match score of ``gym`` for ``profile``.

        ``profile`` needs ``fitness_goals`` and ``gym_preferences``; ``gym``
        needs ``amenities``.  Any of them may be ``None``.
        """
        return self.score_labels(
            goals=getattr(profile, "fitness_goals", None),
            preferences=getattr(profile, "gym_preferences", None),
            amenities=getattr(gym, "amenities", None),
        )

    def score_labels(
        self,
        goals: Sequence[str] | None,
        preferences: Sequence[str] | None,
        amenities: Sequence[str] | None,
    ) -> int:
        goal_labels = _labels(goals)
        preference_labels = _labels(preferences)
        amenity_labels = _labels(amenities)

        score = self.BASE_SCORE
        total_factors = 0
        matching_factors = 0.0

        if goal_labels and amenity_labels:
            goal_ratio, amenity_matches = self._goal_dimension(goal_labels, amenity_labels)
            if goal_ratio > self.GOAL_MATCH_THRESHOLD:
                matching_factors += goal_ratio
                total_factors += 1
            score += min(self.AMENITY_BONUS_CAP, amenity_matches * self.AMENITY_POINTS)

        if preference_labels and amenity_labels:
            preference_matches = self._preference_matches(preference_labels, amenity_labels)
            matching_factors += min(1.0, preference_matches / len(preference_labels))
            total_factors += 1
            score += min(self.PREFERENCE_BONUS_CAP, preference_matches * self.PREFERENCE_POINTS)

        if total_factors > 0:
            score += (matching_factors / total_factors) * self.FACTOR_WEIGHT

        return self._finalise(score)

    def rank(self, profile: Any, gyms: Iterable[G]) -> list[tuple[G, int]]:
        """Score every gym and sort by score descending.

        Ties keep their input order.
        """
        scored = [(gym, self.score(profile, gym)) for gym in gyms]
        scored.sort(key=lambda pair: pair[1], reverse=True)

        logger.debug(
            "gyms_ranked",
            gym_count=len(scored),
            top_score=scored[0][1] if scored else None,
        )
        return scored

    def related_amenities(self, goal: str) -> list[str]:
        """Resolve a free-text goal to the amenities that serve it.

        Every known goal whose name contains, or is contained in, the label
        contributes its amenities.  Unknown goals fall back to a generic set.
        """
        related: list[str] = []
        for known_goal, amenities in self.GOAL_AMENITIES.items():
            if _overlaps(goal, known_goal):
                related.extend(amenities)
        return related or list(self.FALLBACK_AMENITIES)

    # ── Dimensions ──────────────────────────────────────────────────

    def _goal_dimension(self, goals: list[str], amenities: list[str]) -> tuple[float, int]:
        """Return (matched goal ratio, total amenity hits).

        Hits are not de-duplicated: one gym amenity serving two goals counts
        twice.
        """
        matched_goals = 0
        amenity_matches = 0

        for goal in goals:
            goal_hits = sum(
                1
                for related in self.related_amenities(goal)
                for amenity in amenities
                if _overlaps(amenity, related)
            )
            amenity_matches += goal_hits
            if goal_hits:
                matched_goals += 1

        return matched_goals / len(goals), amenity_matches

    def _preference_matches(self, preferences: list[str], amenities: list[str]) -> int:
        matches = 0
        for preference in preferences:
            preference_lower = preference.lower()
            for amenity in amenities:
                if _overlaps(preference, amenity) or self._shares_significant_word(
                    preference_lower, amenity.lower()
                ):
                    matches += 1
        return matches

    def _shares_significant_word(self, preference_lower: str, amenity_lower: str) -> bool:
        return any(
            len(word) > self.MIN_SIGNIFICANT_WORD_LENGTH and word in preference_lower
            for word in amenity_lower.split()
        )

    def _finalise(self, raw_score: float) -> int:
        clamped = max(float(self.MIN_SCORE), min(float(self.MAX_SCORE), raw_score))
        # Half-up rounding; round() would send 84.5 to 84
        return int(math.floor(clamped + 0.5))
