"""Unit tests for GymScorer — heuristic gym match scoring."""
from types import SimpleNamespace

import pytest

from app.services.gym_scorer import GymScorer


@pytest.fixture
def scorer():
    return GymScorer()


def profile(goals=None, preferences=None):
    return SimpleNamespace(fitness_goals=goals, gym_preferences=preferences)


def gym(amenities=None, name="gym"):
    return SimpleNamespace(amenities=amenities, name=name)


class TestBaseline:
    """Inputs that carry no signal score exactly the base score."""

    def test_empty_profile(self, scorer):
        assert scorer.score(profile(), gym(["Free Weights", "Sauna"])) == 70

    def test_gym_without_amenities(self, scorer):
        assert scorer.score(profile(["Build Muscle"], ["Pool"]), gym([])) == 70

    def test_none_fields_do_not_raise(self, scorer):
        assert scorer.score(profile(None, None), gym(None)) == 70

    def test_blank_labels_are_ignored(self, scorer):
        assert scorer.score(profile(["", "  "], [""]), gym(["Sauna"])) == 70


class TestGoalDimension:

    def test_worked_example(self, scorer):
        """Weight Loss + Cardio vs Cardio Equipment/Classes/Sauna -> 99.

        3 hits -> +9, goal ratio 1.0 -> +20.
        """
        score = scorer.score(
            profile(["Weight Loss", "Cardio"]),
            gym(["Cardio Equipment", "Classes", "Sauna"]),
        )
        assert score == 99

    def test_build_muscle_free_weights_beats_base(self, scorer):
        assert scorer.score(profile(["Build Muscle"]), gym(["Free Weights"])) == 93

    def test_goal_labels_are_case_insensitive(self, scorer):
        assert scorer.score(profile(["build muscle"]), gym(["FREE WEIGHTS"])) == 93

    def test_unknown_goal_uses_fallback_amenities(self, scorer):
        assert scorer.related_amenities("Zumba") == GymScorer.FALLBACK_AMENITIES
        assert scorer.score(profile(["Zumba"]), gym(["Classes"])) == 93

    def test_half_of_goals_matched_is_not_a_factor(self, scorer):
        """Ratio 0.5 is not above the threshold: only the flat bonus applies."""
        score = scorer.score(
            profile(["Build Muscle", "Flexibility"]),
            gym(["Free Weights"]),
        )
        assert score == 73

    def test_amenity_bonus_is_capped(self, scorer):
        many = gym(["Free Weights"] * 10)
        # 10 hits -> min(15, 30) = 15, plus 20 factor bonus -> clamped to 100
        assert scorer.score(profile(["Build Muscle"]), many) == 100


class TestPreferenceDimension:

    def test_substring_overlap(self, scorer):
        assert scorer.score(profile(preferences=["Swimming Pool"]), gym(["Pool"])) == 95

    def test_significant_word_overlap(self, scorer):
        score = scorer.score(
            profile(preferences=["Olympic lifting platform"]),
            gym(["Lifting Zone"]),
        )
        assert score == 95

    def test_short_words_do_not_count(self, scorer):
        """'Gym' is too short to be a significant word."""
        assert scorer.score(profile(preferences=["Gym bag"]), gym(["Big Gym"])) == 70

    def test_unmatched_preferences_pull_factor_bonus_down(self, scorer):
        score = scorer.score(
            profile(["Weight Loss", "Cardio"], ["Pool"]),
            gym(["Cardio Equipment", "Classes", "Sauna"]),
        )
        # 70 + 9 + ((1.0 + 0.0) / 2) * 20
        assert score == 89


class TestBoundsAndDeterminism:

    @pytest.mark.parametrize("goals,preferences,amenities", [
        ([], [], []),
        (["Build Muscle"] * 5, ["Free Weights"] * 5, ["Free Weights"] * 20),
        (["Cardio", "Endurance", "Agility"], ["Track"], ["Running Track", "CrossFit"]),
        (["Zumba"], ["x" * 50], ["Equipment"]),
    ])
    def test_score_within_bounds(self, scorer, goals, preferences, amenities):
        score = scorer.score(profile(goals, preferences), gym(amenities))
        assert isinstance(score, int)
        assert 0 <= score <= 100

    def test_same_inputs_same_score(self, scorer):
        p = profile(["Weight Loss"], ["Pool"])
        g = gym(["Swimming Pool", "Classes"])
        assert scorer.score(p, g) == scorer.score(p, g) == GymScorer().score(p, g)

    def test_half_up_rounding(self, scorer):
        assert scorer._finalise(84.5) == 85
        assert scorer._finalise(84.49) == 84
        assert scorer._finalise(-3.0) == 0
        assert scorer._finalise(140.0) == 100


class TestRank:

    def test_sorted_descending(self, scorer):
        gyms = [gym([], "empty"), gym(["Free Weights"], "weights"), gym(["Sauna"], "sauna")]
        ranked = scorer.rank(profile(["Build Muscle"]), gyms)
        assert [g.name for g, _ in ranked] == ["weights", "empty", "sauna"]
        assert [s for _, s in ranked] == [93, 70, 70]

    def test_ties_keep_input_order(self, scorer):
        gyms = [gym([], name) for name in ("a", "b", "c")]
        ranked = scorer.rank(profile(), gyms)
        assert [g.name for g, _ in ranked] == ["a", "b", "c"]

    def test_empty_catalogue(self, scorer):
        assert scorer.rank(profile(["Cardio"]), []) == []
