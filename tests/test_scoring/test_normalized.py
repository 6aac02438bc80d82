"""Tests for the normalized judge/participant policy."""

import math

import pytest
from tests.conftest import make_ballots

from hackvote.config import EventConfig
from hackvote.models import Role
from hackvote.ranking import calculate_scores, tally_votes
from hackvote.scoring import get_scoring_policy
from hackvote.scoring.normalized import NormalizedRolePolicy


def team_votes(counts: dict[str, tuple[int, int]]):
    """{team: (judge votes, participant votes)} -> votes."""
    judges = make_ballots({t: j for t, (j, _) in counts.items()}, role=Role.JUDGE, prefix="J")
    participants = make_ballots({t: p for t, (_, p) in counts.items()}, prefix="P")
    return judges + participants


class TestNormalizedRolePolicy:
    def setup_method(self):
        self.policy = NormalizedRolePolicy(0.8, 0.2)

    def test_name(self):
        assert self.policy.name == "Normalized Judge/Participant"

    def test_normalizes_against_best_team(self):
        votes = team_votes({"a": (10, 20), "b": (5, 10)})
        tally = tally_votes(votes, ["a", "b"], policy=self.policy)

        # a: judge=100, participant=100 -> 100; b: 50, 50 -> 50
        assert tally.details["judge_normalized"] == {"a": 100, "b": 50}
        assert tally.details["participant_normalized"] == {"a": 100, "b": 50}
        assert tally.scores["a"] == pytest.approx(100)
        assert tally.scores["b"] == pytest.approx(50)

    def test_weights_decide_the_winner(self):
        votes = team_votes({"a": (10, 1), "b": (1, 10)})

        judge_heavy = calculate_scores(votes, ["a", "b"], policy=NormalizedRolePolicy(0.9, 0.1))
        assert judge_heavy["a"] > judge_heavy["b"]

        participant_heavy = calculate_scores(votes, ["a", "b"], policy=NormalizedRolePolicy(0.1, 0.9))
        assert participant_heavy["b"] > participant_heavy["a"]

    def test_team_without_votes_scores_zero(self):
        votes = team_votes({"a": (5, 5), "b": (0, 0)})
        assert calculate_scores(votes, ["a", "b"], policy=self.policy)["b"] == 0

    def test_all_zero_votes(self):
        """The divisor never drops below 1, so no NaN or infinity."""
        scores = calculate_scores([], ["a", "b"], policy=self.policy)
        assert scores == {"a": 0, "b": 0}
        assert all(math.isfinite(s) for s in scores.values())

    def test_single_vote_per_group(self):
        votes = team_votes({"a": (1, 0), "b": (0, 1)})
        scores = calculate_scores(votes, ["a", "b"], policy=NormalizedRolePolicy(0.5, 0.5))
        assert scores == {"a": pytest.approx(50), "b": pytest.approx(50)}

    def test_weights_need_not_sum_to_one(self):
        votes = team_votes({"a": (10, 10)})
        assert calculate_scores(votes, ["a"], policy=NormalizedRolePolicy(0.8, 0.8))["a"] == pytest.approx(160)
        assert calculate_scores(votes, ["a"], policy=NormalizedRolePolicy(0.3, 0.2))["a"] == pytest.approx(50)

    def test_admin_votes_count_as_participant_votes(self):
        votes = make_ballots({"a": 2}, role=Role.ADMIN) + make_ballots({"b": 1}, prefix="P")
        tally = tally_votes(votes, ["a", "b"], policy=self.policy)
        assert tally.details["participant_votes"] == {"a": 2, "b": 1}
        assert tally.details["judge_votes"] == {"a": 0, "b": 0}

    def test_built_from_config(self):
        config = EventConfig(scoring_policy="normalized", judge_weight=0.6, participant_weight=0.4)
        policy = get_scoring_policy(config.scoring_policy, config)
        assert isinstance(policy, NormalizedRolePolicy)
        assert policy.judge_weight == 0.6
        assert policy.participant_weight == 0.4
