"""Weighted sum scoring policy."""

import math
from collections.abc import Mapping

from hackvote.config import EventConfig
from hackvote.models import Role, Vote
from hackvote.scoring import register_scoring_policy
from hackvote.scoring.base import ScoringPolicy, Tally


@register_scoring_policy
class WeightedSumPolicy(ScoringPolicy):
    """Sum of vote values, each multiplied by the weight of the voter's role.

    The weight table is injected rather than fixed here, so the same code
    serves "one person, one vote" events and events where a judge's vote
    counts for more. Roles missing from the table weigh 1, and with no table
    at all the total of all scores equals the total of all vote values.

    Totals are computed with math.fsum, which is correctly rounded and
    therefore independent of the order the votes arrive in.
    """

    key = "weighted-sum"

    def __init__(self, role_weights: Mapping[Role | str, float] | None = None):
        self.role_weights: dict[Role, float] = {
            Role(role): float(weight) for role, weight in (role_weights or {}).items()
        }

    @classmethod
    def from_config(cls, config: EventConfig) -> "WeightedSumPolicy":
        return cls(config.role_weights)

    @property
    def name(self) -> str:
        return "Weighted Sum"

    @property
    def description(self) -> str:
        return "Each vote adds its value times the weight of the voter's role"

    def weight(self, role: Role) -> float:
        return self.role_weights.get(role, 1.0)

    def tally(self, votes: list[Vote], team_ids: list[str]) -> Tally:
        contributions: dict[str, list[float]] = {t: [] for t in team_ids}
        vote_counts: dict[str, int] = {t: 0 for t in team_ids}

        for vote in votes:
            contributions[vote.team_id].append(vote.value * self.weight(vote.role))
            vote_counts[vote.team_id] += 1

        scores = {t: math.fsum(contributions[t]) for t in team_ids}

        return Tally(
            policy_name=self.name,
            scores=scores,
            details={
                "vote_counts": vote_counts,
                "role_weights": {r.value: w for r, w in self.role_weights.items()},
            },
        )
