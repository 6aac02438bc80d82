"""Normalized judge/participant scoring policy."""

import math

from hackvote.config import EventConfig
from hackvote.models import Role, Vote
from hackvote.scoring import register_scoring_policy
from hackvote.scoring.base import ScoringPolicy, Tally


@register_scoring_policy
class NormalizedRolePolicy(ScoringPolicy):
    """Blend of judge and participant votes, each normalized to 0-100.

    Votes are split into two groups: judges, and everyone else. Within each
    group a team's vote total is scaled against the best total in that group:

        judge_norm       = judge_votes / max(judge_votes over teams, 1) * 100
        participant_norm = participant_votes / max(participant_votes over teams, 1) * 100
        score            = judge_weight * judge_norm + participant_weight * participant_norm

    The divisor never drops below 1, so an event without votes scores all
    zeros. The weights are not required to sum to 1; if they don't, the best
    possible score is not 100.
    """

    key = "normalized"

    def __init__(self, judge_weight: float = 0.8, participant_weight: float = 0.2):
        self.judge_weight = judge_weight
        self.participant_weight = participant_weight

    @classmethod
    def from_config(cls, config: EventConfig) -> "NormalizedRolePolicy":
        return cls(config.judge_weight, config.participant_weight)

    @property
    def name(self) -> str:
        return "Normalized Judge/Participant"

    @property
    def description(self) -> str:
        return (
            f"Judge and participant votes scaled to 0-100, "
            f"weighted {self.judge_weight:g} / {self.participant_weight:g}"
        )

    def tally(self, votes: list[Vote], team_ids: list[str]) -> Tally:
        judge_values: dict[str, list[float]] = {t: [] for t in team_ids}
        participant_values: dict[str, list[float]] = {t: [] for t in team_ids}

        for vote in votes:
            if vote.role == Role.JUDGE:
                judge_values[vote.team_id].append(vote.value)
            else:
                participant_values[vote.team_id].append(vote.value)

        judge_counts = {t: math.fsum(v) for t, v in judge_values.items()}
        participant_counts = {t: math.fsum(v) for t, v in participant_values.items()}

        max_judge = max([*judge_counts.values(), 1])
        max_participant = max([*participant_counts.values(), 1])

        judge_normalized = {t: judge_counts[t] / max_judge * 100 for t in team_ids}
        participant_normalized = {
            t: participant_counts[t] / max_participant * 100 for t in team_ids
        }

        scores = {
            t: (judge_normalized[t] * self.judge_weight
                + participant_normalized[t] * self.participant_weight)
            for t in team_ids
        }

        return Tally(
            policy_name=self.name,
            scores=scores,
            details={
                "judge_votes": judge_counts,
                "participant_votes": participant_counts,
                "judge_normalized": judge_normalized,
                "participant_normalized": participant_normalized,
                "judge_weight": self.judge_weight,
                "participant_weight": self.participant_weight,
            },
        )
