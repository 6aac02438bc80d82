"""Abstract base class for scoring policies."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Self

from hackvote.config import EventConfig
from hackvote.models import Vote


@dataclass
class Tally:
    """Scores produced by a scoring policy.

    Attributes:
        policy_name: Human-readable name of the policy that produced it
        scores: team_id -> aggregate score, one entry per valid team
        details: Policy-specific breakdown for transparency (vote counts,
                 weights, normalized values)
    """
    policy_name: str
    scores: dict[str, float]
    details: dict[str, Any] = field(default_factory=dict)


class ScoringPolicy(ABC):
    """Abstract base class for scoring policies.

    A policy receives votes that are already restricted to one phase, to
    known teams, and to one vote per (voter, team, phase). Policies are
    registered via the @register_scoring_policy decorator in
    hackvote/scoring/__init__.py.
    """

    key: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this policy."""
        pass

    @property
    def description(self) -> str:
        return ""

    @classmethod
    def from_config(cls, config: EventConfig) -> Self:
        """Build the policy from an event config. Policies without options ignore it."""
        return cls()

    @abstractmethod
    def tally(self, votes: list[Vote], team_ids: list[str]) -> Tally:
        """Score every team in ``team_ids`` from ``votes``.

        Args:
            votes: Qualifying votes, one per (voter, team, phase)
            team_ids: Valid teams, in display order

        Returns:
            Tally whose scores hold exactly the given team ids
        """
        pass
