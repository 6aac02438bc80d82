"""Core data models for votes, teams and ranking results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Self

from hackvote.config import EventConfig
from hackvote.lifecycle import EventStatus


class Phase(str, Enum):
    """A discrete voting round."""
    PHASE1 = "phase1"
    FINAL = "final"

    @classmethod
    def parse(cls, value: str) -> Self:
        """Parse a phase name, accepting the export spellings "p1" and "p2"."""
        aliases = {"p1": cls.PHASE1, "p2": cls.FINAL}
        key = str(value).strip().lower()
        if key in aliases:
            return aliases[key]
        return cls(key)


class Role(str, Enum):
    PARTICIPANT = "participant"
    JUDGE = "judge"
    ADMIN = "admin"


@dataclass(frozen=True)
class Vote:
    """A single vote from one voter for one team in one phase.

    Attributes:
        voter_code: Unique code of the voter
        team_id: Team the vote is for
        phase: Voting round the vote was cast in
        value: Numeric contribution of this vote (1 for a plain ballot pick)
        role: Role of the voter at the time of voting
        timestamp: When the vote was cast, if known
    """
    voter_code: str
    team_id: str
    phase: Phase = Phase.PHASE1
    value: float = 1
    role: Role = Role.PARTICIPANT
    timestamp: datetime | None = None

    @property
    def key(self) -> tuple[str, str, Phase]:
        return (self.voter_code, self.team_id, self.phase)

    def to_dict(self) -> dict[str, Any]:
        return {
            "voter_code": self.voter_code,
            "team_id": self.team_id,
            "phase": self.phase.value,
            "value": self.value,
            "role": self.role.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass
class Team:
    team_id: str
    name: str
    emoji: str = "🚀"
    members: list[str] = field(default_factory=list)
    nickname: str | None = None
    hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "nickname": self.nickname,
            "emoji": self.emoji,
            "members": list(self.members),
        }


@dataclass
class User:
    unique_code: str
    name: str
    role: Role = Role.PARTICIPANT
    team_id: str | None = None


@dataclass
class ScoreEntry:
    """A team's position in a computed ranking.

    Attributes:
        team_id: Team identifier
        raw_score: Aggregate score the rank was derived from
        rank: 1-indexed rank (tied teams share the same rank)
        tied: Whether this team shares its rank with another team
    """
    team_id: str
    raw_score: float
    rank: int
    tied: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "raw_score": self.raw_score,
            "rank": self.rank,
            "tied": self.tied,
        }

    @classmethod
    def build_ranking(cls, scores: dict[str, float]) -> list[Self]:
        """Rank teams by score, highest first, using competition ranking.

        Teams with equal scores share the better rank and the next distinct
        score skips ahead by the size of the group, e.g. [10, 10, 8] gives
        ranks [1, 1, 3]. Within a tie group the input order is kept.
        """
        ordered = sorted(scores.items(), key=lambda item: -item[1])

        entries = []
        position = 0
        while position < len(ordered):
            score = ordered[position][1]
            end = position
            while end < len(ordered) and ordered[end][1] == score:
                end += 1
            tied = end - position > 1
            for team_id, _ in ordered[position:end]:
                entries.append(cls(team_id=team_id, raw_score=score,
                                   rank=position + 1, tied=tied))
            position = end

        return entries


@dataclass
class TiedGroup:
    """A set of teams sharing an identical score and therefore a rank."""
    rank: int
    team_ids: list[str]
    score: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {"rank": self.rank, "team_ids": list(self.team_ids), "score": self.score}

    @classmethod
    def from_ranking(cls, ranking: list[ScoreEntry]) -> list[Self]:
        """Collect the tie groups (size 2 or more) of a ranking, in rank order."""
        groups: dict[int, Self] = {}
        for entry in ranking:
            if not entry.tied:
                continue
            if entry.rank not in groups:
                groups[entry.rank] = cls(rank=entry.rank, team_ids=[], score=entry.raw_score)
            groups[entry.rank].team_ids.append(entry.team_id)
        return [groups[rank] for rank in sorted(groups)]


@dataclass(frozen=True)
class RankingOverride:
    """An administrative correction pinning a team to a final rank."""
    team_id: str
    forced_rank: int
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"team_id": self.team_id, "forced_rank": self.forced_rank, "reason": self.reason}


@dataclass
class Phase1Result:
    """Outcome of the preliminary round.

    Attributes:
        ranking: Every team ranked by its phase 1 score
        selected_team_ids: Teams that qualified outright, best first
        boundary_tie: Teams tied across the cut-off, or None if the cut-off
            falls between two distinct scores. These teams are not dropped;
            an admin has to pick among them.
        tied_groups: Every tie group among the qualified teams
        top_n: Number of finalist slots
    """
    ranking: list[ScoreEntry]
    selected_team_ids: list[str]
    boundary_tie: TiedGroup | None = None
    tied_groups: list[TiedGroup] = field(default_factory=list)
    top_n: int = 10

    @property
    def qualified_team_ids(self) -> list[str]:
        """Selected teams plus every team tied at the cut-off."""
        if self.boundary_tie is None:
            return list(self.selected_team_ids)
        return self.selected_team_ids + self.boundary_tie.team_ids

    @property
    def has_tied_groups(self) -> bool:
        return bool(self.tied_groups)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ranking": [e.to_dict() for e in self.ranking],
            "selected_team_ids": self.selected_team_ids,
            "boundary_tie": self.boundary_tie.to_dict() if self.boundary_tie else None,
            "qualified_team_ids": self.qualified_team_ids,
            "tied_groups": [g.to_dict() for g in self.tied_groups],
            "top_n": self.top_n,
        }


@dataclass
class EventSnapshot:
    """A consistent, in-memory read of one event's collections.

    The engine only ever computes over a snapshot; mixing votes read before
    and after an update is the caller's problem.
    """
    config: EventConfig
    teams: list[Team]
    votes: list[Vote]
    users: list[User] = field(default_factory=list)
    status: EventStatus = EventStatus.WAITING
    finalist_ids: list[str] = field(default_factory=list)
    overrides: list[RankingOverride] = field(default_factory=list)

    def visible_team_ids(self) -> list[str]:
        """Ids of teams that take part in scoring (hidden teams excluded)."""
        return [t.team_id for t in self.teams if not t.hidden]

    def get_team(self, team_id: str) -> Team | None:
        for team in self.teams:
            if team.team_id == team_id:
                return team
        return None
