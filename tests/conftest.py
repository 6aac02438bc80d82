"""Shared test helpers."""

from hackvote.config import EventConfig
from hackvote.models import EventSnapshot, Phase, Role, ScoreEntry, Team, Vote


def make_votes(table: dict[str, dict[str, float]], phase: Phase = Phase.PHASE1,
               role: Role = Role.PARTICIPANT) -> list[Vote]:
    """Build votes from a compact table.

    Args:
        table: {voter_code: {team_id: value}}
        phase: Phase for every vote
        role: Role for every voter

    Returns:
        One Vote per (voter, team) cell, in table order.
    """
    return [
        Vote(voter_code=voter, team_id=team_id, phase=phase, value=value, role=role)
        for voter, picks in table.items()
        for team_id, value in picks.items()
    ]


def make_ballots(counts: dict[str, int], phase: Phase = Phase.PHASE1,
                 role: Role = Role.PARTICIPANT, prefix: str = "V") -> list[Vote]:
    """Build plain one-point votes giving each team the requested count.

    Every vote comes from a distinct voter, so nothing is deduplicated.
    """
    votes = []
    for team_id, count in counts.items():
        for i in range(count):
            votes.append(Vote(voter_code=f"{prefix}-{team_id}-{i}", team_id=team_id,
                              phase=phase, role=role))
    return votes


def make_teams(*team_ids: str) -> list[Team]:
    return [Team(team_id=t, name=f"Team {t}") for t in team_ids]


def make_snapshot(teams: list[Team], votes: list[Vote], **kwargs) -> EventSnapshot:
    config = kwargs.pop("config", None) or EventConfig()
    return EventSnapshot(config=config, teams=teams, votes=votes, **kwargs)


def ranking_names(ranking: list[ScoreEntry]) -> list[str]:
    return [e.team_id for e in ranking]


def ranking_ranks(ranking: list[ScoreEntry]) -> list[tuple[str, int]]:
    return [(e.team_id, e.rank) for e in ranking]
