"""Validation of submitted ballots."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from hackvote.config import EventConfig
from hackvote.lifecycle import EventStatus, voting_phase
from hackvote.models import Phase, Team, User, Vote

logger = logging.getLogger(__name__)


class BallotError(ValueError):
    """A ballot that must not be recorded."""
    pass


@dataclass
class Ballot:
    """A voter's selection of teams for one phase.

    Attributes:
        voter: The authenticated user casting the ballot
        team_ids: Selected teams, in the order the voter picked them
        phase: Round the ballot is for
        timestamp: Submission time, copied onto each resulting vote
    """
    voter: User
    team_ids: list[str] = field(default_factory=list)
    phase: Phase = Phase.PHASE1
    timestamp: datetime | None = None


def max_votes_for(phase: Phase, config: EventConfig) -> int:
    return config.max_votes_p1 if phase == Phase.PHASE1 else config.max_votes_p2


def cast_ballot(
    ballot: Ballot,
    *,
    teams: Iterable[Team],
    status: EventStatus,
    config: EventConfig,
    existing_votes: Iterable[Vote] = (),
    finalist_ids: Iterable[str] = (),
) -> list[Vote]:
    """Check a ballot against the event rules and turn it into votes.

    Storing the votes atomically (one ballot per voter per phase) is up to
    the caller; this only checks the ballot against the snapshot it is given.

    Returns:
        One Vote per selected team, value 1, carrying the voter's role

    Raises:
        BallotError: If the ballot breaks any rule
    """
    voter = ballot.voter
    selected = ballot.team_ids

    if voting_phase(status) != ballot.phase:
        raise BallotError(f"Voting for {ballot.phase.value} is not open")

    if not selected:
        raise BallotError("No teams selected")

    limit = max_votes_for(ballot.phase, config)
    if len(selected) > limit:
        raise BallotError(f"At most {limit} team(s) can be selected")

    if len(set(selected)) != len(selected):
        raise BallotError("The same team was selected more than once")

    if any(v.voter_code == voter.unique_code and v.phase == ballot.phase
           for v in existing_votes):
        raise BallotError("Already voted in this phase")

    if voter.team_id and voter.team_id in selected:
        raise BallotError("Cannot vote for your own team")

    visible = {t.team_id for t in teams if not t.hidden}
    unknown = [t for t in selected if t not in visible]
    if unknown:
        raise BallotError(f"Team not found: {', '.join(unknown)}")

    if ballot.phase == Phase.FINAL:
        finalists = set(finalist_ids)
        outside = [t for t in selected if t not in finalists]
        if outside:
            raise BallotError(f"Not a finalist: {', '.join(outside)}")

    logger.debug("Accepted %s ballot from %s for %d team(s)",
                 ballot.phase.value, voter.unique_code, len(selected))

    return [
        Vote(
            voter_code=voter.unique_code,
            team_id=team_id,
            phase=ballot.phase,
            value=1,
            role=voter.role,
            timestamp=ballot.timestamp,
        )
        for team_id in selected
    ]
