"""Scoring and ranking engine.

Pure functions over an in-memory snapshot of votes: aggregate scores per
team, pick phase 1 finalists, score the final and report ties. Nothing here
performs I/O or keeps state between calls.
"""

import logging
from collections.abc import Iterable

from hackvote.models import Phase, Phase1Result, ScoreEntry, TiedGroup, Vote
from hackvote.scoring import get_scoring_policy
from hackvote.scoring.base import ScoringPolicy, Tally

# Import policies to register them
from hackvote.scoring import normalized  # noqa: F401
from hackvote.scoring import weighted_sum  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 10


def _precedence(vote: Vote) -> tuple[float, float, str]:
    """Sort key deciding which of two duplicate votes is kept.

    Latest timestamp wins, then the higher value. The key depends only on
    the vote itself, so the winner does not depend on input order.
    """
    timestamp = vote.timestamp.timestamp() if vote.timestamp else float("-inf")
    return (timestamp, vote.value, vote.role.value)


def deduplicate_votes(votes: Iterable[Vote]) -> list[Vote]:
    """Keep one vote per (voter, team, phase)."""
    chosen: dict[tuple, Vote] = {}
    for vote in votes:
        current = chosen.get(vote.key)
        if current is None or _precedence(vote) > _precedence(current):
            chosen[vote.key] = vote
    return list(chosen.values())


def tally_votes(
    votes: Iterable[Vote],
    team_ids: Iterable[str],
    phase: Phase | None = None,
    policy: ScoringPolicy | None = None,
) -> Tally:
    """Score every team from the qualifying votes, keeping policy details.

    Votes from another phase (when ``phase`` is given) and votes for teams
    outside ``team_ids`` are ignored. Duplicate votes are collapsed before
    scoring.
    """
    valid = list(dict.fromkeys(team_ids))
    known = set(valid)
    if policy is None:
        policy = get_scoring_policy("weighted-sum")

    qualifying = []
    unknown = 0
    for vote in votes:
        if phase is not None and vote.phase != phase:
            continue
        if vote.team_id not in known:
            unknown += 1
            continue
        qualifying.append(vote)

    if unknown:
        logger.debug("Ignored %d vote(s) for unknown teams", unknown)

    unique = deduplicate_votes(qualifying)
    if len(unique) < len(qualifying):
        logger.debug("Collapsed %d duplicate vote(s)", len(qualifying) - len(unique))

    return policy.tally(unique, valid)


def calculate_scores(
    votes: Iterable[Vote],
    team_ids: Iterable[str],
    phase: Phase | None = None,
    policy: ScoringPolicy | None = None,
) -> dict[str, float]:
    """Aggregate votes into a team_id -> score mapping.

    Every valid team appears in the result, with 0 if nobody voted for it.
    With the default policy the score is the (role-weighted) sum of vote
    values, e.g. votes A=5, B=5, A=3 give {"A": 8, "B": 5}.
    """
    return tally_votes(votes, team_ids, phase=phase, policy=policy).scores


def get_phase1_results(scores: dict[str, float], top_n: int = DEFAULT_TOP_N) -> Phase1Result:
    """Select the phase 1 finalists from a score mapping.

    Teams whose whole tie group fits within the first ``top_n`` positions are
    selected outright. If a tie group straddles the cut-off, the entire group
    is reported as ``boundary_tie`` instead of being cut arbitrarily.

    Raises:
        ValueError: If top_n is less than 1
    """
    if top_n < 1:
        raise ValueError(f"top_n must be at least 1, got {top_n}")

    ranking = ScoreEntry.build_ranking(scores)

    selected: list[str] = []
    boundary_tie = None
    for group in _rank_groups(ranking):
        rank = group[0].rank
        if rank > top_n:
            break
        team_ids = [e.team_id for e in group]
        if rank + len(group) - 1 <= top_n:
            selected.extend(team_ids)
        else:
            boundary_tie = TiedGroup(rank=rank, team_ids=team_ids, score=group[0].raw_score)
            break

    tied_groups = [g for g in TiedGroup.from_ranking(ranking) if g.rank <= top_n]

    if boundary_tie is not None:
        logger.info(
            "%d team(s) tied at rank %d across the top %d cut-off",
            len(boundary_tie.team_ids), boundary_tie.rank, top_n,
        )

    return Phase1Result(
        ranking=ranking,
        selected_team_ids=selected,
        boundary_tie=boundary_tie,
        tied_groups=tied_groups,
        top_n=top_n,
    )


def get_top10(scores: dict[str, float], top_n: int = DEFAULT_TOP_N) -> list[str]:
    """Return the top ``top_n`` team ids, best first.

    Every team tied with the team at the cut-off position is included, so
    the result can be longer than ``top_n``; it is never shorter than
    min(top_n, number of teams).
    """
    return get_phase1_results(scores, top_n).qualified_team_ids


def resolve_phase1_ties(result: Phase1Result, chosen_team_ids: Iterable[str]) -> list[str]:
    """Complete the finalist list with the admin's pick from the boundary tie.

    Args:
        result: Phase 1 result with a boundary tie
        chosen_team_ids: Teams from the boundary tie that advance

    Returns:
        The finalist team ids: outright selections followed by the picks.

    Raises:
        ValueError: If a pick is not part of the boundary tie, or the picks
            don't fill the open slots exactly
    """
    chosen = list(dict.fromkeys(chosen_team_ids))

    if result.boundary_tie is None:
        if chosen:
            raise ValueError("There is no tie at the cut-off to resolve")
        return list(result.selected_team_ids)

    invalid = [t for t in chosen if t not in result.boundary_tie.team_ids]
    if invalid:
        raise ValueError(f"Teams not tied at the cut-off: {', '.join(invalid)}")

    open_slots = result.top_n - len(result.selected_team_ids)
    if len(chosen) != open_slots:
        raise ValueError(f"Must select exactly {open_slots} team(s). Got {len(chosen)}.")

    return result.selected_team_ids + chosen


def tally_final(
    votes: Iterable[Vote],
    team_ids: Iterable[str],
    finalist_ids: Iterable[str],
    policy: ScoringPolicy | None = None,
) -> Tally:
    """Score the final round over the finalists only."""
    known = set(team_ids)
    finalists = [t for t in dict.fromkeys(finalist_ids) if t in known]
    return tally_votes(votes, finalists, phase=Phase.FINAL, policy=policy)


def calculate_final_scores(
    votes: Iterable[Vote],
    team_ids: Iterable[str],
    finalist_ids: Iterable[str],
    policy: ScoringPolicy | None = None,
) -> dict[str, float]:
    """Aggregate FINAL votes for the finalists that are also valid teams.

    Final-phase votes for teams that did not advance are ignored.
    """
    return tally_final(votes, team_ids, finalist_ids, policy=policy).scores


def detect_final_ties(scores: dict[str, float], top_n: int | None = None) -> list[TiedGroup]:
    """Report groups of teams sharing a score, best rank first.

    Ranks follow competition ranking: [10, 10, 8, 5] ranks as [1, 1, 3, 4]
    and yields a single group at rank 1. Groups of one team are not ties.
    With ``top_n``, only groups whose rank is within the first top_n are
    reported.
    """
    groups = TiedGroup.from_ranking(ScoreEntry.build_ranking(scores))
    if top_n is not None:
        groups = [g for g in groups if g.rank <= top_n]
    return groups


def _rank_groups(ranking: list[ScoreEntry]) -> list[list[ScoreEntry]]:
    """Split a ranking into runs of entries sharing a rank."""
    groups: list[list[ScoreEntry]] = []
    for entry in ranking:
        if groups and groups[-1][0].rank == entry.rank:
            groups[-1].append(entry)
        else:
            groups.append([entry])
    return groups
