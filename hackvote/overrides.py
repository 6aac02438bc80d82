"""Administrative overrides of the final ranking."""

from collections import Counter
from collections.abc import Iterable, Sequence

from hackvote.models import RankingOverride, ScoreEntry


class OverrideError(ValueError):
    """A set of ranking overrides that cannot be applied."""
    pass


class InvalidReferenceError(OverrideError):
    """An override names a team that is not in the ranking."""
    pass


class ConflictingOverrideError(OverrideError):
    """Two overrides claim the same rank, or one team is pinned twice."""
    pass


def overrides_from_order(team_ids: Iterable[str], reason: str = "") -> list[RankingOverride]:
    """Turn an ordered list of team ids into overrides for ranks 1..k.

    This is the form the admin screen submits when resolving a tie. Repeated
    ids are dropped, keeping the first occurrence.
    """
    return [
        RankingOverride(team_id=team_id, forced_rank=rank, reason=reason)
        for rank, team_id in enumerate(dict.fromkeys(team_ids), start=1)
    ]


def _collect_pins(
    ranking: Sequence[ScoreEntry], overrides: Iterable[RankingOverride]
) -> dict[int, str]:
    """Validate overrides and return rank -> pinned team id."""
    known = {e.team_id for e in ranking}
    size = len(ranking)
    pins: dict[int, str] = {}
    pinned_rank: dict[str, int] = {}

    for override in overrides:
        team_id, rank = override.team_id, override.forced_rank
        if team_id not in known:
            raise InvalidReferenceError(f"Override names unknown team {team_id!r}")
        if not 1 <= rank <= size:
            raise OverrideError(
                f"Override for {team_id!r} asks for rank {rank}; "
                f"ranks run from 1 to {size}"
            )
        if pins.get(rank, team_id) != team_id:
            raise ConflictingOverrideError(
                f"Rank {rank} is claimed by both {pins[rank]!r} and {team_id!r}"
            )
        if pinned_rank.get(team_id, rank) != rank:
            raise ConflictingOverrideError(
                f"Team {team_id!r} is pinned to both rank {pinned_rank[team_id]} and rank {rank}"
            )
        pins[rank] = team_id
        pinned_rank[team_id] = rank

    return pins


def apply_final_ranking_overrides(
    ranking: Sequence[ScoreEntry], overrides: Iterable[RankingOverride]
) -> list[ScoreEntry]:
    """Apply overrides to a computed ranking and renumber the other teams.

    Pinned teams take their forced rank. The remaining teams keep their
    computed order and fill the free positions, each ranked by position,
    except that adjacent teams from a computed tie group none of whose
    members was pinned keep sharing a rank.

    All overrides are validated before anything is applied, and the input
    entries are never modified.

    Raises:
        InvalidReferenceError: An override names a team not in the ranking
        ConflictingOverrideError: Two overrides claim one rank, or one team
            is pinned to two ranks
        OverrideError: A forced rank is outside 1..len(ranking)
    """
    pins = _collect_pins(ranking, overrides)
    ordered = sorted(ranking, key=lambda e: e.rank)
    by_id = {e.team_id: e for e in ordered}

    pinned_ids = set(pins.values())
    disturbed_groups = {by_id[t].rank for t in pinned_ids}
    remaining = iter(e for e in ordered if e.team_id not in pinned_ids)

    slots: list[tuple[ScoreEntry, bool]] = []
    for position in range(1, len(ordered) + 1):
        if position in pins:
            slots.append((by_id[pins[position]], True))
        else:
            slots.append((next(remaining), False))

    result: list[ScoreEntry] = []
    for index, (entry, pinned) in enumerate(slots):
        rank = index + 1
        if index > 0 and not pinned and entry.rank not in disturbed_groups:
            previous, previous_pinned = slots[index - 1]
            if not previous_pinned and previous.rank == entry.rank:
                rank = result[-1].rank
        result.append(ScoreEntry(team_id=entry.team_id, raw_score=entry.raw_score,
                                 rank=rank, tied=False))

    shared = Counter(e.rank for e in result)
    for entry in result:
        entry.tied = shared[entry.rank] > 1

    return result
