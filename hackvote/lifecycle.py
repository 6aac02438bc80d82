"""Event status transitions.

An event moves strictly forward through its statuses:

    WAITING -> PHASE1_OPEN -> PHASE1_CLOSED -> FINAL_OPEN -> FINAL_CLOSED -> FINALIZED

Closing a phase is an admin action; this module only decides whether a
requested transition is allowed.
"""

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hackvote.models import Phase, RankingOverride, TiedGroup


class EventStatus(str, Enum):
    WAITING = "waiting"
    PHASE1_OPEN = "phase1_open"
    PHASE1_CLOSED = "phase1_closed"
    FINAL_OPEN = "final_open"
    FINAL_CLOSED = "final_closed"
    FINALIZED = "finalized"

    @property
    def order(self) -> int:
        return list(EventStatus).index(self)


# Statuses from which the finalist list must already be fixed
REQUIRES_FINALISTS = (
    EventStatus.FINAL_OPEN,
    EventStatus.FINAL_CLOSED,
    EventStatus.FINALIZED,
)


class TransitionError(ValueError):
    """Raised when an event status change is not allowed."""
    pass


def voting_phase(status: EventStatus) -> "Phase | None":
    """Return the phase currently accepting votes, or None."""
    from hackvote.models import Phase

    if status == EventStatus.PHASE1_OPEN:
        return Phase.PHASE1
    if status == EventStatus.FINAL_OPEN:
        return Phase.FINAL
    return None


def advance(
    current: EventStatus,
    target: EventStatus,
    finalist_ids: Sequence[str] = (),
    final_ties: Sequence["TiedGroup"] = (),
    overrides: Sequence["RankingOverride"] = (),
) -> EventStatus:
    """Check a status transition and return the new status.

    Args:
        current: Status the event is in
        target: Status requested by the admin
        finalist_ids: Teams selected in phase 1 (needed from FINAL_OPEN on)
        final_ties: Unresolved ties inside the podium of the final ranking
        overrides: Ranking overrides recorded for the final

    Raises:
        TransitionError: If the transition skips a status, goes backwards,
            lacks finalists, or would finalize with unresolved podium ties.
    """
    if target.order <= current.order:
        raise TransitionError(
            f'Cannot move from "{current.value}" back to "{target.value}"; '
            f"closed phases cannot be reopened."
        )
    if target.order > current.order + 1:
        raise TransitionError(
            f'Cannot skip phases. Current status is "{current.value}", '
            f'cannot jump to "{target.value}".'
        )

    if target in REQUIRES_FINALISTS and not finalist_ids:
        raise TransitionError(
            f'Cannot transition to "{target.value}" before the phase 1 '
            f"finalists are selected."
        )

    if target == EventStatus.FINALIZED and final_ties and not overrides:
        tied = ", ".join(t for group in final_ties for t in group.team_ids)
        raise TransitionError(
            f"The final ranking has tied teams ({tied}); resolve them with "
            f"ranking overrides first."
        )

    return target
