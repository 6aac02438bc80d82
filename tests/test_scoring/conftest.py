"""Shared fixtures for scoring and ranking tests."""

import pytest
from tests.conftest import make_ballots, make_votes

from hackvote.models import Phase, Role


@pytest.fixture
def simple_votes():
    """Three voters, two teams.

         A  B
    V1   5
    V2      5
    V3   3

    Sum: A=8, B=5.
    """
    return make_votes({
        "V1": {"A": 5},
        "V2": {"B": 5},
        "V3": {"A": 3},
    })


@pytest.fixture
def mixed_roles():
    """Participants and judges voting for the same teams.

    Participants: A=4, B=2, C=0
    Judges:       A=1, B=2, C=1
    """
    return (
        make_ballots({"A": 4, "B": 2}, role=Role.PARTICIPANT, prefix="P")
        + make_ballots({"A": 1, "B": 2, "C": 1}, role=Role.JUDGE, prefix="J")
    )


@pytest.fixture
def fifteen_teams():
    """Fifteen teams t0..t14 with 15..1 phase 1 votes, no ties."""
    counts = {f"t{i}": 15 - i for i in range(15)}
    return list(counts), make_ballots(counts, phase=Phase.PHASE1)
