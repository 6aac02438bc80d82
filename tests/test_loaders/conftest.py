"""Shared fixtures for loader tests."""

import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def event_json():
    path = FIXTURES_DIR / "event.json"
    return path.read_bytes()


@pytest.fixture
def event_dict(event_json):
    return json.loads(event_json)


@pytest.fixture
def votes_csv():
    path = FIXTURES_DIR / "votes.csv"
    return path.read_bytes()


@pytest.fixture
def pdf_bytes():
    """Bytes no loader should accept."""
    return b"%PDF-1.4 fake"
