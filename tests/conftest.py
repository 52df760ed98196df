"""
Pytest configuration and shared fixtures.
"""

import pytest
import requests
from typing import Any, Dict, List

from fakes import SleepRecorder
from matchboard.sink import RecordingSink
from matchboard.store import MatchStore, rebuild


@pytest.fixture
def example_matches() -> List[Dict[str, Any]]:
    """One excellent match and one match with the freelancer missing."""
    return [
        {
            "freelancer": {"id": "f1", "name": "A", "skills": ["go"], "experience": 2},
            "project": {"id": "p1", "name": "X", "required_skills": ["go"], "min_experience": 1},
            "score": 85,
        },
        {
            "freelancer": None,
            "project": {"id": "p2", "name": "Y", "required_skills": [], "min_experience": 0},
            "score": 0,
        },
    ]


@pytest.fixture
def mixed_matches() -> List[Dict[str, Any]]:
    """Matches across every quality band, a zero score and an orphan project."""
    alice = {"id": "f1", "name": "Alice", "skills": ["python", "sql"], "experience": 5}
    bob = {"id": "f2", "name": "Bob", "skills": ["python", "Python"], "experience": 3}
    cara = {"id": "f3", "name": "Cara", "skills": ["go"], "experience": 5}
    dan = {"id": "f4", "name": "Dan", "skills": [], "experience": 1}
    return [
        {"freelancer": alice, "project": {"id": "p1", "name": "Billing", "required_skills": ["python", "sql"], "min_experience": 3}, "score": 92},
        {"freelancer": bob, "project": {"id": "p2", "name": "Search", "required_skills": ["python", "java"], "min_experience": 2}, "score": 65},
        {"freelancer": cara, "project": {"id": "p3", "name": "Infra", "required_skills": ["rust"], "min_experience": 4}, "score": 45},
        {"freelancer": dan, "project": {"id": "p4", "name": "Docs", "required_skills": ["writing"], "min_experience": 0}, "score": 0},
        {"freelancer": None, "project": {"id": "p5", "name": "Mobile", "required_skills": ["swift"], "min_experience": 2}, "score": 70},
    ]


@pytest.fixture
def example_payload(example_matches) -> Dict[str, Any]:
    return {"matches": example_matches}


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def mixed_store(mixed_matches) -> MatchStore:
    store = MatchStore()
    store.publish(rebuild(mixed_matches, generation=store.next_generation()))
    return store


@pytest.fixture
def connection_error() -> requests.exceptions.ConnectionError:
    return requests.exceptions.ConnectionError("Connection refused")
