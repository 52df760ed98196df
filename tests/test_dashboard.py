"""
Tests for dashboard orchestration: load, publish, render and supersession.
"""

import asyncio

import pytest
from matchboard import dashboard as dashboard_module
from matchboard.dashboard import EMPTY_QUERY, FOUND, LOOKUP_ERROR, NOT_FOUND, Dashboard
from matchboard.errors import SERVER_ERROR, UNREACHABLE, LoadFailure, NetworkUnreachable
from matchboard.fetcher import MatchFetcher
from matchboard.sink import RecordingSink
from matchboard.store import MatchSet

from fakes import FakeResponse, FakeSession


class GatedFetcher:
    """Fetcher whose loads finish only when the test releases them."""

    def __init__(self):
        self.loads = []

    async def load_with_retry(self):
        entry = {"gate": asyncio.Event(), "data": None}
        self.loads.append(entry)
        await entry["gate"].wait()
        return entry["data"]

    def release(self, index, data):
        self.loads[index]["data"] = data
        self.loads[index]["gate"].set()


def make_dashboard(session, sleep, **kwargs):
    fetcher = MatchFetcher(base_url="http://backend.test", session=session, sleep=sleep, **kwargs)
    return Dashboard(fetcher, RecordingSink(), animation_sleep=sleep)


class TestRefresh:
    """Test the load pipeline."""

    @pytest.mark.asyncio
    async def test_publishes_and_renders(self, example_payload, sleep_recorder):
        dashboard = make_dashboard(FakeSession(FakeResponse(200, example_payload)), sleep_recorder)

        result = await dashboard.refresh()

        assert isinstance(result, MatchSet)
        assert dashboard.match_set is result
        assert dashboard.sink.series["quality"][1] == [1, 0, 0, 1]
        assert dashboard.sink.series["skills"] == (["go"], [1])
        assert dashboard.sink.locate("project:p2") is not None
        assert dashboard.last_failure is None

    @pytest.mark.asyncio
    async def test_unreachable_after_retries(self, connection_error, sleep_recorder):
        session = FakeSession(connection_error)
        dashboard = make_dashboard(session, sleep_recorder)

        result = await dashboard.refresh()

        assert isinstance(result, LoadFailure)
        assert result.kind == UNREACHABLE
        assert result.server_status == "Unreachable"
        assert result.attempts == 4
        assert result.retryable
        assert isinstance(result.error, NetworkUnreachable)
        assert len(session.calls) == 4
        assert sleep_recorder.delays == [1.0, 2.0, 4.0]
        assert dashboard.last_failure is result

    @pytest.mark.asyncio
    async def test_server_error_classification(self, sleep_recorder):
        dashboard = make_dashboard(FakeSession(FakeResponse(500)), sleep_recorder, max_retries=1)

        result = await dashboard.refresh()

        assert result.kind == SERVER_ERROR
        assert result.message == "Error: HTTP error! status: 500"
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_store(self, example_payload, sleep_recorder):
        session = FakeSession(FakeResponse(200, example_payload), FakeResponse(200, {"bad": 1}))
        dashboard = make_dashboard(session, sleep_recorder, max_retries=0)

        first = await dashboard.refresh()
        second = await dashboard.refresh()

        assert isinstance(second, LoadFailure)
        assert dashboard.match_set is first

    @pytest.mark.asyncio
    async def test_success_clears_last_failure(self, example_payload, sleep_recorder):
        session = FakeSession(FakeResponse(503), FakeResponse(200, example_payload))
        dashboard = make_dashboard(session, sleep_recorder, max_retries=0)

        assert isinstance(await dashboard.refresh(), LoadFailure)
        assert isinstance(await dashboard.refresh(), MatchSet)
        assert dashboard.last_failure is None

    @pytest.mark.asyncio
    async def test_malformed_entity_fields_still_publish(self, sleep_recorder):
        before = dashboard_module.logger.metrics["fetch_successes"]
        payload = {"matches": [{
            "freelancer": {"id": "f1", "skills": "go", "experience": [2]},
            "project": {"id": "p1", "required_skills": [["go"]]},
            "score": 70,
        }]}
        dashboard = make_dashboard(FakeSession(FakeResponse(200, payload)), sleep_recorder)

        result = await dashboard.refresh()

        assert isinstance(result, MatchSet)
        assert dashboard.match_set is result
        assert dashboard.sink.series["skills"] == ([], [])
        assert dashboard.sink.series["experience"] == (["0 years"], [1])
        assert dashboard_module.logger.metrics["fetch_successes"] == before + 1


class TestSupersession:
    """Test that an older load never overwrites a newer one."""

    @pytest.mark.asyncio
    async def test_newer_refresh_cancels_older(self, example_matches, mixed_matches):
        fetcher = GatedFetcher()
        dashboard = Dashboard(fetcher, RecordingSink())

        first = asyncio.create_task(dashboard.refresh())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        second = asyncio.create_task(dashboard.refresh())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert len(fetcher.loads) == 2
        fetcher.release(1, mixed_matches)

        newest = await second
        assert await first is None
        assert dashboard.match_set is newest
        assert dashboard.match_set.generation == 2


class TestAnimationHooks:
    """Test toggle and resize wiring."""

    @pytest.mark.asyncio
    async def test_resize_restarts_running_animation(self, example_payload):
        fetcher = MatchFetcher(session=FakeSession(FakeResponse(200, example_payload)))
        dashboard = Dashboard(fetcher, RecordingSink(), dwell=10)
        await dashboard.refresh()

        assert dashboard.toggle_animation()
        await asyncio.sleep(0)
        dashboard.resize()
        await asyncio.sleep(0)

        assert dashboard.animation.is_active
        assert len(dashboard.sink.connections) == 1
        assert not dashboard.toggle_animation()
        assert dashboard.sink.highlighted == set()


class TestSkillSearch:
    """Test the skill lookup states."""

    @pytest.mark.asyncio
    async def test_blank_query_makes_no_request(self, sleep_recorder):
        session = FakeSession(FakeResponse(200, []))
        lookup = await make_dashboard(session, sleep_recorder).search_skill("   ")

        assert lookup.state == EMPTY_QUERY
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_found(self, sleep_recorder):
        workers = [{"id": "f1", "name": "A", "skills": ["go"], "experience": 2}]
        lookup = await make_dashboard(FakeSession(FakeResponse(200, workers)), sleep_recorder).search_skill(" go ")

        assert lookup.state == FOUND
        assert lookup.freelancers == workers
        assert lookup.message == 'Found 1 freelancer(s) with skill "go".'

    @pytest.mark.asyncio
    async def test_not_found(self, sleep_recorder):
        lookup = await make_dashboard(FakeSession(FakeResponse(200, [])), sleep_recorder).search_skill("cobol")
        assert lookup.state == NOT_FOUND

    @pytest.mark.asyncio
    async def test_error_is_not_retried(self, connection_error, sleep_recorder):
        session = FakeSession(connection_error)
        lookup = await make_dashboard(session, sleep_recorder).search_skill("go")

        assert lookup.state == LOOKUP_ERROR
        assert len(session.calls) == 1
        assert sleep_recorder.delays == []
