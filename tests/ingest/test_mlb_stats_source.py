import json
from typing import Any

import httpx
import pytest
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_none

from cycle_stats.ingest.mlb_stats_source import MlbStatsApiSource
from cycle_stats.ingest.protocols import GameSource
from tests.helpers import boxscore

_NO_WAIT_RETRY = retry(
    stop=stop_after_attempt(3),
    wait=wait_none(),
    retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
    reraise=True,
)


class FakeTransport(httpx.BaseTransport):
    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.last_request: httpx.Request | None = None

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.last_request = request
        return self._response


class FailNTransport(httpx.BaseTransport):
    """Returns error responses for the first N requests, then succeeds."""

    def __init__(self, fail_count: int, success_response: httpx.Response) -> None:
        self._fail_count = fail_count
        self._success_response = success_response
        self._call_count = 0

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self._call_count += 1
        if self._call_count <= self._fail_count:
            return httpx.Response(503, content=b"Service Unavailable")
        return self._success_response

    @property
    def call_count(self) -> int:
        return self._call_count


def _game(game_pk: int, date: str, status: str = "Final", game_type: str = "R", **extra: Any) -> dict[str, Any]:
    return {
        "gamePk": game_pk,
        "gameType": game_type,
        "officialDate": date,
        "status": {"detailedState": status},
        "teams": {
            "home": {"team": {"name": "New York Yankees"}},
            "away": {"team": {"name": "Boston Red Sox"}},
        },
        **extra,
    }


def _json_response(payload: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, content=json.dumps(payload).encode())


def _schedule_response() -> httpx.Response:
    return _json_response(
        {
            "dates": [
                {
                    "date": "2024-07-04",
                    "games": [
                        _game(1, "2024-07-04", doubleHeader="S", gameNumber=1),
                        _game(2, "2024-07-04", doubleHeader="S", gameNumber=2),
                        _game(3, "2024-07-04", status="Postponed"),
                        _game(4, "2024-07-04", game_type="E"),
                        _game(5, "2024-07-04", status="Completed Early"),
                    ],
                }
            ]
        }
    )


class TestMlbStatsApiSource:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(MlbStatsApiSource(client=httpx.Client()), GameSource)

    def test_schedule_keeps_final_regular_season_games(self) -> None:
        transport = FakeTransport(_schedule_response())
        source = MlbStatsApiSource(client=httpx.Client(transport=transport))

        games = source.fetch_schedule(2024, "2024-07-01", "2024-07-07")

        assert [g.game_id for g in games] == [1, 2, 5]
        assert games[1].game_number == 2
        assert games[1].double_header == "S"
        assert games[0].home_team == "New York Yankees"
        assert games[0].date == "2024-07-04"

    def test_schedule_query_params(self) -> None:
        transport = FakeTransport(_schedule_response())
        source = MlbStatsApiSource(client=httpx.Client(transport=transport), base_url="https://example.test/api/v1/")

        source.fetch_schedule(2024, "2024-07-01", "2024-07-07")

        assert transport.last_request is not None
        url = transport.last_request.url
        assert url.path == "/api/v1/schedule"
        assert url.params["sportId"] == "1"
        assert url.params["gameType"] == "R"
        assert url.params["startDate"] == "2024-07-01"

    def test_fetch_boxscore(self) -> None:
        transport = FakeTransport(_json_response(boxscore()))
        source = MlbStatsApiSource(client=httpx.Client(transport=transport))

        payload = source.fetch_boxscore(745001)

        assert "teams" in payload
        assert transport.last_request is not None
        assert transport.last_request.url.path.endswith("/game/745001/boxscore")

    def test_retry_on_503_then_success(self) -> None:
        transport = FailNTransport(fail_count=2, success_response=_json_response(boxscore()))
        source = MlbStatsApiSource(client=httpx.Client(transport=transport), retry=_NO_WAIT_RETRY)

        source.fetch_boxscore(745001)

        assert transport.call_count == 3

    def test_exhausted_retries_raises(self) -> None:
        transport = FailNTransport(fail_count=5, success_response=_json_response(boxscore()))
        source = MlbStatsApiSource(client=httpx.Client(transport=transport), retry=_NO_WAIT_RETRY)

        with pytest.raises(httpx.HTTPStatusError):
            source.fetch_boxscore(745001)

        assert transport.call_count == 3
