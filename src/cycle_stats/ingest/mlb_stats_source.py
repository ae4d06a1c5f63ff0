import logging
from collections.abc import Callable
from typing import Any

import httpx

from cycle_stats.ingest._retry import default_http_retry
from cycle_stats.ingest.protocols import ScheduledGame

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://statsapi.mlb.com/api/v1"

_FINAL_STATES = frozenset({"Final", "Completed Early", "Game Over"})

_DEFAULT_RETRY = default_http_retry("MLB Stats API request")


class MlbStatsApiSource:
    """Schedule and box-score pulls from the public MLB Stats API."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        base_url: str = DEFAULT_BASE_URL,
        sport_id: int = 1,
        game_type: str = "R",
        retry: Callable[[Callable[..., Any]], Callable[..., Any]] = _DEFAULT_RETRY,
    ) -> None:
        self._client = client or httpx.Client(timeout=httpx.Timeout(10.0, connect=5.0))
        self._base_url = base_url.rstrip("/")
        self._sport_id = sport_id
        self._game_type = game_type
        self._get_with_retry = retry(self._get)

    @property
    def source_type(self) -> str:
        return "mlb_api"

    def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        response = self._client.get(url, params=params)
        response.raise_for_status()
        return response

    def fetch_schedule(self, season: int, start_date: str, end_date: str) -> list[ScheduledGame]:
        url = f"{self._base_url}/schedule"
        params = {
            "sportId": self._sport_id,
            "gameType": self._game_type,
            "season": season,
            "startDate": start_date,
            "endDate": end_date,
        }
        logger.debug("GET %s season=%d %s..%s", url, season, start_date, end_date)
        payload = self._get_with_retry(url, params=params).json()

        games: list[ScheduledGame] = []
        for day in payload.get("dates", []):
            for game in day.get("games", []):
                status = game.get("status", {}).get("detailedState", "")
                game_type = game.get("gameType", "")
                if game_type != self._game_type or status not in _FINAL_STATES:
                    continue
                teams = game.get("teams", {})
                games.append(
                    ScheduledGame(
                        game_id=int(game["gamePk"]),
                        date=game.get("officialDate") or day.get("date", ""),
                        home_team=teams.get("home", {}).get("team", {}).get("name", ""),
                        away_team=teams.get("away", {}).get("team", {}).get("name", ""),
                        status=status,
                        game_type=game_type,
                        double_header=game.get("doubleHeader", "N"),
                        game_number=int(game.get("gameNumber", 1)),
                    )
                )
        logger.info("Schedule for %d (%s..%s): %d final games", season, start_date, end_date, len(games))
        return games

    def fetch_boxscore(self, game_id: int) -> dict[str, Any]:
        url = f"{self._base_url}/game/{game_id}/boxscore"
        logger.debug("GET %s", url)
        return self._get_with_retry(url).json()
