import csv
import logging
import re
import unicodedata
from pathlib import Path

from cycle_stats.ingest.protocols import SalaryEntry, SalaryLookup

logger = logging.getLogger(__name__)

_SUFFIX_RE = re.compile(r"\s+(Jr\.?|Sr\.?|II|III|IV|V)\s*$", re.IGNORECASE)
_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def normalize_name(name: str) -> str:
    """Canonical form used to match box-score names against salary rows.

    Accepts either spaces or the underscores used in storage keys.
    """
    name = name.replace("_", " ")
    name = _SUFFIX_RE.sub("", name.strip())
    nfkd = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in nfkd if not unicodedata.combining(c))
    stripped = _PUNCTUATION_RE.sub("", stripped)
    return " ".join(stripped.lower().split())


class CsvSalarySource:
    """Salary lookup backed by a CSV with ``team,season,player,salary`` columns."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._rows: dict[tuple[str, int], list[SalaryEntry]] | None = None

    @property
    def source_detail(self) -> str:
        return str(self._path)

    def _load(self) -> dict[tuple[str, int], list[SalaryEntry]]:
        if self._rows is not None:
            return self._rows
        rows: dict[tuple[str, int], list[SalaryEntry]] = {}
        if not self._path.exists():
            logger.warning("Salary file %s not found; salaries will be estimated", self._path)
            self._rows = rows
            return rows
        logger.debug("Reading salary CSV %s", self._path)
        with open(self._path, encoding="utf-8", newline="") as f:
            for line in csv.DictReader(f):
                try:
                    entry = SalaryEntry(
                        player_name=line["player"].strip(),
                        team=line["team"].strip().upper(),
                        season=int(line["season"]),
                        salary=int(float(str(line["salary"]).replace(",", "").replace("$", ""))),
                    )
                except (KeyError, ValueError) as e:
                    logger.warning("Skipping malformed salary row %r: %s", line, e)
                    continue
                rows.setdefault((entry.team, entry.season), []).append(entry)
        logger.debug("Loaded salaries for %d team-seasons from %s", len(rows), self._path)
        self._rows = rows
        return rows

    def salaries(self, team: str, season: int) -> list[SalaryEntry]:
        return list(self._load().get((team.upper(), season), []))


class SalaryIndex:
    """Per-run memo of normalized-name → salary, one lookup per team-season."""

    def __init__(self, lookup: SalaryLookup | None) -> None:
        self._lookup = lookup
        self._cache: dict[tuple[str, int], dict[str, int]] = {}

    def _team(self, team: str, season: int) -> dict[str, int]:
        key = (team.upper(), season)
        if key not in self._cache:
            entries: list[SalaryEntry] = []
            if self._lookup is not None:
                try:
                    entries = self._lookup.salaries(team, season)
                except Exception:
                    logger.exception("Salary lookup failed for %s %d", team, season)
            self._cache[key] = {normalize_name(e.player_name): e.salary for e in entries}
        return self._cache[key]

    def salary_for(self, team: str, season: int, player_name: str) -> int | None:
        return self._team(team, season).get(normalize_name(player_name))

    def payroll_for(self, team: str, season: int) -> int | None:
        return sum(self._team(team, season).values()) or None
