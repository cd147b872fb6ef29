"""Storage collaborators: rosters, gameweeks and point records.

Point rows are keyed by (player, gameweek) and (team, gameweek) and written
with replace-by-key upserts. Team totals and history are always derived from
the stored rows, never kept as a running counter, so scoring the same
gameweek twice leaves everything unchanged.
"""

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .errors import StorageError
from .models import (
    Chip,
    FantasyTeam,
    Gameweek,
    PlayerGameweekRecord,
    TeamGameweekRecord,
)
from .utils import load_json, save_json

logger = logging.getLogger('fantasy_points.store')


class GameweekStore(Protocol):
    def get_gameweek(self, gameweek_id: str) -> Optional[Gameweek]: ...

    def save_gameweek(self, gameweek: Gameweek) -> None: ...


class RosterStore(Protocol):
    def list_teams(self) -> list[FantasyTeam]: ...

    def get_team(self, team_id: str) -> Optional[FantasyTeam]: ...


class PointRecordStore(Protocol):
    def upsert_player_record(self, record: PlayerGameweekRecord) -> None: ...

    def upsert_team_record(self, record: TeamGameweekRecord) -> None: ...

    def player_records(self, player_id: str) -> list[PlayerGameweekRecord]: ...

    def team_records(self, team_id: str) -> list[TeamGameweekRecord]: ...

    def gameweek_player_records(self, gameweek_id: str) -> list[PlayerGameweekRecord]: ...

    def gameweek_team_records(self, gameweek_id: str) -> list[TeamGameweekRecord]: ...


class ScoringStore(GameweekStore, RosterStore, PointRecordStore, Protocol):
    """Everything a gameweek scoring run reads and writes."""


class InMemoryStore:
    """All three stores in process memory."""

    def __init__(
        self,
        teams: Optional[Iterable[FantasyTeam]] = None,
        gameweeks: Optional[Iterable[Gameweek]] = None,
    ):
        self._teams: dict[str, FantasyTeam] = {t.team_id: t for t in teams or []}
        self._gameweeks: dict[str, Gameweek] = {g.gameweek_id: g for g in gameweeks or []}
        self._player_records: dict[tuple[str, str], PlayerGameweekRecord] = {}
        self._team_records: dict[tuple[str, str], TeamGameweekRecord] = {}

    # Rosters

    def add_team(self, team: FantasyTeam) -> None:
        self._teams[team.team_id] = team

    def list_teams(self) -> list[FantasyTeam]:
        return list(self._teams.values())

    def get_team(self, team_id: str) -> Optional[FantasyTeam]:
        return self._teams.get(str(team_id))

    # Gameweeks

    def get_gameweek(self, gameweek_id: str) -> Optional[Gameweek]:
        return self._gameweeks.get(str(gameweek_id))

    def save_gameweek(self, gameweek: Gameweek) -> None:
        self._gameweeks[gameweek.gameweek_id] = gameweek

    def list_gameweeks(self) -> list[Gameweek]:
        return sorted(self._gameweeks.values(), key=lambda g: g.number)

    def _gameweek_order(self, gameweek_id: str) -> tuple[int, str]:
        gameweek = self._gameweeks.get(gameweek_id)
        return (gameweek.number if gameweek else 0, gameweek_id)

    # Point records

    def upsert_player_record(self, record: PlayerGameweekRecord) -> None:
        self._player_records[(record.player_id, record.gameweek_id)] = record

    def upsert_team_record(self, record: TeamGameweekRecord) -> None:
        self._team_records[(record.team_id, record.gameweek_id)] = record

    def player_records(self, player_id: str) -> list[PlayerGameweekRecord]:
        records = [r for (pid, _), r in self._player_records.items() if pid == player_id]
        return sorted(records, key=lambda r: self._gameweek_order(r.gameweek_id))

    def team_records(self, team_id: str) -> list[TeamGameweekRecord]:
        records = [r for (tid, _), r in self._team_records.items() if tid == team_id]
        return sorted(records, key=lambda r: self._gameweek_order(r.gameweek_id))

    def gameweek_player_records(self, gameweek_id: str) -> list[PlayerGameweekRecord]:
        return [r for (_, gw), r in self._player_records.items() if gw == gameweek_id]

    def gameweek_team_records(self, gameweek_id: str) -> list[TeamGameweekRecord]:
        return [r for (_, gw), r in self._team_records.items() if gw == gameweek_id]


class JsonFileStore(InMemoryStore):
    """
    InMemoryStore whose point records survive in a JSON file.

    Every upsert rewrites the file, so a run that dies halfway can simply be
    started again.
    """

    def __init__(
        self,
        points_path: str | Path,
        teams: Optional[Iterable[FantasyTeam]] = None,
        gameweeks: Optional[Iterable[Gameweek]] = None,
    ):
        super().__init__(teams, gameweeks)
        self.points_path = Path(points_path)
        if self.points_path.exists():
            self._load()

    def _load(self) -> None:
        data = load_json(self.points_path)
        for row in data.get('players', []):
            record = PlayerGameweekRecord(**row)
            self._player_records[(record.player_id, record.gameweek_id)] = record
        for row in data.get('teams', []):
            chip = row.get('chip')
            record = TeamGameweekRecord(**{**row, 'chip': Chip(chip) if chip else None})
            self._team_records[(record.team_id, record.gameweek_id)] = record
        logger.debug(
            f'Loaded {len(self._player_records)} player and '
            f'{len(self._team_records)} team records from {self.points_path}'
        )

    def _flush(self, key: tuple[str, str]) -> None:
        teams = []
        for record in self._team_records.values():
            row = asdict(record)
            row['chip'] = record.chip.value if record.chip else None
            teams.append(row)

        data = {
            'players': [asdict(r) for r in self._player_records.values()],
            'teams': teams,
        }
        try:
            save_json(self.points_path, data)
        except (OSError, TypeError) as e:
            raise StorageError(f'Failed to write {self.points_path}: {e}', key=key) from e

    def upsert_player_record(self, record: PlayerGameweekRecord) -> None:
        key = (record.player_id, record.gameweek_id)
        previous = self._player_records.get(key)
        super().upsert_player_record(record)
        try:
            self._flush(key)
        except StorageError:
            self._restore(self._player_records, key, previous)
            raise

    def upsert_team_record(self, record: TeamGameweekRecord) -> None:
        key = (record.team_id, record.gameweek_id)
        previous = self._team_records.get(key)
        super().upsert_team_record(record)
        try:
            self._flush(key)
        except StorageError:
            self._restore(self._team_records, key, previous)
            raise

    @staticmethod
    def _restore(records: dict, key: tuple[str, str], previous) -> None:
        if previous is None:
            records.pop(key, None)
        else:
            records[key] = previous


def team_total(store: PointRecordStore, team_id: str) -> float:
    """Cumulative points: the sum of every stored gameweek row for the team."""
    return sum(r.points for r in store.team_records(team_id))


def points_history(store: PointRecordStore, team_id: str) -> list[tuple[str, float]]:
    """(gameweek_id, points) for each scored gameweek, in store order."""
    return [(r.gameweek_id, r.points) for r in store.team_records(team_id)]
