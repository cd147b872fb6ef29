"""Exceptions raised by the scoring engine and its stores."""

from typing import Optional


class ScoringError(Exception):
    """Base class for fantasy points errors."""


class GameweekNotFoundError(ScoringError):
    def __init__(self, gameweek_id: str):
        super().__init__(f'Gameweek not found: {gameweek_id}')
        self.gameweek_id = gameweek_id


class TeamNotFoundError(ScoringError):
    def __init__(self, team_id: str):
        super().__init__(f'Team not found: {team_id}')
        self.team_id = team_id


class StorageError(ScoringError):
    """A point-record write failed."""

    def __init__(self, message: str, key: Optional[tuple] = None):
        super().__init__(message)
        self.key = key

    def to_dict(self) -> dict:
        return {
            'message': str(self),
            **({'key': list(self.key)} if self.key else {}),
        }
