"""Pydantic schemas for stats rows, scoring rules and JSON data files."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import MINUTES_FLAT, MINUTES_PER_15, STAT_DEFAULTS, TIE_BREAK_INPUT_ORDER
from .models import Position


class PlayerMatchStat(BaseModel):
    """Raw statistics for a single player in a single match."""

    model_config = ConfigDict(extra='ignore', frozen=True)

    player_id: str | None = None
    match_id: str | None = None
    position: str | None = None
    minutes_played: int = Field(default=0, ge=0)
    goals: int = Field(default=0, ge=0)
    assists: int = Field(default=0, ge=0)
    clean_sheet: bool = False
    goals_conceded: int = Field(default=0, ge=0)
    yellow_cards: int = Field(default=0, ge=0)
    red_cards: int = Field(default=0, ge=0)
    penalties_saved: int = Field(default=0, ge=0)
    penalties_missed: int = Field(default=0, ge=0)

    @field_validator(*STAT_DEFAULTS, mode='before')
    @classmethod
    def default_missing(cls, v, info):
        """Feeds send null for stats that did not happen."""
        if v is None:
            return STAT_DEFAULTS[info.field_name]
        return v

    @field_validator('player_id', 'match_id', mode='before')
    @classmethod
    def stringify_ids(cls, v):
        return None if v is None else str(v)


def _position_keyed(v: dict) -> dict:
    """Normalise position aliases used as keys ('GK', 'Attacker'...)."""
    resolved = {}
    for label, points in v.items():
        position = Position.from_label(label)
        if position is None:
            raise ValueError(f'Invalid position: {label}')
        resolved[position] = points
    return resolved


class ScoringRules(BaseModel):
    """
    The canonical scoring table.

    One instance is loaded from config and passed to the calculator; it is
    never mutated at runtime.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    minutes_policy: Literal['per_15_minutes', 'flat_threshold'] = MINUTES_PER_15
    minutes_block: int = Field(default=15, ge=1)
    minutes_block_points: int = 1
    appearance_points: int = 1
    full_game_points: int = 2
    full_game_minutes: int = Field(default=60, ge=1)

    goals: dict[Position, int] = Field(
        default_factory=lambda: {
            Position.GOALKEEPER: 6,
            Position.DEFENDER: 6,
            Position.MIDFIELDER: 5,
            Position.FORWARD: 4,
        }
    )
    assist: int = 3
    clean_sheet: dict[Position, int] = Field(
        default_factory=lambda: {
            Position.GOALKEEPER: 4,
            Position.DEFENDER: 4,
            Position.MIDFIELDER: 1,
            Position.FORWARD: 0,
        }
    )
    goals_conceded_block: int = Field(default=2, ge=1)
    goals_conceded_points: int = -1
    goals_conceded_positions: tuple[Position, ...] = (Position.GOALKEEPER, Position.DEFENDER)
    yellow_card: int = -1
    red_card: int = -3
    penalty_saved: int = 5
    penalty_saved_positions: tuple[Position, ...] = (Position.GOALKEEPER,)
    penalty_missed: int = -2

    captain_multiplier: float = 2.0
    triple_captain_multiplier: float = 3.0
    vice_captain_multiplier: float = 1.5

    bonus_awards: tuple[int, ...] = (3, 2, 1)

    @field_validator('goals', 'clean_sheet', mode='before')
    @classmethod
    def validate_position_weights(cls, v):
        """Ensure every position has a weight and no unknown keys slip in."""
        resolved = _position_keyed(v)
        missing = [p.value for p in Position if p not in resolved]
        if missing:
            raise ValueError(f'Missing weights for: {", ".join(missing)}')
        return resolved

    @field_validator('goals_conceded_positions', 'penalty_saved_positions', mode='before')
    @classmethod
    def validate_positions(cls, v):
        positions = []
        for label in v:
            position = Position.from_label(label)
            if position is None:
                raise ValueError(f'Invalid position: {label}')
            positions.append(position)
        return tuple(positions)

    @field_validator('bonus_awards')
    @classmethod
    def validate_bonus_awards(cls, v):
        if any(points < 0 for points in v):
            raise ValueError('Bonus awards must be non-negative')
        if list(v) != sorted(v, reverse=True):
            raise ValueError('Bonus awards must be listed from first place down')
        return v

    def goal_points(self, position: Position) -> int:
        return self.goals.get(position, 0)

    def clean_sheet_points(self, position: Position) -> int:
        return self.clean_sheet.get(position, 0)

    def describe(self) -> dict[str, object]:
        """Plain-data view of the rules, for display."""
        if self.minutes_policy == MINUTES_FLAT:
            minutes = (
                f'{self.appearance_points} for any minutes, '
                f'{self.full_game_points} for {self.full_game_minutes}+'
            )
        else:
            minutes = f'{self.minutes_block_points} per {self.minutes_block} minutes'
        return {
            'minutes': minutes,
            'goals': {p.value: pts for p, pts in self.goals.items()},
            'assists': self.assist,
            'clean_sheet': {p.value: pts for p, pts in self.clean_sheet.items()},
            'goals_conceded': (
                f'{self.goals_conceded_points} per {self.goals_conceded_block} '
                f'({", ".join(p.value for p in self.goals_conceded_positions)})'
            ),
            'yellow_cards': self.yellow_card,
            'red_cards': self.red_card,
            'penalties_saved': self.penalty_saved,
            'penalties_missed': self.penalty_missed,
            'captain_multiplier': self.captain_multiplier,
            'triple_captain_multiplier': self.triple_captain_multiplier,
            'vice_captain_multiplier': self.vice_captain_multiplier,
            'bonus_awards': list(self.bonus_awards),
        }


class LeagueConfig(BaseModel):
    """League configuration settings."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    season: int = Field(..., ge=2000, le=2100)
    rules: ScoringRules = Field(default_factory=ScoringRules)
    bonus_tie_break: Literal['input_order', 'player_id'] = TIE_BREAK_INPUT_ORDER
    squad_size: int = Field(default=15, ge=1, le=30)
    max_substitutes: int = Field(default=4, ge=0, le=15)

    @model_validator(mode='after')
    def validate_squad(self):
        if self.max_substitutes >= self.squad_size:
            raise ValueError(
                f'max_substitutes ({self.max_substitutes}) must be below squad_size ({self.squad_size})'
            )
        return self


class RosterPlayer(BaseModel):
    """Player in a roster file, using the legacy flag layout."""

    model_config = ConfigDict(extra='forbid')

    player_id: str = Field(..., min_length=1)
    name: str = ''
    position: str | None = None
    is_captain: bool = False
    is_vice_captain: bool = False
    is_substitute: bool = False

    @field_validator('player_id', mode='before')
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @model_validator(mode='after')
    def validate_flags(self):
        if self.is_captain and self.is_vice_captain:
            raise ValueError(f'{self.player_id} cannot be both captain and vice-captain')
        if self.is_substitute and (self.is_captain or self.is_vice_captain):
            raise ValueError(f'{self.player_id} is a substitute and cannot hold the armband')
        return self


class TeamRoster(BaseModel):
    """Full roster for a fantasy team."""

    model_config = ConfigDict(extra='forbid')

    team_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    owner: str = ''
    players: list[RosterPlayer]
    chips: dict[str, Literal['triple_captain', 'bench_boost']] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_armbands(self):
        captains = sum(1 for p in self.players if p.is_captain)
        vice_captains = sum(1 for p in self.players if p.is_vice_captain)
        if captains > 1:
            raise ValueError(f'{self.team_id} has {captains} captains (max 1)')
        if vice_captains > 1:
            raise ValueError(f'{self.team_id} has {vice_captains} vice-captains (max 1)')
        return self


class RostersFile(BaseModel):
    """Complete rosters.json file structure."""

    model_config = ConfigDict(extra='forbid')

    teams: list[TeamRoster]


class GameweekEntry(BaseModel):
    """Gameweek metadata."""

    model_config = ConfigDict(extra='forbid')

    gameweek_id: str = Field(..., min_length=1)
    number: int = Field(..., ge=1)
    match_ids: list[str] = Field(default_factory=list)
    is_active: bool = False
    is_finished: bool = False

    @field_validator('gameweek_id', mode='before')
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @field_validator('match_ids', mode='before')
    @classmethod
    def stringify_match_ids(cls, v):
        return [str(m) for m in v]


class GameweeksFile(BaseModel):
    """Complete gameweeks.json file structure."""

    model_config = ConfigDict(extra='forbid')

    gameweeks: list[GameweekEntry]
