"""Data models for the fantasy points engine."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .constants import POSITION_ALIASES

logger = logging.getLogger('fantasy_points.models')


class Position(str, Enum):
    GOALKEEPER = 'Goalkeeper'
    DEFENDER = 'Defender'
    MIDFIELDER = 'Midfielder'
    FORWARD = 'Forward'

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional['Position']:
        """Resolve a label or alias ('GK', 'Attacker', 'd'...), or None if unknown."""
        if isinstance(label, cls):
            return label
        if not label:
            return None
        canonical = POSITION_ALIASES.get(str(label).strip().lower())
        return cls(canonical) if canonical else None

    @classmethod
    def parse(cls, label: Optional[str]) -> 'Position':
        """Resolve a position label, defaulting to Midfielder."""
        position = cls.from_label(label)
        if position is None:
            logger.debug(f'Unknown position {label!r}, using {cls.MIDFIELDER.value}')
            return cls.MIDFIELDER
        return position


class Captaincy(str, Enum):
    NONE = 'none'
    CAPTAIN = 'captain'
    VICE_CAPTAIN = 'vice_captain'


class Chip(str, Enum):
    TRIPLE_CAPTAIN = 'triple_captain'
    BENCH_BOOST = 'bench_boost'


@dataclass(frozen=True)
class Starter:
    """Starting XI role."""
    captaincy: Captaincy = Captaincy.NONE


@dataclass(frozen=True)
class Substitute:
    """Bench role. Substitutes never hold the armband."""


Role = Union[Starter, Substitute]


@dataclass(frozen=True)
class RosterEntry:
    """A player's place in a fantasy team for a gameweek."""
    player_id: str
    name: str = ''
    position: Optional[Position] = None  # None: taken from the stat row
    role: Role = field(default_factory=Starter)

    @property
    def is_substitute(self) -> bool:
        return isinstance(self.role, Substitute)

    @property
    def is_captain(self) -> bool:
        return isinstance(self.role, Starter) and self.role.captaincy == Captaincy.CAPTAIN

    @property
    def is_vice_captain(self) -> bool:
        return isinstance(self.role, Starter) and self.role.captaincy == Captaincy.VICE_CAPTAIN

    @classmethod
    def from_flags(
        cls,
        player_id: str,
        name: str = '',
        position: Optional[str] = None,
        is_captain: bool = False,
        is_vice_captain: bool = False,
        is_substitute: bool = False,
    ) -> 'RosterEntry':
        """
        Build an entry from the legacy three-boolean representation.

        A missing position stays None; an unrecognised one becomes Midfielder.

        Raises:
            ValueError: If the flags describe an impossible role
                (captain and vice-captain, or an armband on a substitute)
        """
        if is_captain and is_vice_captain:
            raise ValueError(f'{player_id} cannot be both captain and vice-captain')
        if is_substitute and (is_captain or is_vice_captain):
            raise ValueError(f'{player_id} is a substitute and cannot hold the armband')

        if is_substitute:
            role: Role = Substitute()
        elif is_captain:
            role = Starter(Captaincy.CAPTAIN)
        elif is_vice_captain:
            role = Starter(Captaincy.VICE_CAPTAIN)
        else:
            role = Starter()

        return cls(
            player_id=str(player_id),
            name=name,
            position=Position.parse(position) if position else None,
            role=role,
        )


@dataclass
class FantasyTeam:
    """Container for a fantasy team's roster."""
    team_id: str
    name: str
    owner: str = ''
    entries: List[RosterEntry] = field(default_factory=list)
    chips: Dict[str, Chip] = field(default_factory=dict)  # gameweek_id -> chip played

    def chip_for(self, gameweek_id: str) -> Optional[Chip]:
        return self.chips.get(gameweek_id)

    @property
    def starters(self) -> List[RosterEntry]:
        return [e for e in self.entries if not e.is_substitute]

    @property
    def substitutes(self) -> List[RosterEntry]:
        return [e for e in self.entries if e.is_substitute]


@dataclass
class Gameweek:
    """A scoring period bundling one or more matches."""
    gameweek_id: str
    number: int
    match_ids: List[str] = field(default_factory=list)
    is_active: bool = False
    is_finished: bool = False


@dataclass
class PlayerPoints:
    """Container for one player's points in one match."""
    player_id: str
    position: Position
    base_points: int = 0
    multiplier: float = 1.0
    final_points: float = 0.0
    breakdown: Dict[str, int] = field(default_factory=dict)
    match_id: Optional[str] = None


@dataclass(frozen=True)
class BonusAward:
    player_id: str
    match_id: str
    rank: int
    points: int


@dataclass
class PlayerGameweekRecord:
    """Stored points for a player in a gameweek, before any team multiplier."""
    player_id: str
    gameweek_id: str
    base_points: int = 0
    bonus_points: int = 0
    matches: int = 0
    breakdown: Dict[str, int] = field(default_factory=dict)

    @property
    def points(self) -> int:
        return self.base_points + self.bonus_points


@dataclass
class TeamGameweekRecord:
    """Stored points for a fantasy team in a gameweek."""
    team_id: str
    gameweek_id: str
    points: float = 0.0
    chip: Optional[Chip] = None


@dataclass
class TeamPlayerScore:
    """One roster entry's contribution to a team's gameweek, kept for display."""
    player_id: str
    name: str
    position: Position
    is_captain: bool = False
    is_vice_captain: bool = False
    is_substitute: bool = False
    counted: bool = True
    base_points: int = 0
    multiplier: float = 1.0
    bonus_points: int = 0
    final_points: float = 0.0
    breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass
class GameweekTeamResult:
    """Aggregated points for one fantasy team in one gameweek."""
    team_id: str
    team_name: str
    gameweek_id: str
    gameweek_points: float = 0.0
    total_points: float = 0.0
    chip: Optional[Chip] = None
    players: List[TeamPlayerScore] = field(default_factory=list)
    points_history: List[Tuple[str, float]] = field(default_factory=list)


@dataclass
class ScoringFailure:
    team_id: Optional[str]
    player_id: Optional[str]
    reason: str


@dataclass
class GameweekReport:
    """Outcome of a gameweek scoring run: successes alongside failures."""
    gameweek_id: str
    results: List[GameweekTeamResult] = field(default_factory=list)
    failures: List[ScoringFailure] = field(default_factory=list)
    bonus_awards: List[BonusAward] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
