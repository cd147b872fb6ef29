from .models import (
    BonusAward,
    Captaincy,
    Chip,
    FantasyTeam,
    Gameweek,
    GameweekReport,
    GameweekTeamResult,
    PlayerGameweekRecord,
    PlayerPoints,
    Position,
    RosterEntry,
    ScoringFailure,
    Starter,
    Substitute,
    TeamGameweekRecord,
    TeamPlayerScore,
)
from .errors import GameweekNotFoundError, ScoringError, StorageError, TeamNotFoundError
from .schemas import LeagueConfig, PlayerMatchStat, ScoringRules
from .scoring import DEFAULT_RULES, calculate_player_points, resolve_multiplier, score_match
from .bonus import calculate_bonus, rank_bonus
from .stats_source import MatchStatsSource
from .store import InMemoryStore, JsonFileStore, points_history, team_total
from .aggregator import GameweekScorer, calculate_gameweek_points
from .leaderboard import gameweek_summary, get_gameweek_leaderboard, get_player_performance
from .roster_loader import load_gameweeks, load_rosters, save_gameweek_results, save_gameweeks

__all__ = [
    # Models
    'BonusAward',
    'Captaincy',
    'Chip',
    'FantasyTeam',
    'Gameweek',
    'GameweekReport',
    'GameweekTeamResult',
    'PlayerGameweekRecord',
    'PlayerPoints',
    'Position',
    'RosterEntry',
    'ScoringFailure',
    'Starter',
    'Substitute',
    'TeamGameweekRecord',
    'TeamPlayerScore',
    # Errors
    'ScoringError',
    'GameweekNotFoundError',
    'TeamNotFoundError',
    'StorageError',
    # Rules and stats
    'LeagueConfig',
    'PlayerMatchStat',
    'ScoringRules',
    'MatchStatsSource',
    # Scoring functions
    'DEFAULT_RULES',
    'score_match',
    'resolve_multiplier',
    'calculate_player_points',
    'calculate_bonus',
    'rank_bonus',
    # Gameweek aggregation
    'GameweekScorer',
    'calculate_gameweek_points',
    'InMemoryStore',
    'JsonFileStore',
    'team_total',
    'points_history',
    # Leaderboards
    'get_gameweek_leaderboard',
    'get_player_performance',
    'gameweek_summary',
    # JSON files
    'load_rosters',
    'load_gameweeks',
    'save_gameweeks',
    'save_gameweek_results',
]
