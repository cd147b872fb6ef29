"""Shared fixtures: a small league with one scored match."""

import pytest

from fantasy_points.models import Chip, FantasyTeam, Gameweek, RosterEntry
from fantasy_points.stats_source import MatchStatsSource
from fantasy_points.store import InMemoryStore


def entry(player_id, position, captain=False, vice=False, sub=False):
    return RosterEntry.from_flags(
        player_id=player_id,
        name=player_id.replace('_', ' ').title(),
        position=position,
        is_captain=captain,
        is_vice_captain=vice,
        is_substitute=sub,
    )


@pytest.fixture
def match_records():
    """
    One match, m1. Base points under the default rules:
    gk 10, fwd 17, def -1 (did not play), mid 9, sub 8, other 6 (not rostered).
    Bonus: fwd +3, gk +2, mid +1.
    """
    return [
        {'player_id': 'p_gk', 'match_id': 'm1', 'position': 'Goalkeeper',
         'minutes_played': 90, 'clean_sheet': True, 'goals_conceded': 0},
        {'player_id': 'p_fwd', 'match_id': 'm1', 'position': 'Forward',
         'minutes_played': 90, 'goals': 2, 'assists': 1},
        {'player_id': 'p_def', 'match_id': 'm1', 'position': 'Defender',
         'minutes_played': 0, 'yellow_cards': 1},
        {'player_id': 'p_mid', 'match_id': 'm1', 'position': 'Midfielder',
         'minutes_played': 90, 'assists': 1},
        {'player_id': 'p_sub', 'match_id': 'm1', 'position': 'Midfielder',
         'minutes_played': 45, 'goals': 1},
        {'player_id': 'p_other', 'match_id': 'm1', 'position': 'Forward',
         'minutes_played': 90},
    ]


@pytest.fixture
def stats(match_records):
    return MatchStatsSource.from_records(match_records)


@pytest.fixture
def team_a():
    """Captain p_fwd, vice p_mid, p_sub on the bench."""
    return FantasyTeam(
        team_id='A',
        name='Alpha',
        owner='Ana',
        entries=[
            entry('p_gk', 'GK'),
            entry('p_fwd', 'FWD', captain=True),
            entry('p_def', 'DEF'),
            entry('p_mid', 'MID', vice=True),
            entry('p_sub', 'MID', sub=True),
        ],
    )


@pytest.fixture
def team_b():
    """Captain p_sub, p_mid on the bench, Bench Boost in gw1."""
    return FantasyTeam(
        team_id='B',
        name='Bravo',
        owner='Ben',
        entries=[
            entry('p_fwd', 'FWD'),
            entry('p_sub', 'MID', captain=True),
            entry('p_mid', 'MID', sub=True),
        ],
        chips={'gw1': Chip.BENCH_BOOST},
    )


@pytest.fixture
def store(team_a, team_b):
    return InMemoryStore(
        teams=[team_a, team_b],
        gameweeks=[Gameweek(gameweek_id='gw1', number=1, match_ids=['m1'], is_active=True)],
    )
