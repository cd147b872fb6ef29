"""Leaderboards and statistics read from stored point records."""

from collections import Counter
from typing import Any, Optional

from .errors import GameweekNotFoundError
from .store import ScoringStore, team_total


def get_gameweek_leaderboard(store: ScoringStore, gameweek_id: str) -> list[dict[str, Any]]:
    """
    Rank all teams by cumulative points, showing this gameweek's score.

    Teams level on total points are ordered by gameweek points and share a
    rank (1, 2, 2, 4). Teams with no row for the gameweek show 0.

    Args:
        store: Roster and point record store
        gameweek_id: Gameweek whose points to show

    Returns:
        List of dicts (rank, team_id, team_name, owner, total_points,
        gameweek_points, chip), best team first
    """
    if store.get_gameweek(gameweek_id) is None:
        raise GameweekNotFoundError(gameweek_id)

    gameweek_rows = {r.team_id: r for r in store.gameweek_team_records(gameweek_id)}

    rows = []
    for team in store.list_teams():
        record = gameweek_rows.get(team.team_id)
        rows.append(
            {
                'team_id': team.team_id,
                'team_name': team.name,
                'owner': team.owner,
                'total_points': round(team_total(store, team.team_id), 1),
                'gameweek_points': round(record.points, 1) if record else 0.0,
                'chip': record.chip.value if record and record.chip else None,
            }
        )

    rows.sort(key=lambda r: (r['total_points'], r['gameweek_points']), reverse=True)

    previous = None
    for position, row in enumerate(rows, 1):
        if row['total_points'] != previous:
            rank = position
            previous = row['total_points']
        row['rank'] = rank

    return rows


def get_player_performance(
    store: ScoringStore, player_id: str, gameweek_id: Optional[str] = None
) -> dict[str, Any]:
    """
    Summarise a player's stored gameweek records.

    Points are the player's own (base + bonus), before any team multiplier.

    Args:
        store: Point record store
        player_id: Player to summarise
        gameweek_id: Restrict to a single gameweek

    Returns:
        Dict with total_points, average_points, gameweeks and a history list
    """
    records = store.player_records(str(player_id))
    if gameweek_id is not None:
        records = [r for r in records if r.gameweek_id == str(gameweek_id)]

    total = sum(r.points for r in records)
    return {
        'player_id': str(player_id),
        'total_points': total,
        'average_points': total / len(records) if records else 0.0,
        'gameweeks': len(records),
        'history': [
            {
                'gameweek_id': r.gameweek_id,
                'base_points': r.base_points,
                'bonus_points': r.bonus_points,
                'points': r.points,
                'matches': r.matches,
                'breakdown': dict(r.breakdown),
            }
            for r in records
        ],
    }


def gameweek_summary(store: ScoringStore, gameweek_id: str) -> dict[str, Any]:
    """
    Headline numbers for a scored gameweek.

    Picks and captaincies are counted over the current rosters; ties for
    most picked / most captained go to the player seen first.

    Returns:
        Dict with teams, average_points, highest_points, most_picked and
        most_captained (None when nobody qualifies)
    """
    if store.get_gameweek(gameweek_id) is None:
        raise GameweekNotFoundError(gameweek_id)

    points = [r.points for r in store.gameweek_team_records(gameweek_id)]

    picked: Counter = Counter()
    captained: Counter = Counter()
    for team in store.list_teams():
        for entry in team.entries:
            picked[entry.player_id] += 1
            if entry.is_captain:
                captained[entry.player_id] += 1

    return {
        'gameweek_id': gameweek_id,
        'teams': len(points),
        'average_points': round(sum(points) / len(points), 2) if points else 0.0,
        'highest_points': max(points, default=0.0),
        'most_picked': max(picked, key=picked.get) if picked else None,
        'most_captained': max(captained, key=captained.get) if captained else None,
    }
