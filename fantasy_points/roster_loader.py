"""Load rosters and gameweeks from JSON and save scored gameweeks."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import Chip, FantasyTeam, Gameweek, GameweekReport, RosterEntry
from .schemas import GameweeksFile, RostersFile, TeamRoster
from .utils import load_json, save_json

logger = logging.getLogger('fantasy_points.roster_loader')


def build_fantasy_team(roster: TeamRoster) -> FantasyTeam:
    """Build a FantasyTeam from a validated roster, turning flags into roles."""
    entries = [
        RosterEntry.from_flags(
            player_id=p.player_id,
            name=p.name,
            position=p.position,
            is_captain=p.is_captain,
            is_vice_captain=p.is_vice_captain,
            is_substitute=p.is_substitute,
        )
        for p in roster.players
    ]
    return FantasyTeam(
        team_id=roster.team_id,
        name=roster.name,
        owner=roster.owner,
        entries=entries,
        chips={gw: Chip(chip) for gw, chip in roster.chips.items()},
    )


def load_rosters(rosters_path: str | Path) -> list[FantasyTeam]:
    """
    Load fantasy teams from rosters.json.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a roster is invalid (e.g. a captain on the bench)
    """
    rosters = load_json(rosters_path, schema=RostersFile)
    teams = [build_fantasy_team(r) for r in rosters.teams]
    logger.info(f'Loaded {len(teams)} fantasy teams from {rosters_path}')
    return teams


def load_gameweeks(gameweeks_path: str | Path) -> list[Gameweek]:
    """Load gameweek definitions from gameweeks.json."""
    data = load_json(gameweeks_path, schema=GameweeksFile)
    return [Gameweek(**entry.model_dump()) for entry in data.gameweeks]


def save_gameweeks(gameweeks_path: str | Path, gameweeks: list[Gameweek]) -> None:
    """Write gameweek definitions back (e.g. after finishing one)."""
    data = GameweeksFile.model_validate(
        {
            'gameweeks': [
                {
                    'gameweek_id': g.gameweek_id,
                    'number': g.number,
                    'match_ids': g.match_ids,
                    'is_active': g.is_active,
                    'is_finished': g.is_finished,
                }
                for g in gameweeks
            ]
        }
    )
    save_json(gameweeks_path, data)


def save_gameweek_results(output_path: str | Path, report: GameweekReport) -> dict[str, Any]:
    """
    Save a scored gameweek to JSON.

    Teams are ranked by gameweek points. Failures and bonus awards are kept
    alongside so a partial run is visible in the output.

    Args:
        output_path: Path to output JSON file
        report: Result of GameweekScorer.calculate_gameweek_points()

    Returns:
        The data written
    """
    teams_data = []
    for result in report.results:
        teams_data.append(
            {
                'team_id': result.team_id,
                'name': result.team_name,
                'chip': result.chip.value if result.chip else None,
                'gameweek_points': round(result.gameweek_points, 1),
                'total_points': round(result.total_points, 1),
                'players': [
                    {
                        'player_id': p.player_id,
                        'name': p.name,
                        'position': p.position.value,
                        'captain': p.is_captain,
                        'vice_captain': p.is_vice_captain,
                        'substitute': p.is_substitute,
                        'counted': p.counted,
                        'base_points': p.base_points,
                        'multiplier': p.multiplier,
                        'bonus_points': p.bonus_points,
                        'points': round(p.final_points, 1),
                        'breakdown': p.breakdown,
                    }
                    for p in result.players
                ],
            }
        )

    teams_data.sort(key=lambda t: t['gameweek_points'], reverse=True)
    for rank, team in enumerate(teams_data, 1):
        team['score_rank'] = rank

    data = {
        'gameweek_id': report.gameweek_id,
        'scored_at': datetime.now(timezone.utc).isoformat(),
        'teams': teams_data,
        'bonus': [
            {
                'match_id': a.match_id,
                'player_id': a.player_id,
                'rank': a.rank,
                'points': a.points,
            }
            for a in report.bonus_awards
        ],
        'failures': [
            {'team_id': f.team_id, 'player_id': f.player_id, 'reason': f.reason}
            for f in report.failures
        ],
    }

    save_json(output_path, data)
    logger.info(f'Scores saved to {output_path}')
    return data
