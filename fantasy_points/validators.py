"""Validation functions for rosters and scoring results."""

from typing import Optional

from .models import FantasyTeam, GameweekTeamResult, PlayerPoints, TeamPlayerScore


def validate_roster(
    team: FantasyTeam,
    squad_size: Optional[int] = None,
    max_substitutes: Optional[int] = None,
) -> list[str]:
    """
    Validate that a fantasy team's roster complies with league rules.

    Checks:
    - At most one captain and one vice-captain
    - No player listed twice
    - Squad size and substitute limits (when given)

    Args:
        team: FantasyTeam to validate
        squad_size: Maximum number of players in the squad
        max_substitutes: Maximum number of substitutes

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    captains = [e for e in team.entries if e.is_captain]
    vice_captains = [e for e in team.entries if e.is_vice_captain]
    if len(captains) > 1:
        errors.append(f'{team.team_id} has {len(captains)} captains (max 1)')
    if len(vice_captains) > 1:
        errors.append(f'{team.team_id} has {len(vice_captains)} vice-captains (max 1)')

    seen = set()
    duplicates = set()
    for entry in team.entries:
        if entry.player_id in seen:
            duplicates.add(entry.player_id)
        seen.add(entry.player_id)
    if duplicates:
        errors.append(f'{team.team_id} has duplicate players: {", ".join(sorted(duplicates))}')

    if squad_size is not None and len(team.entries) > squad_size:
        errors.append(f'{team.team_id} has {len(team.entries)} players (max {squad_size})')

    substitutes = len(team.substitutes)
    if max_substitutes is not None and substitutes > max_substitutes:
        errors.append(f'{team.team_id} has {substitutes} substitutes (max {max_substitutes})')

    return errors


def validate_player_points(points: PlayerPoints) -> list[str]:
    """
    Check that a player's match points are internally consistent.

    Sanity checks:
    - Breakdown sums to base points exactly
    - Final points equal base points times the multiplier
    - Base points in a plausible range (-15 to 40)

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    breakdown_sum = sum(points.breakdown.values())
    if breakdown_sum != points.base_points:
        warnings.append(
            f'{points.player_id} breakdown sum ({breakdown_sum}) != base points ({points.base_points})'
        )

    expected_final = points.base_points * points.multiplier
    if points.final_points != expected_final:
        warnings.append(
            f'{points.player_id} final points ({points.final_points}) != '
            f'{points.base_points} x {points.multiplier}'
        )

    if points.base_points > 40:
        warnings.append(
            f'{points.player_id} scored {points.base_points} pts (unusually high - check for scoring bug)'
        )
    elif points.base_points < -15:
        warnings.append(
            f'{points.player_id} scored {points.base_points} pts (unusually low - check for scoring bug)'
        )

    return warnings


def validate_team_result(result: GameweekTeamResult) -> list[str]:
    """
    Check that a team's gameweek result adds up.

    Sanity checks:
    - Uncounted entries (benched substitutes) score exactly 0
    - Gameweek points equal the sum of the entries' final points
    - Cumulative total includes this gameweek's points

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    for player in result.players:
        warnings.extend(_check_entry(result.team_id, player))

    entries_sum = sum(p.final_points for p in result.players)
    if abs(entries_sum - result.gameweek_points) > 1e-9:
        warnings.append(
            f'{result.team_id} entries sum ({entries_sum:.1f}) != '
            f'gameweek points ({result.gameweek_points:.1f})'
        )

    history = dict(result.points_history)
    if result.gameweek_id in history and abs(history[result.gameweek_id] - result.gameweek_points) > 1e-9:
        warnings.append(
            f'{result.team_id} history for {result.gameweek_id} ({history[result.gameweek_id]:.1f}) '
            f'!= gameweek points ({result.gameweek_points:.1f})'
        )

    return warnings


def _check_entry(team_id: str, player: TeamPlayerScore) -> list[str]:
    if not player.counted and player.final_points != 0:
        return [f'{team_id} substitute {player.player_id} contributed {player.final_points:.1f} pts']
    if sum(player.breakdown.values()) != player.base_points:
        return [f'{team_id} {player.player_id} breakdown does not match base points']
    return []


def validate_report(results: list[GameweekTeamResult]) -> tuple[list[str], list[str]]:
    """
    Validate every team result of a gameweek.

    Returns:
        Tuple of (errors, warnings)
        - errors: duplicate team results, which mean a broken run
        - warnings: issues to review but not block scoring
    """
    errors: list[str] = []
    warnings: list[str] = []

    seen = set()
    for result in results:
        if result.team_id in seen:
            errors.append(f'{result.team_id} scored twice in {result.gameweek_id}')
        seen.add(result.team_id)
        warnings.extend(validate_team_result(result))

    return errors, warnings
