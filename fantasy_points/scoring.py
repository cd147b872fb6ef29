"""Point calculation for a single player in a single match."""

import math
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .constants import MINUTES_FLAT
from .models import Chip, PlayerPoints, Position, RosterEntry
from .schemas import PlayerMatchStat, ScoringRules

DEFAULT_RULES = ScoringRules()

StatsInput = Union[PlayerMatchStat, Mapping[str, Any]]


def coerce_stats(stats: Optional[StatsInput]) -> PlayerMatchStat:
    """Accept a stats row as a model or a plain mapping (missing fields default)."""
    if stats is None:
        return PlayerMatchStat()
    if isinstance(stats, PlayerMatchStat):
        return stats
    return PlayerMatchStat.model_validate(dict(stats))


def minutes_points(minutes: int, rules: ScoringRules = DEFAULT_RULES) -> int:
    """
    Points for time on the pitch.

    per_15_minutes: 1 point per full 15 minutes (0-14 -> 0, 90 -> 6).
    flat_threshold: 1 point for any appearance, 2 from 60 minutes.
    """
    if rules.minutes_policy == MINUTES_FLAT:
        if minutes <= 0:
            return 0
        if minutes < rules.full_game_minutes:
            return rules.appearance_points
        return rules.full_game_points
    return math.floor(minutes / rules.minutes_block) * rules.minutes_block_points


def score_match(
    stats: Optional[StatsInput],
    position: Union[Position, str, None],
    rules: ScoringRules = DEFAULT_RULES,
) -> Tuple[int, Dict[str, int]]:
    """
    Score one player's match, before any captaincy multiplier.

    Scoring:
        - Minutes: 1 point per 15 minutes played
        - Goals: GK/DEF 6, MID 5, FWD 4 points each
        - Assists: 3 points each
        - Clean sheet: GK/DEF 4, MID 1, FWD 0
        - Goals conceded (GK/DEF): -1 point per 2 conceded
        - Yellow cards: -1 each
        - Red cards: -3 each
        - Penalties saved (GK): 5 points each
        - Penalties missed: -2 points each

    Args:
        stats: PlayerMatchStat or stats dict (missing fields count as 0/False)
        position: Position or label whose weight column applies (unknown -> Midfielder)
        rules: Scoring table (defaults to the canonical table)

    Returns:
        Tuple of (base_points, breakdown). The breakdown lists every category
        that applies to the position, in presentation order, zeros included.
    """
    stats = coerce_stats(stats)
    position = Position.parse(position)
    breakdown: Dict[str, int] = {}

    breakdown['minutes'] = minutes_points(stats.minutes_played, rules)
    breakdown['goals'] = stats.goals * rules.goal_points(position)
    breakdown['assists'] = stats.assists * rules.assist
    breakdown['clean_sheet'] = rules.clean_sheet_points(position) if stats.clean_sheet else 0

    if position in rules.goals_conceded_positions:
        breakdown['goals_conceded'] = (
            math.floor(stats.goals_conceded / rules.goals_conceded_block)
            * rules.goals_conceded_points
        )

    breakdown['yellow_cards'] = stats.yellow_cards * rules.yellow_card
    breakdown['red_cards'] = stats.red_cards * rules.red_card

    if position in rules.penalty_saved_positions:
        breakdown['penalties_saved'] = stats.penalties_saved * rules.penalty_saved

    breakdown['penalties_missed'] = stats.penalties_missed * rules.penalty_missed

    return sum(breakdown.values()), breakdown


def resolve_multiplier(
    entry: RosterEntry,
    chip: Optional[Chip] = None,
    rules: ScoringRules = DEFAULT_RULES,
) -> float:
    """Captain x2 (x3 with Triple Captain), vice-captain x1.5, everyone else x1."""
    if entry.is_captain:
        if chip == Chip.TRIPLE_CAPTAIN:
            return rules.triple_captain_multiplier
        return rules.captain_multiplier
    if entry.is_vice_captain:
        return rules.vice_captain_multiplier
    return 1.0


def calculate_player_points(
    entry: RosterEntry,
    stats: Optional[StatsInput],
    position: Union[Position, str, None] = None,
    chip: Optional[Chip] = None,
    rules: ScoringRules = DEFAULT_RULES,
) -> PlayerPoints:
    """
    Score a roster entry for one match, multiplier included.

    Negative base points are multiplied like any other (a captain's red card
    costs double).

    Args:
        entry: Roster entry supplying the captaincy role
        stats: Match statistics for the player
        position: Weight column to use (defaults to the entry's position)
        chip: Team chip active this gameweek, if any
        rules: Scoring table

    Returns:
        PlayerPoints with base points, multiplier, final points and breakdown
    """
    stats = coerce_stats(stats)
    position = Position.parse(position or entry.position)
    base_points, breakdown = score_match(stats, position, rules)
    multiplier = resolve_multiplier(entry, chip, rules)

    return PlayerPoints(
        player_id=entry.player_id,
        position=position,
        base_points=base_points,
        multiplier=multiplier,
        final_points=base_points * multiplier,
        breakdown=breakdown,
        match_id=stats.match_id,
    )
