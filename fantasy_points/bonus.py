"""Bonus points for the top contributors in a match."""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .constants import TIE_BREAK_INPUT_ORDER, TIE_BREAK_PLAYER_ID
from .models import BonusAward

logger = logging.getLogger('fantasy_points.bonus')

DEFAULT_AWARDS = (3, 2, 1)


def _rank(
    contributions: Iterable[Tuple[str, float]],
    tie_break: str,
) -> List[Tuple[str, float]]:
    # First occurrence wins if a player is listed twice
    seen = set()
    unique = []
    for player_id, contribution in contributions:
        if player_id in seen:
            continue
        seen.add(player_id)
        unique.append((player_id, contribution))

    if tie_break == TIE_BREAK_PLAYER_ID:
        return sorted(unique, key=lambda c: (-c[1], c[0]))
    if tie_break == TIE_BREAK_INPUT_ORDER:
        return sorted(unique, key=lambda c: -c[1])
    raise ValueError(f'Unknown tie-break policy: {tie_break}')


def calculate_bonus(
    contributions: Iterable[Tuple[str, float]],
    awards: Sequence[int] = DEFAULT_AWARDS,
    tie_break: str = TIE_BREAK_INPUT_ORDER,
) -> Dict[str, int]:
    """
    Award bonus points to the best performers of a single match.

    Contributions are ranked by score, highest first; rank 1 gets awards[0]
    (3), rank 2 awards[1] (2), rank 3 awards[2] (1). With fewer contributors
    only as many awards are handed out as there are players.

    Ties:
        - 'input_order' (default): stable sort, earlier contributor ranks higher
        - 'player_id': ties broken by player id, independent of input order

    Args:
        contributions: (player_id, base_points) pairs for one match
        awards: Points per rank, first place first
        tie_break: Tie-break policy

    Returns:
        Dict mapping player_id to bonus points (only awarded players)
    """
    ranked = _rank(contributions, tie_break)
    return {player_id: points for (player_id, _), points in zip(ranked, awards)}


def rank_bonus(
    match_id: str,
    contributions: Iterable[Tuple[str, float]],
    awards: Sequence[int] = DEFAULT_AWARDS,
    tie_break: str = TIE_BREAK_INPUT_ORDER,
) -> List[BonusAward]:
    """Same ranking as calculate_bonus(), returned as BonusAward records."""
    ranked = _rank(contributions, tie_break)
    result = [
        BonusAward(player_id=player_id, match_id=match_id, rank=rank, points=points)
        for rank, ((player_id, _), points) in enumerate(zip(ranked, awards), 1)
    ]
    for award in result:
        logger.debug(f'Match {match_id}: bonus #{award.rank} {award.player_id} +{award.points}')
    return result
