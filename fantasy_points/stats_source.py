"""Match statistics source backed by a polars DataFrame."""

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import polars as pl

from .constants import CLEAN_SHEET_API_POSITIONS, STAT_DEFAULTS
from .models import Position
from .schemas import PlayerMatchStat

logger = logging.getLogger('fantasy_points.stats_source')

STAT_SCHEMA = {
    'player_id': pl.Utf8,
    'match_id': pl.Utf8,
    'position': pl.Utf8,
    'minutes_played': pl.Int64,
    'goals': pl.Int64,
    'assists': pl.Int64,
    'clean_sheet': pl.Boolean,
    'goals_conceded': pl.Int64,
    'yellow_cards': pl.Int64,
    'red_cards': pl.Int64,
    'penalties_saved': pl.Int64,
    'penalties_missed': pl.Int64,
}


def _empty_frame() -> pl.DataFrame:
    return pl.DataFrame(schema=STAT_SCHEMA)


def normalize_frame(frame: pl.DataFrame) -> pl.DataFrame:
    """
    Coerce a raw stats frame to the standard column set.

    Missing stat columns are added, nulls become 0/False, ids become strings
    and unknown columns are dropped. Row order is preserved.

    Raises:
        ValueError: If a non-empty frame lacks player_id or match_id
    """
    if frame.width == 0:
        return _empty_frame()

    for key in ('player_id', 'match_id'):
        if key not in frame.columns:
            raise ValueError(f'Stats frame is missing required column: {key}')

    missing = [
        pl.lit(None, dtype=dtype).alias(col)
        for col, dtype in STAT_SCHEMA.items()
        if col not in frame.columns
    ]
    if missing:
        frame = frame.with_columns(missing)

    columns = []
    for col, dtype in STAT_SCHEMA.items():
        expr = pl.col(col).cast(dtype, strict=False)
        if col in STAT_DEFAULTS:
            expr = expr.fill_null(STAT_DEFAULTS[col])
        columns.append(expr)

    return frame.select(columns)


class MatchStatsSource:
    """Per-player, per-match statistics for scoring."""

    def __init__(self, frame: Optional[pl.DataFrame] = None):
        self._frame = normalize_frame(frame) if frame is not None else _empty_frame()

    @property
    def frame(self) -> pl.DataFrame:
        return self._frame

    def __len__(self) -> int:
        return self._frame.height

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> 'MatchStatsSource':
        """
        Build a source from stat dicts (one per player per match).

        Raises:
            ValueError: If a record has no player_id/match_id or a negative stat
        """
        rows = []
        for record in records:
            stat = PlayerMatchStat.model_validate(dict(record))
            if stat.player_id is None or stat.match_id is None:
                raise ValueError(f'Stats record needs player_id and match_id: {dict(record)}')
            rows.append(stat.model_dump())

        if not rows:
            return cls()
        return cls(pl.DataFrame(rows, schema=STAT_SCHEMA))

    @classmethod
    def from_csv(cls, path: str | Path) -> 'MatchStatsSource':
        """Load stats from a CSV file with one row per player per match."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f'Stats file not found: {path}')

        logger.info(f'Loading match stats from {path}')
        frame = pl.read_csv(path, schema_overrides={'player_id': pl.Utf8, 'match_id': pl.Utf8})
        return cls(frame)

    @classmethod
    def from_api_football(cls, payload: Any, match_id: str | int) -> 'MatchStatsSource':
        """
        Normalize an API-Football `fixtures/players` payload for one match.

        The payload is either the full response ({"response": [...]}) or the
        list of team entries. A goalkeeper or defender earns a clean sheet when
        they played and their side conceded nothing.

        Args:
            payload: Decoded JSON from the fixtures/players endpoint
            match_id: Identifier the rows are stored under

        Returns:
            MatchStatsSource with one row per player in the payload
        """
        if isinstance(payload, Mapping):
            entries = payload.get('response') or []
        else:
            entries = payload or []

        records = []
        for entry in entries:
            players = entry.get('players') or []
            parsed = [_parse_api_player(p) for p in players]
            parsed = [p for p in parsed if p is not None]
            team_conceded = max((p['_conceded'] for p in parsed), default=0)

            for row in parsed:
                api_position = row.pop('_api_position')
                row.pop('_conceded')
                row['match_id'] = str(match_id)
                row['clean_sheet'] = (
                    api_position in CLEAN_SHEET_API_POSITIONS
                    and row['minutes_played'] > 0
                    and team_conceded == 0
                )
                records.append(row)

        if not records:
            logger.warning(f'No player stats in API payload for match {match_id}')
        return cls.from_records(records)

    def extend(self, other: 'MatchStatsSource') -> 'MatchStatsSource':
        """Return a new source with other's rows appended."""
        return MatchStatsSource(pl.concat([self._frame, other.frame], how='vertical'))

    def match_ids(self) -> list[str]:
        """Distinct match ids, in first-seen order."""
        return self._frame.get_column('match_id').unique(maintain_order=True).to_list()

    def match_stats(self, match_id: str) -> list[PlayerMatchStat]:
        """All player rows for a match, in source order."""
        rows = self._frame.filter(pl.col('match_id') == str(match_id))
        return [PlayerMatchStat.model_validate(row) for row in rows.iter_rows(named=True)]


def _parse_api_player(item: Mapping[str, Any]) -> Optional[dict]:
    player_id = (item.get('player') or {}).get('id')
    if player_id is None:
        return None

    statistics = item.get('statistics') or [{}]
    s = statistics[0] or {}
    games = s.get('games') or {}
    goals = s.get('goals') or {}
    cards = s.get('cards') or {}
    penalty = s.get('penalty') or {}

    api_position = games.get('position')
    position = Position.from_label(api_position)

    return {
        'player_id': str(player_id),
        'position': position.value if position else None,
        'minutes_played': games.get('minutes') or 0,
        'goals': goals.get('total') or 0,
        'assists': goals.get('assists') or 0,
        'goals_conceded': goals.get('conceded') or 0,
        'yellow_cards': cards.get('yellow') or 0,
        'red_cards': cards.get('red') or 0,
        'penalties_saved': penalty.get('saved') or 0,
        'penalties_missed': penalty.get('missed') or 0,
        '_api_position': api_position,
        '_conceded': goals.get('conceded') or 0,
    }
