"""Gameweek scoring engine: match stats in, stored team and player points out."""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from .bonus import rank_bonus
from .constants import CATEGORY_ORDER, TIE_BREAK_INPUT_ORDER
from .errors import GameweekNotFoundError, StorageError, TeamNotFoundError
from .models import (
    BonusAward,
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
    TeamGameweekRecord,
    TeamPlayerScore,
)
from .schemas import ScoringRules
from .scoring import DEFAULT_RULES, resolve_multiplier, score_match
from .stats_source import MatchStatsSource
from .store import ScoringStore, points_history, team_total
from .validators import validate_roster

logger = logging.getLogger('fantasy_points.aggregator')

MatchPoints = Dict[str, List[PlayerPoints]]


def merge_breakdowns(breakdowns: List[Dict[str, int]]) -> Dict[str, int]:
    """Sum per-category points across matches, keeping presentation order."""
    totals: Dict[str, int] = defaultdict(int)
    for breakdown in breakdowns:
        for category, points in breakdown.items():
            totals[category] += points
    order = {category: i for i, category in enumerate(CATEGORY_ORDER)}
    return {k: totals[k] for k in sorted(totals, key=lambda k: order.get(k, len(order)))}


class GameweekScorer:
    """
    Scores every fantasy team for a gameweek.

    The store supplies gameweeks and rosters and receives the point records;
    InMemoryStore and JsonFileStore both fit. Scoring a gameweek again
    replaces its rows, so re-runs after a stat correction are safe.
    """

    def __init__(
        self,
        stats: MatchStatsSource,
        store: ScoringStore,
        rules: Optional[ScoringRules] = None,
        tie_break: str = TIE_BREAK_INPUT_ORDER,
        squad_size: Optional[int] = None,
        max_substitutes: Optional[int] = None,
    ):
        """
        Initialize scorer.

        Args:
            stats: Per-player, per-match statistics
            store: Gameweek, roster and point record store
            rules: Scoring table (defaults to the canonical table)
            tie_break: Bonus tie-break policy
            squad_size: Squad size limit checked before scoring (warning only)
            max_substitutes: Substitute limit checked before scoring (warning only)
        """
        self.stats = stats
        self.store = store
        self.rules = rules or DEFAULT_RULES
        self.tie_break = tie_break
        self.squad_size = squad_size
        self.max_substitutes = max_substitutes

    def get_gameweek(self, gameweek_id: str) -> Gameweek:
        gameweek = self.store.get_gameweek(str(gameweek_id))
        if gameweek is None:
            raise GameweekNotFoundError(gameweek_id)
        return gameweek

    def score_matches(
        self, gameweek: Gameweek, positions: Dict[str, Position]
    ) -> Tuple[MatchPoints, Dict[str, int], List[BonusAward]]:
        """
        Score every stat row of the gameweek's matches and rank bonus.

        Every player with a stat row is scored, rostered or not, since bonus
        is decided against the whole match. Rostered players use their roster
        position; anyone else uses the position on the stat row.

        Args:
            gameweek: Gameweek whose matches to score
            positions: Roster position per player_id

        Returns:
            Tuple of (match points per player, bonus per player, bonus awards)
        """
        match_points: MatchPoints = defaultdict(list)
        bonus: Dict[str, int] = defaultdict(int)
        awards: List[BonusAward] = []

        for match_id in gameweek.match_ids:
            rows = self.stats.match_stats(match_id)
            if not rows:
                logger.warning(f'No stats for match {match_id} in {gameweek.gameweek_id}')

            contributions = []
            for stat in rows:
                if stat.player_id is None:
                    logger.warning(f'Skipping stat row without player_id in match {match_id}')
                    continue
                position = positions.get(stat.player_id) or Position.parse(stat.position)
                base_points, breakdown = score_match(stat, position, self.rules)
                match_points[stat.player_id].append(
                    PlayerPoints(
                        player_id=stat.player_id,
                        position=position,
                        base_points=base_points,
                        multiplier=1.0,
                        final_points=float(base_points),
                        breakdown=breakdown,
                        match_id=match_id,
                    )
                )
                if stat.minutes_played > 0:
                    contributions.append((stat.player_id, base_points))

            match_awards = rank_bonus(match_id, contributions, self.rules.bonus_awards, self.tie_break)
            for award in match_awards:
                bonus[award.player_id] += award.points
            awards.extend(match_awards)

        return dict(match_points), dict(bonus), awards

    def player_record(
        self,
        entry: RosterEntry,
        gameweek_id: str,
        match_points: MatchPoints,
        bonus: Dict[str, int],
        position: Position,
    ) -> PlayerGameweekRecord:
        """A player's pre-multiplier gameweek points, summed over their matches."""
        matches = match_points.get(entry.player_id, [])
        if matches:
            breakdown = merge_breakdowns([m.breakdown for m in matches])
        else:
            breakdown = score_match(None, position, self.rules)[1]
        return PlayerGameweekRecord(
            player_id=entry.player_id,
            gameweek_id=gameweek_id,
            base_points=sum(m.base_points for m in matches),
            bonus_points=bonus.get(entry.player_id, 0),
            matches=len(matches),
            breakdown=breakdown,
        )

    def score_entry(
        self,
        entry: RosterEntry,
        record: PlayerGameweekRecord,
        chip: Optional[Chip],
        position: Position,
    ) -> TeamPlayerScore:
        """Apply the team's multiplier to a player's base points; bonus is added unmultiplied."""
        multiplier = resolve_multiplier(entry, chip, self.rules)
        return TeamPlayerScore(
            player_id=entry.player_id,
            name=entry.name,
            position=position,
            is_captain=entry.is_captain,
            is_vice_captain=entry.is_vice_captain,
            is_substitute=entry.is_substitute,
            counted=True,
            base_points=record.base_points,
            multiplier=multiplier,
            bonus_points=record.bonus_points,
            final_points=record.base_points * multiplier + record.bonus_points,
            breakdown=record.breakdown,
        )

    def benched_entry(self, entry: RosterEntry, position: Position) -> TeamPlayerScore:
        return TeamPlayerScore(
            player_id=entry.player_id,
            name=entry.name,
            position=position,
            is_substitute=True,
            counted=False,
            breakdown=score_match(None, position, self.rules)[1],
        )

    @staticmethod
    def is_counted(entry: RosterEntry, chip: Optional[Chip]) -> bool:
        """Starters count; substitutes only when Bench Boost is played."""
        return not entry.is_substitute or chip == Chip.BENCH_BOOST

    @staticmethod
    def entry_position(entry: RosterEntry, positions: Dict[str, Position]) -> Position:
        return entry.position or positions.get(entry.player_id, Position.MIDFIELDER)

    def score_fantasy_team(
        self,
        team: FantasyTeam,
        gameweek: Gameweek,
        records: Dict[str, PlayerGameweekRecord],
        positions: Dict[str, Position],
    ) -> GameweekTeamResult:
        """
        Total a team's gameweek from its players' records and store the team row.

        Raises:
            StorageError: If the team row cannot be written
        """
        chip = team.chip_for(gameweek.gameweek_id)

        players = []
        for entry in team.entries:
            position = self.entry_position(entry, positions)
            if self.is_counted(entry, chip):
                players.append(self.score_entry(entry, records[entry.player_id], chip, position))
            else:
                players.append(self.benched_entry(entry, position))

        gameweek_points = sum(p.final_points for p in players)
        self.store.upsert_team_record(
            TeamGameweekRecord(
                team_id=team.team_id,
                gameweek_id=gameweek.gameweek_id,
                points=gameweek_points,
                chip=chip,
            )
        )

        return GameweekTeamResult(
            team_id=team.team_id,
            team_name=team.name,
            gameweek_id=gameweek.gameweek_id,
            gameweek_points=gameweek_points,
            total_points=team_total(self.store, team.team_id),
            chip=chip,
            players=players,
            points_history=points_history(self.store, team.team_id),
        )

    def _check_rosters(self, teams: List[FantasyTeam]) -> None:
        for team in teams:
            for problem in validate_roster(team, self.squad_size, self.max_substitutes):
                logger.warning(problem)

    def _roster_positions(self, teams: List[FantasyTeam]) -> Dict[str, Position]:
        positions: Dict[str, Position] = {}
        for team in teams:
            for entry in team.entries:
                if entry.position is not None:
                    positions.setdefault(entry.player_id, entry.position)
        return positions

    def _score_positions(
        self, gameweek: Gameweek, teams: List[FantasyTeam]
    ) -> Tuple[MatchPoints, Dict[str, int], List[BonusAward], Dict[str, Position]]:
        """Score the matches, then settle each player's position: roster, stat row, Midfielder."""
        positions = self._roster_positions(teams)
        match_points, bonus, awards = self.score_matches(gameweek, positions)
        for player_id, matches in match_points.items():
            positions.setdefault(player_id, matches[0].position)
        return match_points, bonus, awards, positions

    def _store_player_records(
        self,
        teams: List[FantasyTeam],
        gameweek: Gameweek,
        match_points: MatchPoints,
        bonus: Dict[str, int],
        positions: Dict[str, Position],
        report: Optional[GameweekReport] = None,
    ) -> Dict[str, PlayerGameweekRecord]:
        records: Dict[str, PlayerGameweekRecord] = {}
        for team in teams:
            chip = team.chip_for(gameweek.gameweek_id)
            for entry in team.entries:
                if not self.is_counted(entry, chip) or entry.player_id in records:
                    continue
                record = self.player_record(
                    entry,
                    gameweek.gameweek_id,
                    match_points,
                    bonus,
                    self.entry_position(entry, positions),
                )
                records[entry.player_id] = record
                try:
                    self.store.upsert_player_record(record)
                except StorageError as e:
                    if report is None:
                        raise
                    logger.error(f'Failed to store points for player {entry.player_id}: {e}')
                    report.failures.append(ScoringFailure(None, entry.player_id, str(e)))
        return records

    def calculate_gameweek_points(self, gameweek_id: str) -> GameweekReport:
        """
        Score all teams for a gameweek.

        Player records are stored for every rostered player who counts for some
        team, then each team's row. A storage failure for one player or team is
        logged and reported; the rest of the gameweek is still scored.

        Args:
            gameweek_id: Gameweek to score

        Returns:
            GameweekReport with per-team results, failures and bonus awards

        Raises:
            GameweekNotFoundError: If the gameweek does not exist
        """
        gameweek = self.get_gameweek(gameweek_id)
        teams = self.store.list_teams()
        logger.info(
            f'Scoring {gameweek.gameweek_id}: {len(gameweek.match_ids)} matches, {len(teams)} teams'
        )
        self._check_rosters(teams)

        match_points, bonus, awards, positions = self._score_positions(gameweek, teams)
        report = GameweekReport(gameweek_id=gameweek.gameweek_id, bonus_awards=awards)
        records = self._store_player_records(
            teams, gameweek, match_points, bonus, positions, report
        )

        for team in teams:
            try:
                result = self.score_fantasy_team(team, gameweek, records, positions)
            except StorageError as e:
                logger.error(f'Failed to store points for team {team.team_id}: {e}')
                report.failures.append(ScoringFailure(team.team_id, None, str(e)))
                continue

            report.results.append(result)
            chip_note = f' [{result.chip.value}]' if result.chip else ''
            logger.info(
                f'{team.name}: {result.gameweek_points:.1f} pts{chip_note} '
                f'(total {result.total_points:.1f})'
            )
            for player in result.players:
                logger.debug(
                    f'  {player.position.value} {player.name or player.player_id}: '
                    f'{player.final_points:.1f} pts{"" if player.counted else " [BENCH]"}'
                )

        if report.failures:
            logger.warning(f'{gameweek.gameweek_id}: {len(report.failures)} scoring failures')
        return report

    def score_team(self, team_id: str, gameweek_id: str) -> GameweekTeamResult:
        """
        Score a single team for a gameweek.

        Bonus still needs every stat row of the gameweek's matches, so all
        matches are scored; only this team's player records and row are stored.

        Raises:
            GameweekNotFoundError: If the gameweek does not exist
            TeamNotFoundError: If the team does not exist
            StorageError: If a record cannot be written
        """
        gameweek = self.get_gameweek(gameweek_id)
        team = self.store.get_team(str(team_id))
        if team is None:
            raise TeamNotFoundError(team_id)

        match_points, bonus, _, positions = self._score_positions(gameweek, [team])
        records = self._store_player_records([team], gameweek, match_points, bonus, positions)
        return self.score_fantasy_team(team, gameweek, records, positions)

    def finish_gameweek(self, gameweek_id: str) -> GameweekReport:
        """
        Score a gameweek and mark it finished.

        The gameweek stays open if any team or player failed to store, so the
        run can be repeated.
        """
        report = self.calculate_gameweek_points(gameweek_id)
        if not report.ok:
            logger.warning(f'{gameweek_id} left open after {len(report.failures)} failures')
            return report

        gameweek = self.get_gameweek(gameweek_id)
        gameweek.is_finished = True
        gameweek.is_active = False
        self.store.save_gameweek(gameweek)
        logger.info(f'{gameweek.gameweek_id} finished')
        return report


def calculate_gameweek_points(
    gameweek_id: str,
    stats: MatchStatsSource,
    store: ScoringStore,
    rules: Optional[ScoringRules] = None,
    tie_break: str = TIE_BREAK_INPUT_ORDER,
) -> GameweekReport:
    """Convenience wrapper: score a gameweek with a one-off GameweekScorer."""
    return GameweekScorer(stats, store, rules=rules, tie_break=tie_break).calculate_gameweek_points(
        gameweek_id
    )
