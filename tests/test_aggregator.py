"""Tests for gameweek aggregation."""

from unittest.mock import patch

import pytest

from fantasy_points.aggregator import GameweekScorer, calculate_gameweek_points, merge_breakdowns
from fantasy_points.errors import GameweekNotFoundError, StorageError, TeamNotFoundError
from fantasy_points.models import Chip, FantasyTeam, Gameweek, Position, RosterEntry
from fantasy_points.stats_source import MatchStatsSource
from fantasy_points.store import InMemoryStore, team_total


def results_by_team(report):
    return {r.team_id: r for r in report.results}


def players_by_id(result):
    return {p.player_id: p for p in result.players}


class TestGameweekScoring:
    """Tests for scoring a full gameweek."""

    def test_team_totals(self, stats, store):
        """Test captain, vice-captain and bonus combine into the team total."""
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        assert report.ok

        results = results_by_team(report)
        # gk 10+2, fwd 17x2+3, def -1, mid 9x1.5+1, sub benched
        assert results['A'].gameweek_points == 62.5
        # fwd 17+3, sub 8x2, mid 9+1 via Bench Boost
        assert results['B'].gameweek_points == 46.0

    def test_player_breakdown(self, stats, store):
        """Test each roster entry carries multiplier, bonus and breakdown."""
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        players = players_by_id(results_by_team(report)['A'])

        captain = players['p_fwd']
        assert captain.is_captain
        assert captain.base_points == 17
        assert captain.multiplier == 2.0
        assert captain.bonus_points == 3
        assert captain.final_points == 37.0
        assert captain.breakdown['goals'] == 8

    def test_substitute_scores_zero(self, stats, store):
        """Test a benched substitute contributes nothing but is still listed."""
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        sub = players_by_id(results_by_team(report)['A'])['p_sub']
        assert sub.is_substitute
        assert not sub.counted
        assert sub.final_points == 0
        assert sum(sub.breakdown.values()) == 0

    def test_bench_boost_adds_substitutes(self, stats, store):
        """Test Bench Boost adds the bench on top of the starters."""
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        result = results_by_team(report)['B']
        sub = players_by_id(result)['p_mid']
        assert result.chip == Chip.BENCH_BOOST
        assert sub.counted
        assert sub.multiplier == 1.0
        assert sub.final_points == 10.0

    def test_triple_captain(self, stats, store, team_a):
        """Test Triple Captain triples the captain's base points, not the bonus."""
        team_a.chips['gw1'] = Chip.TRIPLE_CAPTAIN
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        result = results_by_team(report)['A']
        assert players_by_id(result)['p_fwd'].final_points == 54.0
        assert result.gameweek_points == 79.5

    def test_bonus_awards_reported(self, stats, store):
        """Test bonus goes to the top three who played, rostered or not."""
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        assert [(a.player_id, a.points) for a in report.bonus_awards] == [
            ('p_fwd', 3),
            ('p_gk', 2),
            ('p_mid', 1),
        ]

    def test_player_records_are_pre_multiplier(self, stats, store):
        """Test stored player rows hold base + bonus without team multipliers."""
        GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        records = {r.player_id: r for r in store.gameweek_player_records('gw1')}

        assert records['p_fwd'].base_points == 17
        assert records['p_fwd'].bonus_points == 3
        assert records['p_fwd'].points == 20
        assert records['p_def'].points == -1
        # Bench Boost in team B makes p_mid count; p_other is on no roster
        assert 'p_mid' in records
        assert 'p_other' not in records

    def test_total_points_from_stored_rows(self, stats, store):
        """Test total_points and history come from the stored team rows."""
        report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')
        result = results_by_team(report)['A']
        assert result.total_points == 62.5
        assert result.points_history == [('gw1', 62.5)]

    def test_rerun_is_idempotent(self, stats, store):
        """Test scoring the same gameweek twice changes nothing."""
        scorer = GameweekScorer(stats, store)
        first = scorer.calculate_gameweek_points('gw1')
        player_rows = sorted(store.gameweek_player_records('gw1'), key=lambda r: r.player_id)
        team_rows = sorted(store.gameweek_team_records('gw1'), key=lambda r: r.team_id)

        second = scorer.calculate_gameweek_points('gw1')

        assert sorted(store.gameweek_player_records('gw1'), key=lambda r: r.player_id) == player_rows
        assert sorted(store.gameweek_team_records('gw1'), key=lambda r: r.team_id) == team_rows
        assert team_total(store, 'A') == 62.5
        assert [r.total_points for r in second.results] == [r.total_points for r in first.results]

    def test_stat_correction_replaces_rows(self, match_records, store):
        """Test re-scoring after a stat correction replaces the old points."""
        GameweekScorer(MatchStatsSource.from_records(match_records), store).calculate_gameweek_points('gw1')

        corrected = [dict(r) for r in match_records]
        corrected[2]['yellow_cards'] = 0
        GameweekScorer(MatchStatsSource.from_records(corrected), store).calculate_gameweek_points('gw1')

        assert team_total(store, 'A') == 63.5
        assert len(store.team_records('A')) == 1

    def test_totals_across_gameweeks(self, stats, store):
        """Test cumulative totals and history span gameweeks in order."""
        store.save_gameweek(Gameweek(gameweek_id='gw2', number=2, match_ids=['m1']))
        scorer = GameweekScorer(stats, store)
        scorer.calculate_gameweek_points('gw2')
        report = scorer.calculate_gameweek_points('gw1')

        result = results_by_team(report)['A']
        assert result.total_points == 125.0
        assert result.points_history == [('gw1', 62.5), ('gw2', 62.5)]

    def test_double_gameweek_sums_matches(self):
        """Test a player in two matches scores both."""
        stats = MatchStatsSource.from_records(
            [
                {'player_id': 'p1', 'match_id': 'm1', 'minutes_played': 90, 'goals': 1},
                {'player_id': 'p2', 'match_id': 'm1', 'minutes_played': 90, 'goals': 2},
                {'player_id': 'p1', 'match_id': 'm2', 'minutes_played': 45},
                {'player_id': 'p3', 'match_id': 'm2', 'minutes_played': 90},
            ]
        )
        team = FantasyTeam('T', 'Team', entries=[RosterEntry.from_flags('p1', position='FWD')])
        store = InMemoryStore(
            teams=[team], gameweeks=[Gameweek('dgw', 1, match_ids=['m1', 'm2'])]
        )

        report = GameweekScorer(stats, store).calculate_gameweek_points('dgw')

        record = store.gameweek_player_records('dgw')[0]
        # m1: 6 + 4, second behind p2 (+2); m2: 3, second behind p3 (+2)
        assert record.matches == 2
        assert record.base_points == 13
        assert record.bonus_points == 4
        assert record.breakdown['minutes'] == 9
        assert report.results[0].gameweek_points == 17.0

    def test_missing_stats_score_zero(self, store):
        """Test a match with no stats leaves every player on 0."""
        report = GameweekScorer(MatchStatsSource(), store).calculate_gameweek_points('gw1')
        assert report.ok
        assert all(r.gameweek_points == 0 for r in report.results)
        assert report.bonus_awards == []

    def test_unknown_gameweek(self, stats, store):
        """Test an unknown gameweek raises and writes nothing."""
        with pytest.raises(GameweekNotFoundError):
            GameweekScorer(stats, store).calculate_gameweek_points('gw99')
        assert store.gameweek_team_records('gw99') == []

    def test_module_level_entry_point(self, stats, store):
        """Test calculate_gameweek_points() wraps GameweekScorer."""
        report = calculate_gameweek_points('gw1', stats, store)
        assert len(report.results) == 2

    def test_roster_problems_logged(self, stats, store, team_a, caplog):
        """Test an over-limit bench is logged but still scored."""
        scorer = GameweekScorer(stats, store, max_substitutes=0)
        with caplog.at_level('WARNING', logger='fantasy_points'):
            report = scorer.calculate_gameweek_points('gw1')
        assert 'A has 1 substitutes (max 0)' in caplog.text
        assert report.ok

    def test_substitute_sharing_starter_id_not_counted(self):
        """Test a substitute entry scores nothing even when a starter has the same player."""
        stats = MatchStatsSource.from_records(
            [{'player_id': 'p1', 'match_id': 'm1', 'position': 'FWD', 'minutes_played': 90}]
        )
        team = FantasyTeam(
            'T',
            'Team',
            entries=[
                RosterEntry.from_flags('p1', position='FWD'),
                RosterEntry.from_flags('p1', position='FWD', is_substitute=True),
            ],
        )
        store = InMemoryStore(teams=[team], gameweeks=[Gameweek('gw1', 1, match_ids=['m1'])])

        (result,) = GameweekScorer(stats, store).calculate_gameweek_points('gw1').results

        # 90 minutes = 6, sole player in the match = +3 bonus
        assert [(p.is_substitute, p.counted, p.final_points) for p in result.players] == [
            (False, True, 9.0),
            (True, False, 0.0),
        ]
        assert result.gameweek_points == 9.0

    def test_missing_roster_position_uses_stat_row(self):
        """Test a rostered player without a position is scored at the stat row's position."""
        stats = MatchStatsSource.from_records(
            [
                {'player_id': 'gk', 'match_id': 'm1', 'position': 'Goalkeeper',
                 'minutes_played': 90, 'clean_sheet': True, 'penalties_saved': 1},
            ]
        )
        team = FantasyTeam('T', 'Team', entries=[RosterEntry.from_flags('gk')])
        store = InMemoryStore(teams=[team], gameweeks=[Gameweek('gw1', 1, match_ids=['m1'])])

        (result,) = GameweekScorer(stats, store).calculate_gameweek_points('gw1').results

        keeper = result.players[0]
        assert keeper.position == Position.GOALKEEPER
        # 6 minutes + 4 clean sheet + 5 penalty saved
        assert keeper.base_points == 15
        assert keeper.breakdown['penalties_saved'] == 5
        assert store.gameweek_player_records('gw1')[0].base_points == 15

    def test_roster_position_beats_stat_row(self):
        """Test the roster position wins over the stat row's position."""
        stats = MatchStatsSource.from_records(
            [{'player_id': 'p1', 'match_id': 'm1', 'position': 'Goalkeeper',
              'minutes_played': 90, 'goals': 1}]
        )
        team = FantasyTeam('T', 'Team', entries=[RosterEntry.from_flags('p1', position='FWD')])
        store = InMemoryStore(teams=[team], gameweeks=[Gameweek('gw1', 1, match_ids=['m1'])])

        (result,) = GameweekScorer(stats, store).calculate_gameweek_points('gw1').results

        assert result.players[0].position == Position.FORWARD
        assert result.players[0].base_points == 10


class TestFailureIsolation:
    """Tests that one storage failure does not stop the gameweek."""

    def test_team_write_failure(self, stats, store):
        """Test a failing team row is reported and the other team still scores."""
        original = store.upsert_team_record

        def flaky(record):
            if record.team_id == 'A':
                raise StorageError('disk full', key=('A', 'gw1'))
            original(record)

        with patch.object(store, 'upsert_team_record', side_effect=flaky):
            report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')

        assert not report.ok
        assert len(report.failures) == 1
        assert report.failures[0].team_id == 'A'
        assert 'disk full' in report.failures[0].reason
        assert [r.team_id for r in report.results] == ['B']
        assert team_total(store, 'B') == 46.0

    def test_player_write_failure(self, stats, store):
        """Test a failing player row is reported while teams still total correctly."""
        original = store.upsert_player_record

        def flaky(record):
            if record.player_id == 'p_gk':
                raise StorageError('locked', key=('p_gk', 'gw1'))
            original(record)

        with patch.object(store, 'upsert_player_record', side_effect=flaky):
            report = GameweekScorer(stats, store).calculate_gameweek_points('gw1')

        assert [(f.team_id, f.player_id) for f in report.failures] == [(None, 'p_gk')]
        assert results_by_team(report)['A'].gameweek_points == 62.5


class TestSingleTeamAndFinish:
    """Tests for score_team() and finish_gameweek()."""

    def test_score_team(self, stats, store):
        """Test scoring one team stores only its rows."""
        result = GameweekScorer(stats, store).score_team('B', 'gw1')
        assert result.gameweek_points == 46.0
        assert [r.team_id for r in store.gameweek_team_records('gw1')] == ['B']

    def test_score_team_bonus_uses_whole_match(self, stats, store):
        """Test bonus for a single team is still ranked against the whole match."""
        result = GameweekScorer(stats, store).score_team('A', 'gw1')
        assert result.gameweek_points == 62.5

    def test_unknown_team(self, stats, store):
        """Test an unknown team raises TeamNotFoundError."""
        with pytest.raises(TeamNotFoundError):
            GameweekScorer(stats, store).score_team('Z', 'gw1')

    def test_finish_gameweek(self, stats, store):
        """Test finishing marks the gameweek finished and inactive."""
        report = GameweekScorer(stats, store).finish_gameweek('gw1')
        gameweek = store.get_gameweek('gw1')
        assert report.ok
        assert gameweek.is_finished
        assert not gameweek.is_active

    def test_finish_left_open_after_failure(self, stats, store):
        """Test a gameweek with storage failures stays open."""
        with patch.object(store, 'upsert_team_record', side_effect=StorageError('down')):
            report = GameweekScorer(stats, store).finish_gameweek('gw1')
        assert len(report.failures) == 2
        assert not store.get_gameweek('gw1').is_finished


class TestMergeBreakdowns:
    """Tests for summing breakdowns across matches."""

    def test_sums_and_orders(self):
        """Test categories are summed and kept in presentation order."""
        merged = merge_breakdowns(
            [{'goals': 4, 'minutes': 6}, {'minutes': 3, 'red_cards': -3}]
        )
        assert merged == {'minutes': 9, 'goals': 4, 'red_cards': -3}
        assert list(merged) == ['minutes', 'goals', 'red_cards']
