#!/usr/bin/env python3
"""
Fantasy Points Gameweek Scorer CLI

Scores every fantasy team for one gameweek.
Rosters come from data/rosters.json, gameweeks from data/gameweeks.json,
match statistics from one or more CSV files (one row per player per match).

Usage:
    python score_gameweek.py --gameweek gw7 --stats data/stats/gw7.csv
    python score_gameweek.py --gameweek gw7 --stats data/stats/gw7.csv --finish
    python score_gameweek.py -g dgw12 -s data/stats/m101.csv data/stats/m102.csv
"""

import argparse
import logging
import sys
from pathlib import Path

from fantasy_points import (
    GameweekNotFoundError,
    GameweekScorer,
    JsonFileStore,
    MatchStatsSource,
    get_gameweek_leaderboard,
    load_gameweeks,
    load_rosters,
    save_gameweek_results,
    save_gameweeks,
)
from fantasy_points.config import get_config
from fantasy_points.logging_config import setup_logging
from fantasy_points.validators import validate_report


def main(argv=None):
    parser = argparse.ArgumentParser(description="Fantasy football gameweek scorer")
    parser.add_argument(
        "--gameweek", "-g",
        required=True,
        help="Gameweek id to score (as in gameweeks.json)",
    )
    parser.add_argument(
        "--stats", "-s",
        required=True,
        nargs="+",
        help="CSV file(s) of player match statistics",
    )
    parser.add_argument(
        "--data-dir", "-d",
        default="data",
        help="Path to data directory",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output path for scored gameweek JSON (defaults to {data-dir}/scores/{gameweek}.json)",
    )
    parser.add_argument(
        "--finish",
        action="store_true",
        help="Mark the gameweek finished after a clean run",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors",
    )

    args = parser.parse_args(argv)

    setup_logging(
        log_dir=Path(args.data_dir) / "logs",
        level=logging.WARNING if args.quiet else logging.INFO,
        gameweek_id=args.gameweek,
    )

    data_dir = Path(args.data_dir)
    rosters_path = data_dir / "rosters.json"
    gameweeks_path = data_dir / "gameweeks.json"
    points_path = data_dir / "points.json"
    output_path = Path(args.output) if args.output else data_dir / "scores" / f"{args.gameweek}.json"

    for path in (rosters_path, gameweeks_path, *map(Path, args.stats)):
        if not path.exists():
            print(f"❌ File not found: {path}")
            return 1

    config = get_config()
    gameweeks = load_gameweeks(gameweeks_path)
    store = JsonFileStore(points_path, teams=load_rosters(rosters_path), gameweeks=gameweeks)

    stats = MatchStatsSource()
    for stats_path in args.stats:
        stats = stats.extend(MatchStatsSource.from_csv(stats_path))

    gameweek = store.get_gameweek(args.gameweek)
    if gameweek:
        available = set(stats.match_ids())
        for match_id in gameweek.match_ids:
            if match_id not in available:
                print(f"⚠️  No stats for match {match_id}")

    scorer = GameweekScorer(
        stats,
        store,
        rules=config.rules,
        tie_break=config.bonus_tie_break,
        squad_size=config.squad_size,
        max_substitutes=config.max_substitutes,
    )

    print(f"Scoring gameweek {args.gameweek}...")
    try:
        if args.finish:
            report = scorer.finish_gameweek(args.gameweek)
            save_gameweeks(gameweeks_path, store.list_gameweeks())
        else:
            report = scorer.calculate_gameweek_points(args.gameweek)
    except GameweekNotFoundError as e:
        print(f"❌ {e}")
        return 1

    errors, warnings = validate_report(report.results)
    for warning in warnings:
        print(f"⚠️  {warning}")
    for error in errors:
        print(f"❌ {error}")

    print("\n" + "=" * 60)
    print("LEADERBOARD")
    print("=" * 60)
    for row in get_gameweek_leaderboard(store, args.gameweek):
        print(
            f"  {row['rank']}. {row['team_name']}: {row['total_points']:.1f} pts "
            f"({row['gameweek_points']:.1f} this gameweek)"
        )

    save_gameweek_results(output_path, report)

    if report.failures:
        print(f"\n❌ {len(report.failures)} records failed to save:")
        for failure in report.failures:
            print(f"  - {failure.team_id or failure.player_id}: {failure.reason}")
        return 1

    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
