import argparse
import logging
import sqlite3
import sys

import requests

from workout_progress.adapters import coach_api, local_db, strava
from workout_progress.config import ConfigError, Settings
from workout_progress.dashboard.progress_view import ProgressView
from workout_progress.dashboard.report import print_snapshot, print_types
from workout_progress.logger_config import setup_logger

logger = logging.getLogger(__name__)

RUN_SPORT_TYPES = ("Run", "TrailRun", "Trail Run")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Progression: comparaison de séances similaires")
    parser.add_argument(
        "--source",
        choices=["strava", "api", "db"],
        default="db",
        help="Origine de l'historique et des laps.",
    )
    parser.add_argument(
        "--type",
        dest="type_key",
        default=None,
        help="Type de séance (clé normalisée). Par défaut: le plus fréquent.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Nombre d'activités récentes à charger (strava/db).",
    )
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Chemin SQLite (source db).",
    )
    parser.add_argument(
        "--runs-only",
        action="store_true",
        help="Ne garder que les activités course à pied (strava/db).",
    )
    parser.add_argument(
        "--exclude-unknown-pace",
        action="store_true",
        default=None,
        help="Exclure les laps sans distance de la pace moyenne.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING...",
    )
    return parser.parse_args(argv)


def build_view(args, settings: Settings) -> ProgressView:
    sport_types = RUN_SPORT_TYPES if args.runs_only else None

    if args.source == "strava":
        settings.require_strava()
        history = strava.make_history_source(settings, per_page=args.limit, sport_types=sport_types)
        laps = strava.make_lap_source(settings)
    elif args.source == "api":
        settings.require_coach_api()
        history = coach_api.make_history_source(settings)
        laps = coach_api.make_lap_source(settings)
    else:
        db_path = args.db_path or settings.db_path
        history = local_db.make_history_source(db_path, limit=args.limit, sport_types=sport_types)
        laps = local_db.make_lap_source(db_path)

    exclude = settings.exclude_unknown_pace if args.exclude_unknown_pace is None else args.exclude_unknown_pace
    return ProgressView(
        history_source=history,
        lap_source=laps,
        exclude_unknown_pace=exclude,
        trend_limit=settings.trend_limit,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Erreur configuration: {e}")
        return 2

    level_name = (args.log_level or settings.log_level).upper()
    setup_logger(level=getattr(logging, level_name, logging.INFO))

    try:
        view = build_view(args, settings)
    except ConfigError as e:
        print(f"Erreur configuration: {e}")
        return 2

    try:
        view.refresh()
    except (RuntimeError, ValueError, requests.exceptions.RequestException, sqlite3.Error) as e:
        logger.error("Historique indisponible: %s", e)
        print(f"Erreur: historique indisponible ({e})")
        return 1

    print_types(view.workout_types())

    key = view.resolve_type(args.type_key) if args.type_key else view.default_type()
    snapshot = view.select(key)
    print_snapshot(snapshot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
