# main.py
import argparse
import json
import logging
import sys

from analytics import SessionAnalytics
from config_manager import load_engine_config, load_state_file, save_state_file
from database.config import DatabaseConfig
from database.database_manager import DatabaseManager
from engine import ActivityEngine
from models import FocusSample
from tracker import ActivityTracker


def load_samples(path: str):
    """Reads a JSON list of {app, title, url, timestamp} samples."""
    with open(path, 'r', encoding='utf-8') as f:
        raw = json.load(f)
    samples = []
    for item in raw:
        try:
            samples.append(FocusSample.from_dict(item))
        except (TypeError, ValueError) as e:
            logging.warning(f"Skipping unreadable sample {item!r}: {e}")
    return samples


def display_activities(tracker: ActivityTracker):
    """Print the retained activities and a productivity summary."""
    activities = tracker.engine.activities()
    print(f"\nActivities: {len(activities)}")
    for record in activities:
        print(f"- {record.start:%Y-%m-%d %H:%M:%S} {record.app} - {record.title} "
              f"[{record.category.value}] {record.duration_ms / 1000:.1f}s")

    summary = SessionAnalytics(activities).get_productivity_summary()
    print(f"\nTotal time: {summary['total_time']:.1f}s")
    for category, seconds in summary['times'].items():
        print(f"- {category.value}: {seconds:.1f}s ({summary['percentages'][category]:.1f}%)")


def replay(args) -> int:
    config = load_engine_config(args.config)
    engine = ActivityEngine(config)

    db_manager = None
    if args.db or args.env:
        url = args.db or DatabaseConfig.get_database_url(args.env)
        db_manager = DatabaseManager(url)

    tracker = ActivityTracker(engine, db_manager=db_manager)
    tracker.load()
    if args.state:
        state = load_state_file(args.state)
        if state:
            engine.import_state(state)

    for sample in load_samples(args.samples):
        tracker.ingest(sample)
    tracker.stop()

    if args.state:
        save_state_file(args.state, engine.export_state())

    display_activities(tracker)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Focus session engine')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    subparsers = parser.add_subparsers(dest='command', required=True)

    replay_parser = subparsers.add_parser('replay', help='Feed recorded samples through the engine')
    replay_parser.add_argument('samples', help='JSON file with a list of samples')
    replay_parser.add_argument('--config', default='config', help='Configuration directory')
    replay_parser.add_argument('--db', help='Database URL to persist activities to')
    replay_parser.add_argument('--env', choices=['development', 'production', 'testing'],
                               help='Use the database configured for this environment')
    replay_parser.add_argument('--state', help='Learned-state JSON file to load and update')
    replay_parser.set_defaults(func=replay)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(levelname)s - %(message)s')
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
