"""
Main importer for split times.
Orchestrates reading event YAML files, parsing their results files and
populating the database.
"""

import json
import yaml
import logging
from pathlib import Path
from glob import glob

from .club_matcher import get_club_matcher
from .database import get_database
from .errors import SplitsError
from .model import Event
from .reader import parse_event_data
from .time_utils import format_time

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Results formats this importer can read
FORMATS = {
    'si_html': parse_event_data,
}


def read_results_file(file_path) -> str:
    """Read a results file. Older exports are often Latin-1 rather than UTF-8."""
    path = Path(file_path)
    try:
        return path.read_text(encoding='utf-8')
    except UnicodeDecodeError:
        logger.debug(f"{path} is not UTF-8, reading as Latin-1")
        return path.read_text(encoding='latin-1')


def parse_file(file_path, results_format: str = 'si_html') -> Event:
    """
    Parse one results file into an Event.

    Raises:
        ValueError: if the format is unknown
        SplitsError: if the file cannot be parsed
    """
    if results_format not in FORMATS:
        raise ValueError(f"Unknown format: {results_format}. Available: {list(FORMATS.keys())}")
    return FORMATS[results_format](read_results_file(file_path))


def summarise_event(event: Event) -> list[str]:
    """Describe an event's courses and classes, one line each."""
    lines = []
    for course in event.courses:
        details = []
        if course.distance is not None:
            details.append(f"{course.distance} km")
        if course.climb is not None:
            details.append(f"{course.climb} m")
        details.append(f"{len(course.controls)} controls")
        lines.append(f"{course.name} ({', '.join(details)})")

        for age_class in course.classes:
            lines.append(f"  {age_class.name}: {len(age_class.competitors)} competitors")
            for competitor in age_class.competitors:
                flag = ' (n/c)' if competitor.is_non_competitive else ''
                lines.append(
                    f"    {competitor.order:>3} {competitor.name:<30} {competitor.club:<12} "
                    f"{format_time(competitor.total_time)}{flag}"
                )
    return lines


class Importer:
    """Main importer orchestrator."""

    def __init__(self, data_dir: str = None, db_path: str = None, clubs_config: str = None):
        if data_dir is None:
            data_dir = Path(__file__).parent.parent / 'data'
        self.data_dir = Path(data_dir)

        self.db = get_database(db_path)
        self.club_matcher = get_club_matcher(clubs_config)

    def import_directory(self, directory: str):
        """Import all event YAML files in a directory recursively."""
        dir_path = Path(directory)

        if not dir_path.exists():
            logger.error(f"Directory not found: {dir_path}")
            return

        yaml_files = glob(str(dir_path / '**' / '*.yaml'), recursive=True)
        yaml_files.extend(glob(str(dir_path / '**' / '*.yml'), recursive=True))

        logger.info(f"Found {len(yaml_files)} event configuration files in {dir_path}")

        for yaml_file in sorted(yaml_files):
            try:
                self.import_event(yaml_file)
            except (SplitsError, OSError, ValueError, yaml.YAMLError) as e:
                logger.error(f"Error processing {yaml_file}: {e}")

    def import_all(self):
        """Import all event YAML files in the data directory."""
        self.import_directory(self.data_dir / 'events')

    def import_event(self, yaml_path: str) -> int:
        """
        Import a single event from its YAML configuration.

        Returns:
            Number of competitors stored
        """
        logger.info(f"Processing event: {yaml_path}")

        with open(yaml_path, 'r') as f:
            config = yaml.safe_load(f)

        event_info = config.get('event', {})
        event_date = event_info.get('date')
        event_id = self.db.get_or_create_event(
            name=event_info.get('name', 'Unknown Event'),
            event_date=str(event_date) if event_date is not None else None,
            venue=event_info.get('venue'),
            location=event_info.get('location')
        )

        logger.info(f"Event ID: {event_id} - {event_info.get('name')}")

        name_mappings = config.get('name_mappings', {})

        # A bad file raises here, before the earlier import is cleared.
        events = []
        for source in config.get('sources', []):
            event = self._read_source(source)
            if event is not None:
                events.append(event)

        self.db.clear_event(event_id)

        saved = 0
        for event in events:
            saved += self.db.save_event(event_id, event, name_mappings, self.club_matcher)

        summary = self.db.get_event_summary(event_id)
        logger.info(
            f"    Saved {saved} competitors in {summary['classes']} classes, "
            f"{summary['home_club_competitors']} from {self.club_matcher.home_club}"
        )
        return saved

    def _read_source(self, source: dict):
        """Parse a single results file listed for an event, or return None if it is missing."""
        file_path = self.data_dir / source['file']

        if not file_path.exists():
            logger.warning(f"Source file not found: {file_path}")
            return None

        results_format = source.get('format', 'si_html')
        logger.info(f"Processing source: {file_path} as {results_format}")

        return parse_file(file_path, results_format)


def main(argv=None):
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description='Import orienteering split times')
    parser.add_argument('event', nargs='?', help='Path to specific event YAML file')
    parser.add_argument('--event-dir', help='Path to directory containing event YAML files (searches recursively)')
    parser.add_argument('--file', '-f', help='Parse a single results file and print what it holds')
    parser.add_argument('--json', action='store_true', help='With --file, print the parsed event as JSON')
    parser.add_argument('--data-dir', '-d', help='Path to data directory')
    parser.add_argument('--db', help='Path to database file')
    parser.add_argument('--clear-all', action='store_true', help='Clear entire database before importing')

    args = parser.parse_args(argv)

    if args.file:
        try:
            event = parse_file(args.file)
        except SplitsError as e:
            logger.error(f"Could not read {args.file}: {e}")
            return 1

        if args.json:
            print(json.dumps(event.to_dict(), indent=2))
        else:
            print('\n'.join(summarise_event(event)))
        return 0

    importer = Importer(data_dir=args.data_dir, db_path=args.db)

    if args.clear_all:
        logger.warning("Clearing entire database...")
        importer.db.clear_all()

    if args.event:
        importer.import_event(args.event)
    elif args.event_dir:
        importer.import_directory(args.event_dir)
    else:
        importer.import_all()

    logger.info("Import complete!")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
