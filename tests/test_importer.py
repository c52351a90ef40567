"""Tests for importing results files listed in event YAML files."""

import json

import pytest

from splitsreader import WrongFormatError, parse_event_data
from splitsreader.database import get_database
from splitsreader.importer import Importer, main, parse_file, read_results_file, summarise_event


EVENT_YAML = """event:
  name: Example Night Event
  date: 2014-03-12
  venue: Example Woods
sources:
  - file: results/{file_name}
    format: si_html
name_mappings:
  "John Smith": "Jonathan Smith"
"""


@pytest.fixture
def data_dir(tmp_path, pre_format_html):
    """A data directory with one results file and one event file."""
    data = tmp_path / 'data'
    (data / 'results').mkdir(parents=True)
    (data / 'events').mkdir()
    (data / 'results' / 'night.html').write_text(pre_format_html)
    (data / 'events' / 'night.yaml').write_text(EVENT_YAML.format(file_name='night.html'))
    return data


@pytest.fixture
def importer(data_dir, tmp_path, clubs_config):
    return Importer(data_dir=data_dir, db_path=tmp_path / 'splits.db', clubs_config=clubs_config)


def stored_event_summary(importer, name="Example Night Event", event_date="2014-03-12"):
    event_id = importer.db.get_or_create_event(name, event_date)
    return importer.db.get_event_summary(event_id)


class TestReadingFiles:
    """Tests for reading single results files."""

    def test_parse_file(self, tmp_path, table_format_html):
        path = tmp_path / 'results.html'
        path.write_text(table_format_html)

        event = parse_file(path)

        assert event.competitor_count() == 5

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown format"):
            parse_file(tmp_path / 'results.csv', 'csv')

    def test_not_si_html(self, tmp_path):
        path = tmp_path / 'results.csv'
        path.write_text("Name,Club,Time\n")
        with pytest.raises(WrongFormatError):
            parse_file(path)

    def test_latin_1_file(self, tmp_path):
        path = tmp_path / 'results.html'
        path.write_bytes('Ren\xe9 Dupont'.encode('latin-1'))
        assert read_results_file(path) == 'Ren\xe9 Dupont'

    def test_summary(self, pre_format_html):
        lines = summarise_event(parse_event_data(pre_format_html))

        assert lines[0] == "Course 1 (2.7 km, 35 m, 3 controls)"
        assert lines[1] == "  M21: 2 competitors"
        assert "Fred Brown" in lines[2]
        assert lines[2].endswith("07:15")
        assert "Course 2 (1.9 km, 20 m, 2 controls)" in lines


class TestImporter:
    """Tests for Importer."""

    def test_import_event(self, importer, data_dir):
        saved = importer.import_event(data_dir / 'events' / 'night.yaml')

        assert saved == 3
        summary = stored_event_summary(importer)
        assert summary['courses'] == 2
        assert summary['classes'] == 2
        assert summary['competitors'] == 3
        assert summary['home_club_competitors'] == 2

    def test_name_mappings(self, importer, data_dir):
        importer.import_event(data_dir / 'events' / 'night.yaml')

        assert importer.db.get_competitor_results("John Smith") == []
        results = importer.db.get_competitor_results("Jonathan Smith")
        assert len(results) == 1
        assert results[0]['total_time'] == 510

    def test_reimport_replaces(self, importer, data_dir):
        importer.import_event(data_dir / 'events' / 'night.yaml')
        importer.import_event(data_dir / 'events' / 'night.yaml')

        assert stored_event_summary(importer)['competitors'] == 3

    def test_event_with_several_sources(self, importer, data_dir, table_format_html):
        (data_dir / 'results' / 'day.html').write_text(table_format_html)
        path = data_dir / 'events' / 'weekend.yaml'
        path.write_text(
            "event:\n  name: Example Weekend\n  date: 2014-03-15\n"
            "sources:\n  - file: results/night.html\n  - file: results/day.html\n"
        )

        saved = importer.import_event(path)

        assert saved == 8
        summary = stored_event_summary(importer, "Example Weekend", "2014-03-15")
        assert summary['courses'] == 4
        assert summary['competitors'] == 8
        assert summary['home_club_competitors'] == 4

    def test_bad_source_keeps_earlier_import(self, importer, data_dir):
        importer.import_event(data_dir / 'events' / 'night.yaml')
        (data_dir / 'results' / 'night.html').write_text("Name,Club,Time\n")

        with pytest.raises(WrongFormatError):
            importer.import_event(data_dir / 'events' / 'night.yaml')

        assert stored_event_summary(importer)['competitors'] == 3

    def test_club_names_stored_canonically(self, importer, data_dir):
        importer.import_event(data_dir / 'events' / 'night.yaml')

        results = importer.db.get_competitor_results("Fred Brown")
        assert results[0]['club'] == "South Yorkshire Orienteers"
        assert results[0]['raw_club'] == "SYO"

    def test_missing_source_file(self, importer, data_dir):
        path = data_dir / 'events' / 'missing.yaml'
        path.write_text(EVENT_YAML.format(file_name='missing.html'))

        assert importer.import_event(path) == 0

    def test_import_all_skips_bad_files(self, importer, data_dir):
        (data_dir / 'results' / 'bad.csv').write_text("Name,Club,Time\n")
        (data_dir / 'events' / 'bad.yaml').write_text(
            "event:\n  name: Bad Event\nsources:\n  - file: results/bad.csv\n"
        )

        importer.import_all()

        assert stored_event_summary(importer)['competitors'] == 3
        assert stored_event_summary(importer, "Bad Event", None)['competitors'] == 0

    def test_missing_directory(self, importer, tmp_path):
        importer.import_directory(tmp_path / 'nowhere')


class TestMain:
    """Tests for the command line entry point."""

    def test_print_summary(self, data_dir, capsys):
        assert main(['--file', str(data_dir / 'results' / 'night.html')]) == 0

        out = capsys.readouterr().out
        assert "Course 1 (2.7 km, 35 m, 3 controls)" in out
        assert "John Smith" in out

    def test_print_json(self, data_dir, capsys):
        assert main(['--file', str(data_dir / 'results' / 'night.html'), '--json']) == 0

        data = json.loads(capsys.readouterr().out)
        assert [course['name'] for course in data['courses']] == ["Course 1", "Course 2"]
        fred = data['classes'][0]['competitors'][0]
        assert fred['name'] == "Fred Brown"
        assert fred['total_time'] == "07:15"
        assert fred['cum_times'] == [0, 107, 242, 362, 435]

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / 'results.csv'
        path.write_text("Name,Club,Time\n")
        assert main(['--file', str(path)]) == 1

    def test_import_event(self, data_dir, tmp_path):
        db_path = tmp_path / 'cli.db'

        assert main([str(data_dir / 'events' / 'night.yaml'), '--data-dir', str(data_dir), '--db', str(db_path)]) == 0

        db = get_database()
        event_id = db.get_or_create_event("Example Night Event", "2014-03-12")
        assert db.get_event_summary(event_id)['competitors'] == 3
