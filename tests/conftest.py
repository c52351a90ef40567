"""Shared fixtures for reader tests.

Provides sample SI HTML documents in both the preformatted-text and the
table-based formats, and config files for the importer.
"""

from pathlib import Path

import pytest

from html_builders import PRE_FORMAT_HTML, two_course_document


@pytest.fixture
def pre_format_html() -> str:
    return PRE_FORMAT_HTML


@pytest.fixture
def table_format_html() -> str:
    return two_course_document()


@pytest.fixture
def clubs_config(tmp_path: Path) -> Path:
    """A clubs config with a home club and a similarly named second club."""
    config = tmp_path / 'clubs.yaml'
    config.write_text(
        "home_club: South Yorkshire Orienteers\n"
        "match_threshold: 85\n"
        "clubs:\n"
        "  - name: South Yorkshire Orienteers\n"
        "    aliases: [SYO, South Yorks OC]\n"
        "  - name: South Yorkshire Juniors\n"
        "    aliases: [SYO Juniors]\n"
    )
    return config


@pytest.fixture(autouse=True)
def reset_singletons():
    """Each test gets fresh database and club matcher singletons."""
    from splitsreader import club_matcher, database

    club_matcher._matcher = None
    database._db = None
    yield
    club_matcher._matcher = None
    database._db = None
