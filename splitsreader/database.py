"""
Database utilities for storing imported split times.
"""

import logging
import sqlite3
from pathlib import Path
from contextlib import contextmanager
from typing import Optional

from .model import Event

logger = logging.getLogger(__name__)


class Database:
    """SQLite database wrapper for split times."""

    def __init__(self, db_path: str = None):
        if db_path is None:
            db_path = Path(__file__).parent.parent / 'data' / 'splits.db'
        self.db_path = Path(db_path)
        self._ensure_schema()

    def _ensure_schema(self):
        """Create database schema if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='events'")
            if cursor.fetchone():
                return

        schema_path = Path(__file__).parent.parent / 'database' / 'schema.sql'

        if not schema_path.exists():
            # Tables may have been created by hand
            logger.warning(f"Schema file not found: {schema_path}")
            return

        with open(schema_path, 'r') as f:
            schema_sql = f.read()

        with self.get_connection() as conn:
            conn.executescript(schema_sql)

    @contextmanager
    def get_connection(self):
        """Get a database connection as a context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_or_create_event(
        self,
        name: str,
        event_date: str = None,
        venue: str = None,
        location: str = None
    ) -> int:
        """Get existing event or create new one. Returns event ID."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                SELECT id FROM events WHERE name = ? AND event_date IS ?
            """, (name, event_date))

            row = cursor.fetchone()
            if row:
                cursor.execute("""
                    UPDATE events SET venue = COALESCE(?, venue), location = COALESCE(?, location)
                    WHERE id = ?
                """, (venue, location, row['id']))
                return row['id']

            cursor.execute("""
                INSERT INTO events (name, event_date, venue, location)
                VALUES (?, ?, ?, ?)
            """, (name, event_date, venue, location))

            return cursor.lastrowid

    def save_event(
        self,
        event_id: int,
        event: Event,
        name_mappings: dict = None,
        club_matcher=None
    ) -> int:
        """
        Store a parsed event's courses and competitors under an event row.

        The courses are added to anything already stored for the event, so an
        event read from several results files can be saved one file at a
        time. Use clear_event first to replace an earlier import.

        Args:
            event_id: ID of the event row to store under
            event: The parsed event
            name_mappings: Corrections from names in the file to stored names
            club_matcher: Optional ClubMatcher used to store canonical club
                names and flag home-club competitors

        Returns:
            Number of competitors stored
        """
        name_mappings = name_mappings or {}
        saved = 0

        with self.get_connection() as conn:
            cursor = conn.cursor()

            for course in event.courses:
                cursor.execute("""
                    INSERT INTO courses (event_id, name, distance_km, climb_m, controls)
                    VALUES (?, ?, ?, ?, ?)
                """, (event_id, course.name, course.distance, course.climb, ' '.join(course.controls)))
                course_id = cursor.lastrowid

                for age_class in course.classes:
                    cursor.execute("""
                        INSERT INTO age_classes (course_id, name, num_controls)
                        VALUES (?, ?, ?)
                    """, (course_id, age_class.name, age_class.num_controls))
                    class_id = cursor.lastrowid

                    for competitor in age_class.competitors:
                        name = name_mappings.get(competitor.name, competitor.name)
                        if name != competitor.name:
                            logger.info(f"    Applied name mapping: {competitor.name} -> {name}")

                        club = competitor.club
                        home_club = False
                        if club_matcher:
                            club = club_matcher.normalise(competitor.club)
                            home_club = club_matcher.is_home_club(competitor.club)

                        cursor.execute("""
                            INSERT INTO competitors
                            (age_class_id, position_in_class, name, club, raw_club,
                             total_time, non_competitive, home_club)
                            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """, (
                            class_id, competitor.order, name, club, competitor.club,
                            competitor.total_time, competitor.is_non_competitive, home_club
                        ))
                        competitor_id = cursor.lastrowid

                        # Skip the zero start time; the last entry is the finish.
                        control_codes = course.controls + [None]
                        cursor.executemany("""
                            INSERT INTO split_times
                            (competitor_id, control_index, control_code, cum_time, split_time)
                            VALUES (?, ?, ?, ?, ?)
                        """, [
                            (competitor_id, index + 1, code, cum_time, split_time)
                            for index, (code, cum_time, split_time) in enumerate(
                                zip(control_codes, competitor.cum_times[1:], competitor.split_times)
                            )
                        ])
                        saved += 1

        return saved

    def get_event_summary(self, event_id: int) -> Optional[dict]:
        """Return counts of what is stored for an event, or None if there is no such event."""
        with self.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT * FROM events WHERE id = ?", (event_id,))
            event_row = cursor.fetchone()
            if not event_row:
                return None

            cursor.execute("""
                SELECT
                    COUNT(DISTINCT c.id) AS courses,
                    COUNT(DISTINCT ac.id) AS classes,
                    COUNT(comp.id) AS competitors,
                    COALESCE(SUM(comp.home_club), 0) AS home_club_competitors
                FROM courses c
                LEFT JOIN age_classes ac ON ac.course_id = c.id
                LEFT JOIN competitors comp ON comp.age_class_id = ac.id
                WHERE c.event_id = ?
            """, (event_id,))
            counts = cursor.fetchone()

            return {
                'name': event_row['name'],
                'event_date': event_row['event_date'],
                'courses': counts['courses'],
                'classes': counts['classes'],
                'competitors': counts['competitors'],
                'home_club_competitors': counts['home_club_competitors'],
            }

    def get_competitor_results(self, name: str) -> list[dict]:
        """Return every stored run for a competitor, most recent event first."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT e.name AS event_name, e.event_date, c.name AS course_name,
                       ac.name AS class_name, comp.position_in_class, comp.club, comp.raw_club,
                       comp.total_time, comp.non_competitive
                FROM competitors comp
                JOIN age_classes ac ON comp.age_class_id = ac.id
                JOIN courses c ON ac.course_id = c.id
                JOIN events e ON c.event_id = e.id
                WHERE comp.name = ?
                ORDER BY e.event_date DESC, e.id DESC
            """, (name,))
            return [dict(row) for row in cursor.fetchall()]

    def get_club_counts(self, event_id: int) -> dict:
        """Return the number of competitors from each club at an event, by stored club name."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT comp.club, COUNT(*) AS competitors
                FROM competitors comp
                JOIN age_classes ac ON comp.age_class_id = ac.id
                JOIN courses c ON ac.course_id = c.id
                WHERE c.event_id = ?
                GROUP BY comp.club
                ORDER BY competitors DESC, comp.club
            """, (event_id,))
            return {row['club']: row['competitors'] for row in cursor.fetchall()}

    def clear_event(self, event_id: int):
        """Remove everything imported for an event (keeps the event itself)."""
        with self.get_connection() as conn:
            conn.execute("DELETE FROM courses WHERE event_id = ?", (event_id,))
        logger.info(f"Cleared imported results for event {event_id}")

    def clear_all(self):
        """Clear entire database (keeps schema)."""
        with self.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM split_times")
            cursor.execute("DELETE FROM competitors")
            cursor.execute("DELETE FROM age_classes")
            cursor.execute("DELETE FROM courses")
            cursor.execute("DELETE FROM events")
        logger.info("Cleared entire database")


# Singleton instance
_db = None


def get_database(db_path: str = None) -> Database:
    """Get or create the database singleton."""
    global _db
    if _db is None:
        _db = Database(db_path)
    return _db
