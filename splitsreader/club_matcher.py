"""
Club name normalisation.

Results files spell the same club in many ways ("SYO", "South Yorks OC",
"South Yorkshire Orienteers"). Names are resolved against the clubs listed
in the config so that they are stored under one canonical name.
"""

import logging
import yaml
from pathlib import Path
from rapidfuzz import fuzz, process
from typing import Optional

logger = logging.getLogger(__name__)

# Abbreviations this short are too alike ("SYO", "WYO") to match fuzzily.
MIN_FUZZY_LENGTH = 5


def _clean(club_name: str) -> str:
    return ' '.join(club_name.lower().split())


class ClubMatcher:
    """Resolves club names to the canonical names in the clubs config."""

    def __init__(self, config_path: str = None):
        if config_path is None:
            config_path = Path(__file__).parent.parent / 'config' / 'clubs.yaml'

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        self.home_club = config.get('home_club')
        self.threshold = config.get('match_threshold', 85)

        # alias -> canonical name
        self.alias_map = {}
        for club in config.get('clubs', []):
            canonical = club['name']
            self.alias_map[_clean(canonical)] = canonical
            for alias in club.get('aliases', []):
                self.alias_map[_clean(alias)] = canonical

        self._aliases = list(self.alias_map.keys())

    def match(self, club_name: str) -> Optional[str]:
        """
        Match a club name to its canonical form.

        Returns:
            Canonical club name, or None if the club is not in the config
        """
        if not club_name:
            return None

        club_lower = _clean(club_name)
        if club_lower in self.alias_map:
            return self.alias_map[club_lower]

        if len(club_lower) < MIN_FUZZY_LENGTH:
            return None

        result = process.extractOne(
            club_lower,
            self._aliases,
            scorer=fuzz.ratio,
            score_cutoff=self.threshold
        )
        if result is None:
            return None

        matched_alias, score, _ = result
        logger.debug(f"Matched club '{club_name}' to '{matched_alias}' ({score:.0f})")
        return self.alias_map[matched_alias]

    def normalise(self, club_name: str) -> str:
        """Return the canonical name for a club, or the name as given if it is unknown."""
        canonical = self.match(club_name)
        if canonical is not None:
            return canonical
        return ' '.join(club_name.split()) if club_name else ''

    def is_home_club(self, club_name: str) -> bool:
        return self.home_club is not None and self.match(club_name) == self.home_club


# Singleton instance
_matcher = None


def get_club_matcher(config_path: str = None) -> ClubMatcher:
    """Get or create the club matcher singleton."""
    global _matcher
    if _matcher is None:
        _matcher = ClubMatcher(config_path)
    return _matcher
