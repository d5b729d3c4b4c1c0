"""
League (round robin) schedule generation.
"""
import logging
import re
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from .exceptions import InvalidInput
from .models import Match
from .pairing import round_robin_round

logger = logging.getLogger(__name__)

# Ids that bracket matches use for teams not known yet
PLACEHOLDER_PATTERN = re.compile(r'^(?:(?:winner|loser)-of-.+|(?:seed|reseed)-\d+)$')


def validate_team_ids(team_ids: Sequence[str], minimum: int = 2, what: str = 'schedule'):
    """Raise InvalidInput for too few, duplicated or placeholder-shaped team ids."""
    if team_ids is None or len(team_ids) < minimum:
        count = 0 if team_ids is None else len(team_ids)
        raise InvalidInput(f"A {what} needs at least {minimum} teams, got {count}")
    reserved = sorted(str(t) for t in team_ids if PLACEHOLDER_PATTERN.match(str(t)))
    if reserved:
        raise InvalidInput(f"Team ids clash with bracket placeholders: {', '.join(reserved)}")
    seen = set()
    duplicates = []
    for team_id in team_ids:
        if team_id in seen:
            duplicates.append(str(team_id))
        seen.add(team_id)
    if duplicates:
        raise InvalidInput(f"Duplicate team ids: {', '.join(sorted(set(duplicates)))}")


def rounds_per_cycle(team_count: int) -> int:
    """Rounds needed for every pair to meet once (one bye per round when odd)."""
    return team_count - 1 if team_count % 2 == 0 else team_count


def generate_round_robin_schedule(team_ids: Sequence[str], repetitions: int = 1) -> List[Match]:
    """
    Generate a full league schedule.

    Each repetition is a complete cycle of the circle method. Odd-numbered
    repetitions replay the first cycle's fixtures with home and away swapped,
    so over two cycles every team hosts every opponent once. Rounds are
    numbered 0.. across all repetitions.
    """
    validate_team_ids(team_ids, what='round robin')
    if not isinstance(repetitions, int) or repetitions < 1:
        raise InvalidInput(f"Round robin repetitions must be an integer >= 1, got {repetitions!r}")

    cycle_length = rounds_per_cycle(len(team_ids))
    first_cycle = [round_robin_round(team_ids, r) for r in range(cycle_length)]

    matches = []
    for rep in range(repetitions):
        for r, pairings in enumerate(first_cycle):
            global_round = rep * cycle_length + r
            for home, away in pairings:
                if rep % 2 == 1:
                    home, away = away, home
                matches.append(Match(
                    id=f"{global_round}-{home}-{away}",
                    round=global_round,
                    home_team_id=home,
                    away_team_id=away,
                    is_playoff=False,
                ))

    logger.info("Round robin: %d teams, %d repetition(s), %d rounds, %d matches",
                len(team_ids), repetitions, cycle_length * repetitions, len(matches))
    return matches


def matches_by_round(matches: Sequence[Match]) -> Dict[int, List[Match]]:
    """Group matches by their round number, preserving order."""
    rounds = OrderedDict()
    for match in matches:
        rounds.setdefault(match.round, []).append(match)
    return rounds


def bye_team(team_ids: Sequence[str], round_matches: Sequence[Match]) -> Optional[str]:
    """The team sitting out a round, or None when everyone plays."""
    playing = set()
    for match in round_matches:
        playing.add(match.home_team_id)
        playing.add(match.away_team_id)
    idle = [team_id for team_id in team_ids if team_id not in playing]
    return idle[0] if len(idle) == 1 else None
