"""
Tournament creation: pick the generator for a format mode and run it.

At creation time only the team list and format are known, so playoff stages
that depend on league or Swiss standings are emitted as a bracket of
``seed-N`` placeholders. ``seed_playoffs`` builds the real bracket once the
final standings exist, with the same match ids and round numbers.
"""
import logging
from typing import Dict, List, Optional, Sequence

from .custom_playoff import build_custom_playoff
from .elimination import build_elimination_bracket, build_seed_placeholder_bracket
from .exceptions import InvalidInput
from .models import (
    CUSTOM_PLAYOFF,
    LEAGUE,
    LEAGUE_PLAYOFF,
    SWISS_ELIMINATION,
    Format,
    Match,
    PlayoffBracket,
)
from .round_robin import generate_round_robin_schedule, rounds_per_cycle, validate_team_ids
from .swiss import SwissRound, clamp_qualifiers, generate_swiss_round

logger = logging.getLogger(__name__)


class ScheduleResult:
    def __init__(self, fmt: Format, league_matches, bracket: Optional[PlayoffBracket] = None,
                 swiss_round: Optional[SwissRound] = None):
        self.format = fmt
        self.league_matches = list(league_matches)
        self.bracket = bracket
        self.swiss_round = swiss_round

    @property
    def playoff_matches(self) -> List[Match]:
        return self.bracket.matches if self.bracket is not None else []

    @property
    def matches(self) -> List[Match]:
        return self.league_matches + self.playoff_matches

    def to_dict(self) -> Dict:
        return {
            'format': self.format.to_dict(),
            'matches': [m.to_dict() for m in self.matches],
            'bracket': self.bracket.to_dict() if self.bracket is not None else None,
            'swissRound': self.swiss_round.to_dict() if self.swiss_round is not None else None,
        }

    def __repr__(self):
        return (f"ScheduleResult(mode={self.format.mode}, league={len(self.league_matches)}, "
                f"playoff={len(self.playoff_matches)})")


def _qualifiers(fmt: Format, team_count: int) -> int:
    if fmt.playoff_qualifiers is None:
        return team_count
    if fmt.mode == SWISS_ELIMINATION:
        return clamp_qualifiers(fmt.playoff_qualifiers, team_count)
    return fmt.playoff_qualifiers


def playoff_round_offset(fmt: Format, team_count: int) -> int:
    """Round number of the first playoff match, counting the stage before it."""
    if fmt.mode == LEAGUE_PLAYOFF:
        return rounds_per_cycle(team_count) * fmt.rounds
    if fmt.mode == SWISS_ELIMINATION:
        return fmt.rounds
    return 0


def generate_schedule(team_ids: Sequence[str], fmt: Format) -> ScheduleResult:
    """
    Generate every match a new tournament starts with.

    league             round robin, ``fmt.rounds`` repetitions
    league_playoff     round robin plus a placeholder bracket of the qualifiers
    swiss_elimination  Swiss round 0 plus a placeholder bracket of min(Q, N)
    custom_playoff     the custom playoff bracket, seeded from ``team_ids``
    """
    validate_team_ids(team_ids, what='tournament')
    fmt.validate(len(team_ids))
    team_count = len(team_ids)

    if fmt.mode == LEAGUE:
        result = ScheduleResult(fmt, generate_round_robin_schedule(team_ids, fmt.rounds))
    elif fmt.mode == LEAGUE_PLAYOFF:
        league = generate_round_robin_schedule(team_ids, fmt.rounds)
        bracket = build_seed_placeholder_bracket(
            _qualifiers(fmt, team_count), playoff_round_offset(fmt, team_count))
        result = ScheduleResult(fmt, league, bracket)
    elif fmt.mode == SWISS_ELIMINATION:
        first_round = generate_swiss_round(team_ids, 0, total_rounds=fmt.rounds)
        bracket = build_seed_placeholder_bracket(
            _qualifiers(fmt, team_count), playoff_round_offset(fmt, team_count))
        result = ScheduleResult(fmt, first_round.matches, bracket, swiss_round=first_round)
    elif fmt.mode == CUSTOM_PLAYOFF:
        result = ScheduleResult(fmt, [], build_custom_playoff(team_ids, fmt.custom_config))
    else:
        raise InvalidInput(f"Unknown format mode '{fmt.mode}'")

    logger.info("Generated %s schedule for %d teams: %d matches",
                fmt.mode, team_count, len(result.matches))
    return result


def seed_playoffs(fmt: Format, standings_order: Sequence[str]) -> PlayoffBracket:
    """
    Build the playoff bracket from the final order of every team.

    ``standings_order`` lists all teams, best first, as computed by the
    standings workflow (or ``swiss.final_standings``). The qualifier count and
    round numbering match the placeholder bracket made by ``generate_schedule``.
    """
    validate_team_ids(standings_order, what='playoff seeding')
    fmt.validate(len(standings_order))
    team_count = len(standings_order)

    if fmt.mode in (LEAGUE_PLAYOFF, SWISS_ELIMINATION):
        qualifiers = standings_order[:_qualifiers(fmt, team_count)]
        return build_elimination_bracket(qualifiers, playoff_round_offset(fmt, team_count))
    if fmt.mode == CUSTOM_PLAYOFF:
        return build_custom_playoff(standings_order, fmt.custom_config)
    raise InvalidInput(f"Format mode '{fmt.mode}' has no playoffs to seed")
