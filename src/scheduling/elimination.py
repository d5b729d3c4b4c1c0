"""
Single elimination bracket generation.
"""
import logging
import math
from typing import Dict, List, Sequence

from .exceptions import InvalidInput
from .models import (
    BracketMatch,
    BracketRound,
    ByeSlot,
    FeedLink,
    Match,
    PlaceholderSlot,
    PlayoffBracket,
    TeamSlot,
)
from .pairing import calculate_byes, next_power_of_two, standard_seed_order
from .round_robin import validate_team_ids

logger = logging.getLogger(__name__)

PLAYOFF_ID_PREFIX = 'playoff-'


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def _advancing_slot(bracket_match: BracketMatch):
    """Slot that moves on from a match: the seeded side of a bye, else its winner."""
    if bracket_match.is_bye:
        return bracket_match.away if isinstance(bracket_match.home, ByeSlot) else bracket_match.home
    return PlaceholderSlot('winner', bracket_match.code)


def make_playoff_match(bracket_match: BracketMatch, round_number: int, playoff_round: int) -> Match:
    return Match(
        id=f"{PLAYOFF_ID_PREFIX}{bracket_match.code}",
        round=round_number,
        home_team_id=bracket_match.home.token,
        away_team_id=bracket_match.away.token,
        is_playoff=True,
        playoff_round=playoff_round,
    )


def _build_bracket(entries: List, seeds: List[str], round_offset: int = 0) -> PlayoffBracket:
    """
    Build every round of a bracket from slots listed in seed order.

    Round 0 follows the standard seeding order; missing seeds become byes,
    which always land opposite the strongest seeds. Later rounds take the
    advancing slot of two consecutive earlier matches.
    """
    num_entries = len(entries)
    if num_entries == 1:
        return PlayoffBracket([], seeds)

    bracket_size = next_power_of_two(num_entries)
    total_rounds = int(math.log2(bracket_size))
    order = standard_seed_order(bracket_size)

    rounds = []
    teams_in_round = bracket_size
    for round_index in range(total_rounds):
        round_code = f"R{round_index + 1}"
        bracket_round = BracketRound(round_index, get_round_name(teams_in_round))

        if round_index == 0:
            for i in range(0, len(order), 2):
                seed1, seed2 = order[i], order[i + 1]
                home = entries[seed1 - 1] if seed1 <= num_entries else ByeSlot()
                away = entries[seed2 - 1] if seed2 <= num_entries else ByeSlot()
                bracket_round.matches.append(BracketMatch(
                    code=f"{round_code}-M{i // 2 + 1}",
                    round_index=round_index,
                    home=home,
                    away=away,
                ))
        else:
            previous = rounds[-1].matches
            for i in range(len(previous) // 2):
                code = f"{round_code}-M{i + 1}"
                upper, lower = previous[2 * i], previous[2 * i + 1]
                upper.winner_to = FeedLink(code, 'home')
                lower.winner_to = FeedLink(code, 'away')
                bracket_round.matches.append(BracketMatch(
                    code=code,
                    round_index=round_index,
                    home=_advancing_slot(upper),
                    away=_advancing_slot(lower),
                ))

        for bracket_match in bracket_round.matches:
            if not bracket_match.is_bye:
                bracket_match.match = make_playoff_match(
                    bracket_match, round_offset + round_index, round_index)

        rounds.append(bracket_round)
        teams_in_round //= 2

    bracket = PlayoffBracket(rounds, seeds)
    logger.info("Elimination bracket: %d seeds, size %d, %d byes, %d playable matches",
                num_entries, bracket_size, calculate_byes(num_entries), len(bracket.matches))
    return bracket


def build_elimination_bracket(seeds: Sequence[str], round_offset: int = 0) -> PlayoffBracket:
    """
    Build a single elimination bracket from team ids in seed order (seed 1 first).

    ``round_offset`` shifts each Match's ``round`` so playoff matches can be
    numbered after a preceding league or Swiss stage; ``playoff_round`` always
    counts from 0. A single seed gives an empty bracket whose sole team wins.
    """
    validate_team_ids(seeds, minimum=1, what='playoff bracket')
    return _build_bracket([TeamSlot(team_id) for team_id in seeds], list(seeds), round_offset)


def build_seed_placeholder_bracket(qualifiers: int, round_offset: int = 0) -> PlayoffBracket:
    """
    Build a bracket for ``qualifiers`` teams whose identities are not known yet.

    Every entrant is a ``seed-N`` placeholder, to be replaced once the stage
    feeding the playoffs has produced its final standings.
    """
    if not isinstance(qualifiers, int) or qualifiers < 1:
        raise InvalidInput(f"A playoff bracket needs at least 1 qualifier, got {qualifiers!r}")
    entries = [PlaceholderSlot('seed', seed) for seed in range(1, qualifiers + 1)]
    return _build_bracket(entries, [slot.token for slot in entries], round_offset)


def get_elimination_bracket_display(bracket: PlayoffBracket) -> Dict:
    """
    Get bracket data formatted for display.
    """
    total_teams = len(bracket.seeds)
    bracket_size = next_power_of_two(total_teams) if total_teams > 1 else total_teams

    matches_per_round = {}
    for bracket_round in bracket.rounds:
        matches_per_round[bracket_round.name] = len(bracket_round.playable())

    return {
        'seeded_teams': [(team, seed) for seed, team in enumerate(bracket.seeds, start=1)],
        'rounds': {rnd.name: [bm.to_dict() for bm in rnd.matches] for rnd in bracket.rounds},
        'bracket_size': bracket_size,
        'total_rounds': len(bracket.rounds),
        'total_teams': total_teams,
        'byes': len(bracket.byes),
        'matches_per_round': matches_per_round,
    }
