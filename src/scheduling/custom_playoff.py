"""
Custom playoff: a six-round finals series with a double chance for the top seeds.

Round 1  Qualifying Finals       non-top seeds knock each other out; an odd
                                 group gives its lowest seed a bye
Round 2  Major & Minor Semis     top seeds play each other (losers drop to the
                                 ladder, winners go to the preliminary finals);
                                 round 1 survivors play each other
Round 3  Elimination Ladder 1    minor-path survivors keep playing off
Round 4  Elimination Ladder 2    major semifinal losers meet the minor-path
                                 survivors
Round 5  Preliminary Finals      the four survivors are re-seeded by original
                                 seed: 1st vs 4th, 2nd vs 3rd
Round 6  Grand Final

A round never needs every entrant: when a pool has more teams than can be
paired down to the next round's size, the strongest entrants sit the round
out and the weakest play. Only a top seed's major semifinal loss is not
terminal.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .elimination import make_playoff_match
from .exceptions import InvalidInput, UnsupportedFieldSize
from .models import (
    BracketMatch,
    BracketRound,
    ByeSlot,
    CustomPlayoffConfig,
    FeedLink,
    Match,
    PlaceholderSlot,
    PlayoffBracket,
    TeamSlot,
)
from .pairing import fold_pairs
from .progression import resolve_bracket
from .round_robin import validate_team_ids

logger = logging.getLogger(__name__)

SUPPORTED_FIELD_SIZES = (8, 9, 10, 12, 16)
PRELIMINARY_FINALISTS = 4

ROUND_NAMES = (
    "Qualifying Finals",
    "Major & Minor Semifinals",
    "Elimination Ladder 1",
    "Elimination Ladder 2",
    "Preliminary Finals",
    "Grand Final",
)


class _Entrant:
    """A team position moving through the series.

    ``rank`` is the expected (chalk) seed of the position: the better seed
    for a match winner, the worse seed for a match loser. It decides who sits
    a round out and who plays whom.
    """

    def __init__(self, slot, rank, source=None, outcome='winner'):
        self.slot = slot
        self.rank = rank
        self.source = source
        self.outcome = outcome

    def send_to(self, feed_link: FeedLink):
        if self.source is None:
            return
        if self.outcome == 'winner':
            self.source.winner_to = feed_link
        else:
            self.source.loser_to = feed_link


class _Plan:
    def __init__(self, field_size, top_seeds, minor_after_qualifying, minor_after_semis,
                 minor_after_ladder, ladder_survivors):
        self.field_size = field_size
        self.top_seeds = top_seeds
        self.minor_after_qualifying = minor_after_qualifying
        self.minor_after_semis = minor_after_semis
        self.minor_after_ladder = minor_after_ladder
        self.ladder_survivors = ladder_survivors


def plan_series(config: CustomPlayoffConfig) -> _Plan:
    """Work out how many teams survive each stage, rejecting unworkable configs."""
    field_size = config.field_size
    if field_size not in SUPPORTED_FIELD_SIZES:
        raise UnsupportedFieldSize(field_size, SUPPORTED_FIELD_SIZES)

    top_seeds = config.top_seed_count
    if not isinstance(top_seeds, int) or top_seeds < 2 or top_seeds % 2 or top_seeds >= field_size:
        raise InvalidInput(
            f"Top seed count must be an even number between 2 and {field_size - 1}, got {top_seeds!r}")

    minor_group = field_size - top_seeds
    if minor_group % 2 and config.enable_bye is False:
        raise InvalidInput(
            f"{minor_group} non-top seeds cannot pair up in the qualifying round without a bye")

    major_winners = top_seeds // 2
    ladder_survivors = PRELIMINARY_FINALISTS - major_winners
    minor_after_qualifying = math.ceil(minor_group / 2)
    minor_after_semis = math.ceil(minor_after_qualifying / 2)
    minor_after_ladder = math.ceil(minor_after_semis / 2)

    ladder_pool = major_winners + minor_after_ladder
    ladder_matches = ladder_pool - ladder_survivors
    if ladder_survivors < 1 or ladder_matches < 0 or ladder_matches > ladder_pool // 2:
        raise InvalidInput(
            f"{top_seeds} top seeds in a field of {field_size} cannot produce "
            f"{PRELIMINARY_FINALISTS} preliminary finalists")

    return _Plan(field_size, top_seeds, minor_after_qualifying, minor_after_semis,
                 minor_after_ladder, ladder_survivors)


def _knockout(entrants: List[_Entrant], target: int, bracket_round: BracketRound,
              code_prefix: str, stage: str) -> Tuple[List[_Entrant], List[_Entrant]]:
    """
    Play ``entrants`` down to ``target`` survivors within one round.

    The strongest entrants sit out; the rest pair strongest against weakest.
    Returns (survivors, losers) as entrants for later rounds.
    """
    entrants = sorted(entrants, key=lambda e: e.rank)
    num_matches = len(entrants) - target
    idle = entrants[:len(entrants) - 2 * num_matches]
    playing = entrants[len(entrants) - 2 * num_matches:]

    survivors = list(idle)
    losers = []
    for i, (home, away) in enumerate(fold_pairs(playing), start=1):
        code = f"{code_prefix}-M{i}"
        bracket_match = BracketMatch(code, bracket_round.index, home.slot, away.slot, stage=stage)
        home.send_to(FeedLink(code, 'home'))
        away.send_to(FeedLink(code, 'away'))
        bracket_round.matches.append(bracket_match)
        survivors.append(_Entrant(PlaceholderSlot('winner', code), min(home.rank, away.rank),
                                  bracket_match, 'winner'))
        losers.append(_Entrant(PlaceholderSlot('loser', code), max(home.rank, away.rank),
                               bracket_match, 'loser'))
    return survivors, losers


def build_custom_playoff(team_ids: Sequence[str], config: CustomPlayoffConfig,
                         round_offset: int = 0) -> PlayoffBracket:
    """
    Build the six-round custom playoff bracket.

    Args:
        team_ids: Team ids in seed order; the first ``field_size`` qualify
        config: Field size, top seed count and bye lane setting
        round_offset: Added to each Match's ``round``; ``playoff_round`` is 1-6

    Raises:
        UnsupportedFieldSize: field size outside 8, 9, 10, 12, 16
        InvalidInput: too few teams or an unworkable top seed count
    """
    plan = plan_series(config)
    validate_team_ids(team_ids, minimum=plan.field_size, what='custom playoff')
    if len(team_ids) > plan.field_size:
        logger.info("Custom playoff takes the top %d of %d teams", plan.field_size, len(team_ids))
    seeds = list(team_ids[:plan.field_size])

    rounds = [BracketRound(i, name) for i, name in enumerate(ROUND_NAMES)]
    qualifying, semis, ladder1, ladder2, prelims, grand_final = rounds

    top = [_Entrant(TeamSlot(team_id), seed) for seed, team_id in enumerate(seeds[:plan.top_seeds], start=1)]
    minor = [_Entrant(TeamSlot(team_id), seed)
             for seed, team_id in enumerate(seeds[plan.top_seeds:], start=plan.top_seeds + 1)]

    # Round 1: bye lane for an odd group, everyone else paired strongest v weakest
    bye_entrant = None
    if len(minor) % 2:
        lowest = minor.pop()
        bye_match = BracketMatch(f"QR-M{len(minor) // 2 + 1}", qualifying.index,
                                 lowest.slot, ByeSlot(), stage='qualifying')
        bye_entrant = _Entrant(lowest.slot, lowest.rank, bye_match, 'winner')
        logger.debug("Qualifying bye for seed %d", lowest.rank)
    elif config.enable_bye:
        logger.debug("Bye lane enabled but the qualifying group is even; no bye issued")
    minor, _ = _knockout(minor, len(minor) // 2, qualifying, 'QR', 'qualifying')
    if bye_entrant is not None:
        qualifying.matches.append(bye_entrant.source)
        minor.append(bye_entrant)

    # Round 2: major semifinals for the top seeds, minor semifinals for the rest
    major_winners, major_losers = _knockout(top, len(top) // 2, semis, 'MAJ', 'major')
    minor, _ = _knockout(minor, plan.minor_after_semis, semis, 'MIN', 'minor')

    # Rounds 3-4: elimination ladder
    minor, _ = _knockout(minor, plan.minor_after_ladder, ladder1, 'EL1', 'ladder')
    ladder, _ = _knockout(major_losers + minor, plan.ladder_survivors, ladder2, 'EL2', 'ladder')

    # Round 5: survivors go to the re-seeding pool; pairings come from seed order only
    for entrant in major_winners + ladder:
        entrant.send_to(FeedLink.to_reseed_pool())
    positions = [PlaceholderSlot('reseed', p) for p in range(1, PRELIMINARY_FINALISTS + 1)]
    for i, (home, away) in enumerate(fold_pairs(positions), start=1):
        prelims.matches.append(BracketMatch(f"PF-M{i}", prelims.index, home, away,
                                            stage='preliminary_final',
                                            winner_to=FeedLink('GF', 'home' if i == 1 else 'away')))

    # Round 6
    grand_final.matches.append(BracketMatch(
        'GF', grand_final.index,
        PlaceholderSlot('winner', prelims.matches[0].code),
        PlaceholderSlot('winner', prelims.matches[1].code),
        stage='grand_final',
    ))

    for bracket_round in rounds:
        for bracket_match in bracket_round.matches:
            if not bracket_match.is_bye:
                bracket_match.match = make_playoff_match(
                    bracket_match, round_offset + bracket_round.index, bracket_round.index + 1)

    bracket = PlayoffBracket(rounds, seeds, kind='custom_playoff', reseed_size=PRELIMINARY_FINALISTS)
    logger.info("Custom playoff: field %d, %d top seeds, %d byes, %d playable matches",
                plan.field_size, plan.top_seeds, len(bracket.byes), len(bracket.matches))
    return bracket


def reseed_preliminary_finals(bracket: PlayoffBracket, winners: Optional[Dict[str, str]] = None) -> List[Match]:
    """
    Pair the preliminary finals from the actual survivors.

    Survivors are ordered by original seed only, regardless of the path they
    took, then paired 1st vs 4th and 2nd vs 3rd. Returns new Match records
    for the preliminary finals; the bracket itself is left untouched.

    Raises:
        InvalidInput: the bracket is not a custom playoff, or rounds 1-4 are
            not fully decided yet
    """
    if bracket.kind != 'custom_playoff':
        raise InvalidInput("Only a custom playoff bracket has preliminary finals to re-seed")
    state = resolve_bracket(bracket, winners)
    if not state.reseed_order:
        raise InvalidInput("Preliminary finals cannot be re-seeded before rounds 1-4 are decided")

    prelims = bracket.rounds[4]
    return [state.resolve_match(bracket_match.match) for bracket_match in prelims.matches]
