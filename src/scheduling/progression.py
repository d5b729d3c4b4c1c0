"""
Placeholder resolution for generated brackets.

Bracket matches after the first round name their entrants by placeholder
(``winner-of-R1-M2``, ``loser-of-MAJ-M1``, ``reseed-3``...). Given the winners
of completed matches, ``resolve_bracket`` works out which real team fills
each placeholder. Nothing in the bracket is modified; the caller decides what
to write back to its own match records.
"""
import logging
from typing import Dict, List, Optional

from .exceptions import InvalidInput
from .models import ByeSlot, Match, PlaceholderSlot, PlayoffBracket, TeamSlot

logger = logging.getLogger(__name__)


class BracketState:
    def __init__(self, bracket: PlayoffBracket):
        self.bracket = bracket
        self.entrants = {}  # match code -> (home team or None, away team or None)
        self.winners = {}
        self.losers = {}
        self.tokens = {}  # placeholder token -> team id
        self.reseed_order = []

    @property
    def champion(self) -> Optional[str]:
        if self.bracket.implicit_winner is not None:
            return self.bracket.implicit_winner
        if not self.bracket.rounds:
            return None
        final = self.bracket.rounds[-1].matches
        if len(final) != 1:
            return None
        return self.winners.get(final[0].code)

    def resolve_match(self, match: Match) -> Match:
        """Copy of ``match`` with every resolvable placeholder replaced."""
        return match.with_teams(self.tokens.get(match.home_team_id, match.home_team_id),
                                self.tokens.get(match.away_team_id, match.away_team_id))

    def pending(self) -> List[str]:
        """Codes of matches whose entrants are known but which have no winner yet."""
        codes = []
        for bracket_match in self.bracket.bracket_matches():
            if bracket_match.is_bye or bracket_match.code in self.winners:
                continue
            home, away = self.entrants.get(bracket_match.code, (None, None))
            if home is not None and away is not None:
                codes.append(bracket_match.code)
        return codes

    def __repr__(self):
        return f"BracketState(decided={len(self.winners)}, champion={self.champion})"


def _slot_team(slot, tokens: Dict[str, str]) -> Optional[str]:
    if isinstance(slot, TeamSlot):
        return slot.team_id
    if isinstance(slot, PlaceholderSlot):
        return tokens.get(slot.token)
    return None


def _fill_reseed_tokens(state: BracketState, pool: List[Optional[str]]):
    bracket = state.bracket
    if state.reseed_order or len(pool) != bracket.reseed_size:
        return
    if any(team is None for team in pool):
        return
    state.reseed_order = sorted(pool, key=bracket.seed_of)
    for position, team_id in enumerate(state.reseed_order, start=1):
        state.tokens[PlaceholderSlot('reseed', position).token] = team_id
    logger.debug("Re-seeded %s", state.reseed_order)


def resolve_bracket(bracket: PlayoffBracket, winners: Optional[Dict[str, str]] = None) -> BracketState:
    """
    Apply known match winners to a bracket.

    Args:
        bracket: Bracket from one of the generators
        winners: Winning team id keyed by bracket match code

    Returns:
        BracketState with resolved entrants, winners, losers and the
        placeholder-token mapping. Byes resolve automatically.
    """
    winners = dict(winners or {})
    known_codes = {bm.code for bm in bracket.bracket_matches()}
    unknown = sorted(code for code in winners if code not in known_codes)
    if unknown:
        raise InvalidInput(f"Results given for unknown bracket matches: {', '.join(unknown)}")

    state = BracketState(bracket)
    reseed_pool = []

    for bracket_round in bracket.rounds:
        if bracket.reseed_size:
            _fill_reseed_tokens(state, reseed_pool)

        for bracket_match in bracket_round.matches:
            home = _slot_team(bracket_match.home, state.tokens)
            away = _slot_team(bracket_match.away, state.tokens)
            state.entrants[bracket_match.code] = (home, away)
            given = winners.get(bracket_match.code)

            if bracket_match.is_bye:
                winner = away if isinstance(bracket_match.home, ByeSlot) else home
                if given is not None and given != winner:
                    raise InvalidInput(
                        f"{bracket_match.code} is a bye for {winner}, cannot be won by {given}")
                loser = None
            elif given is not None:
                if home is None or away is None:
                    raise InvalidInput(
                        f"Result for {bracket_match.code} given before both teams are known")
                if given not in (home, away):
                    raise InvalidInput(
                        f"{given} is not playing in {bracket_match.code} ({home} vs {away})")
                winner = given
                loser = away if given == home else home
            else:
                winner = loser = None

            if winner is not None:
                state.winners[bracket_match.code] = winner
                state.tokens[PlaceholderSlot('winner', bracket_match.code).token] = winner
            if loser is not None:
                state.losers[bracket_match.code] = loser
                state.tokens[PlaceholderSlot('loser', bracket_match.code).token] = loser

            if bracket_match.winner_to is not None and bracket_match.winner_to.reseed:
                reseed_pool.append(winner)
            if bracket_match.loser_to is not None and bracket_match.loser_to.reseed:
                reseed_pool.append(loser)

    return state
