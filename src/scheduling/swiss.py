"""
Swiss qualification stage feeding a single elimination bracket.

The Swiss stage is generated one round at a time. Points are kept by the
scoring workflow, so each call receives the standings as of the previous
round together with the rounds already played, and returns the next round's
pairings. Once every Swiss round is in, the top qualifiers seed a bracket.

Ranking order: points, then head-to-head points among the tied teams, then
goal difference, then original seed.
"""
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .elimination import build_elimination_bracket
from .exceptions import InconsistentStandings, InvalidInput
from .models import Match, PlayoffBracket, Standing
from .round_robin import validate_team_ids

logger = logging.getLogger(__name__)

POINTS_WIN = 3
POINTS_DRAW = 1
POINTS_LOSS = 0

# Upper bound on backtracking steps before falling back to forced rematches
MAX_PAIRING_STEPS = 50000


class SwissRound:
    def __init__(self, index, matches, bye=None):
        self.index = index
        self.matches = list(matches)
        self.bye = bye

    def pairs(self) -> Set[frozenset]:
        return {frozenset((m.home_team_id, m.away_team_id)) for m in self.matches}

    def to_dict(self) -> Dict:
        return {
            'index': self.index,
            'matches': [m.to_dict() for m in self.matches],
            'bye': self.bye,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SwissRound':
        if not isinstance(data, dict) or 'index' not in data:
            raise InvalidInput(f"Malformed Swiss round {data!r}")
        return cls(data['index'], [Match.from_dict(m) for m in data.get('matches', [])],
                   bye=data.get('bye'))

    def __repr__(self):
        return f"SwissRound({self.index}, matches={len(self.matches)}, bye={self.bye})"


class SwissEliminationResult:
    def __init__(self, league_matches, bracket: PlayoffBracket, qualifiers):
        self.league_matches = list(league_matches)
        self.bracket = bracket
        self.qualifiers = list(qualifiers)

    @property
    def elimination_matches(self) -> List[Match]:
        return self.bracket.matches

    @property
    def matches(self) -> List[Match]:
        return self.league_matches + self.elimination_matches

    def __repr__(self):
        return (f"SwissEliminationResult(league={len(self.league_matches)}, "
                f"elimination={len(self.elimination_matches)}, qualifiers={len(self.qualifiers)})")


def normalize_standings(team_ids: Sequence[str], standings) -> Dict[str, Standing]:
    """
    Turn a standings snapshot into ``{team_id: Standing}``.

    Accepts a list of Standing objects or dicts, or a mapping from team id to
    a Standing, a dict, or a plain points value. Every active team must appear
    and every points and goal difference value must be a number.
    """
    if standings is None:
        raise InconsistentStandings(team_ids)

    table = {}
    if isinstance(standings, dict):
        for team_id, value in standings.items():
            if isinstance(value, Standing):
                table[team_id] = value
            elif isinstance(value, dict):
                table[team_id] = Standing.from_dict(dict(value, team_id=team_id))
            else:
                table[team_id] = Standing(team_id, points=value)
    elif isinstance(standings, (list, tuple)):
        for entry in standings:
            standing = entry if isinstance(entry, Standing) else Standing.from_dict(entry)
            table[standing.team_id] = standing
    else:
        raise InvalidInput(f"Standings must be a list or a mapping, got {standings!r}")

    for standing in table.values():
        standing.validate()

    missing = [team_id for team_id in team_ids if team_id not in table]
    if missing:
        raise InconsistentStandings(missing)
    active = set(team_ids)
    extra = sorted(str(team_id) for team_id in table if team_id not in active)
    if extra:
        logger.warning("Ignoring standings for teams outside the Swiss pool: %s", ', '.join(extra))
    return table


def _match_points(match: Match, team_id) -> int:
    winner = match.winner()
    if winner is None:
        return POINTS_DRAW
    return POINTS_WIN if winner == team_id else POINTS_LOSS


def _head_to_head(group: Set[str], history: Iterable[Match]) -> Dict[str, int]:
    points = {team_id: 0 for team_id in group}
    for match in history:
        if not match.is_completed:
            continue
        if match.home_team_id in group and match.away_team_id in group:
            points[match.home_team_id] += _match_points(match, match.home_team_id)
            points[match.away_team_id] += _match_points(match, match.away_team_id)
    return points


def rank_teams(team_ids: Sequence[str], standings: Dict[str, Standing],
               history: Iterable[Match] = ()) -> List[str]:
    """Order teams by points, head-to-head, goal difference, then original seed."""
    history = list(history)
    seed_index = {team_id: i for i, team_id in enumerate(team_ids)}

    by_points = {}
    for team_id in team_ids:
        by_points.setdefault(standings[team_id].points, set()).add(team_id)

    h2h = {}
    for group in by_points.values():
        if len(group) > 1:
            h2h.update(_head_to_head(group, history))

    return sorted(team_ids, key=lambda t: (
        -standings[t].points,
        -h2h.get(t, 0),
        -standings[t].goal_difference,
        seed_index[t],
    ))


def _pair_without_repeats(ranked: List[str], played: Set[frozenset]) -> Optional[List[Tuple[str, str]]]:
    """
    Pair adjacent ranks, moving to the next-closest rank whenever a pairing
    would repeat an earlier round. Returns None if no repeat-free pairing
    exists (or the search gives up).
    """
    steps = [0]

    def search(remaining):
        if not remaining:
            return []
        steps[0] += 1
        if steps[0] > MAX_PAIRING_STEPS:
            return None
        top = remaining[0]
        for i in range(1, len(remaining)):
            opponent = remaining[i]
            if frozenset((top, opponent)) in played:
                continue
            rest = search(remaining[1:i] + remaining[i + 1:])
            if rest is not None:
                return [(top, opponent)] + rest
        return None

    return search(list(ranked))


def _pair_with_fewest_repeats(ranked: List[str], played: Set[frozenset]) -> List[Tuple[str, str]]:
    remaining = list(ranked)
    pairs = []
    while remaining:
        top = remaining.pop(0)
        index = next((i for i, opponent in enumerate(remaining)
                      if frozenset((top, opponent)) not in played), 0)
        opponent = remaining.pop(index)
        if frozenset((top, opponent)) in played:
            logger.warning("Forced Swiss rematch: %s vs %s", top, opponent)
        pairs.append((top, opponent))
    return pairs


def generate_swiss_round(team_ids: Sequence[str], round_index: int, standings=None,
                         previous_rounds: Sequence[SwissRound] = (),
                         total_rounds: Optional[int] = None) -> SwissRound:
    """
    Pair one Swiss round.

    Args:
        team_ids: Team ids in original seed order
        round_index: 0-based index of the round to pair
        standings: Standings after the previous round (optional for round 0)
        previous_rounds: Rounds already played, with results filled in
        total_rounds: Number of Swiss rounds, to reject pairing past the end

    An odd pool gives the bye to the lowest-ranked team that has not had one.
    """
    validate_team_ids(team_ids, what='Swiss stage')
    previous_rounds = list(previous_rounds)
    if round_index != len(previous_rounds):
        raise InvalidInput(
            f"Swiss round {round_index} requested after {len(previous_rounds)} completed round(s)")
    if total_rounds is not None and round_index >= total_rounds:
        raise InvalidInput(f"Swiss stage has only {total_rounds} round(s)")

    if standings is None and round_index == 0:
        table = {team_id: Standing(team_id) for team_id in team_ids}
    else:
        table = normalize_standings(team_ids, standings)

    history = [m for r in previous_rounds for m in r.matches]
    played = set()
    for previous in previous_rounds:
        played |= previous.pairs()
    had_bye = {r.bye for r in previous_rounds if r.bye is not None}

    ranked = rank_teams(team_ids, table, history)

    bye = None
    if len(ranked) % 2 == 1:
        candidates = [t for t in reversed(ranked) if t not in had_bye]
        bye = candidates[0] if candidates else ranked[-1]
        ranked = [t for t in ranked if t != bye]

    pairs = _pair_without_repeats(ranked, played)
    if pairs is None:
        pairs = _pair_with_fewest_repeats(ranked, played)

    matches = [
        Match(
            id=f"swiss-{round_index}-{home}-{away}",
            round=round_index,
            home_team_id=home,
            away_team_id=away,
            is_playoff=False,
        )
        for home, away in pairs
    ]
    logger.info("Swiss round %d: %d matches, bye=%s", round_index, len(matches), bye)
    return SwissRound(round_index, matches, bye)


def final_standings(team_ids: Sequence[str], standings,
                    previous_rounds: Sequence[SwissRound] = ()) -> List[str]:
    """Final Swiss order of all teams."""
    validate_team_ids(team_ids, what='Swiss stage')
    table = normalize_standings(team_ids, standings)
    history = [m for r in previous_rounds for m in r.matches]
    return rank_teams(team_ids, table, history)


def clamp_qualifiers(qualifiers: int, team_count: int) -> int:
    if not isinstance(qualifiers, int) or qualifiers < 1:
        raise InvalidInput(f"Qualifier count must be a positive integer, got {qualifiers!r}")
    if qualifiers > team_count:
        logger.warning("Only %d teams available, clamping qualifiers from %d",
                       team_count, qualifiers)
        return team_count
    return qualifiers


def build_swiss_elimination(team_ids: Sequence[str], standings,
                            previous_rounds: Sequence[SwissRound], qualifiers: int,
                            swiss_rounds: Optional[int] = None) -> SwissEliminationResult:
    """
    Seed the elimination bracket from the final Swiss standings.

    The top ``min(qualifiers, len(team_ids))`` teams enter the bracket in
    standing order. Bracket matches are numbered after the Swiss rounds.
    """
    previous_rounds = list(previous_rounds)
    if swiss_rounds is not None and len(previous_rounds) < swiss_rounds:
        raise InvalidInput(
            f"Swiss stage unfinished: {len(previous_rounds)} of {swiss_rounds} rounds played")

    order = final_standings(team_ids, standings, previous_rounds)
    top = order[:clamp_qualifiers(qualifiers, len(team_ids))]
    bracket = build_elimination_bracket(top, round_offset=len(previous_rounds))
    league_matches = [m for r in previous_rounds for m in r.matches]
    return SwissEliminationResult(league_matches, bracket, top)
