"""
Records produced and consumed by the scheduling engine.

Attribute names are snake_case; ``to_dict``/``from_dict`` use the camelCase
record shape shared with the tournament store (``homeTeamId``, ``isPlayoff``...).
"""
from typing import Dict, List, Optional

from .exceptions import InvalidInput

BYE = 'BYE'

LEAGUE = 'league'
LEAGUE_PLAYOFF = 'league_playoff'
SWISS_ELIMINATION = 'swiss_elimination'
CUSTOM_PLAYOFF = 'custom_playoff'
MODES = (LEAGUE, LEAGUE_PLAYOFF, SWISS_ELIMINATION, CUSTOM_PLAYOFF)


class Match:
    def __init__(self, id, round, home_team_id, away_team_id, is_playoff=False,
                 playoff_round=None, home_goals=None, away_goals=None, date_iso=None):
        self.id = id
        self.round = round
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.is_playoff = is_playoff
        self.playoff_round = playoff_round
        self.home_goals = home_goals
        self.away_goals = away_goals
        self.date_iso = date_iso

    @property
    def is_completed(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None

    def involves(self, team_id) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def winner(self) -> Optional[str]:
        """Winning team id, or None for an unplayed match or a draw."""
        if not self.is_completed or self.home_goals == self.away_goals:
            return None
        return self.home_team_id if self.home_goals > self.away_goals else self.away_team_id

    def with_teams(self, home_team_id, away_team_id) -> 'Match':
        """Copy of this match with its placeholders replaced by real teams."""
        return Match(self.id, self.round, home_team_id, away_team_id,
                     is_playoff=self.is_playoff, playoff_round=self.playoff_round,
                     home_goals=self.home_goals, away_goals=self.away_goals,
                     date_iso=self.date_iso)

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'round': self.round,
            'homeTeamId': self.home_team_id,
            'awayTeamId': self.away_team_id,
            'isPlayoff': self.is_playoff,
        }
        if self.playoff_round is not None:
            data['playoffRound'] = self.playoff_round
        if self.home_goals is not None:
            data['homeGoals'] = self.home_goals
        if self.away_goals is not None:
            data['awayGoals'] = self.away_goals
        if self.date_iso is not None:
            data['dateISO'] = self.date_iso
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'Match':
        try:
            return cls(
                id=data['id'],
                round=data.get('round', 0),
                home_team_id=data['homeTeamId'],
                away_team_id=data['awayTeamId'],
                is_playoff=data.get('isPlayoff', False),
                playoff_round=data.get('playoffRound'),
                home_goals=data.get('homeGoals'),
                away_goals=data.get('awayGoals'),
                date_iso=data.get('dateISO'),
            )
        except (KeyError, TypeError) as e:
            raise InvalidInput(f"Malformed match record {data!r}: {e}") from e

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, round={self.round}, "
                f"home={self.home_team_id}, away={self.away_team_id}, "
                f"playoff_round={self.playoff_round})")


# Bracket slots. A slot is exactly one of: a known team, a placeholder for a
# team decided later, or a bye.

class TeamSlot:
    kind = 'team'
    is_resolved = True

    def __init__(self, team_id):
        self.team_id = team_id

    @property
    def token(self):
        return self.team_id

    def __eq__(self, other):
        return isinstance(other, TeamSlot) and other.team_id == self.team_id

    def __hash__(self):
        return hash(('team', self.team_id))

    def __repr__(self):
        return f"TeamSlot({self.team_id})"


class PlaceholderSlot:
    """Team not known yet: winner/loser of a match, or a (re)seed position."""

    KINDS = ('winner', 'loser', 'seed', 'reseed')
    is_resolved = False

    def __init__(self, kind, ref):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown placeholder kind: {kind}")
        self.kind = kind
        self.ref = ref

    @property
    def token(self):
        if self.kind in ('winner', 'loser'):
            return f"{self.kind}-of-{self.ref}"
        return f"{self.kind}-{self.ref}"

    def __eq__(self, other):
        return (isinstance(other, PlaceholderSlot)
                and other.kind == self.kind and other.ref == self.ref)

    def __hash__(self):
        return hash((self.kind, self.ref))

    def __repr__(self):
        return f"PlaceholderSlot({self.token})"


class ByeSlot:
    kind = 'bye'
    is_resolved = False
    token = BYE

    def __eq__(self, other):
        return isinstance(other, ByeSlot)

    def __hash__(self):
        return hash(BYE)

    def __repr__(self):
        return "ByeSlot()"


class FeedLink:
    """Where the winner (or loser) of a bracket match goes next.

    Either a slot ('home'/'away') of a later match, or the re-seeding pool
    that feeds the custom playoff's preliminary finals.
    """

    def __init__(self, match_code=None, slot=None, reseed=False):
        self.match_code = match_code
        self.slot = slot
        self.reseed = reseed

    @classmethod
    def to_reseed_pool(cls):
        return cls(reseed=True)

    def to_dict(self):
        if self.reseed:
            return {'reseed': True}
        return {'matchCode': self.match_code, 'slot': self.slot}

    def __eq__(self, other):
        return (isinstance(other, FeedLink) and other.match_code == self.match_code
                and other.slot == self.slot and other.reseed == self.reseed)

    def __repr__(self):
        if self.reseed:
            return "FeedLink(reseed)"
        return f"FeedLink({self.match_code}.{self.slot})"


class BracketMatch:
    def __init__(self, code, round_index, home, away, stage=None,
                 winner_to=None, loser_to=None, match=None):
        self.code = code
        self.round_index = round_index
        self.home = home
        self.away = away
        self.stage = stage
        self.winner_to = winner_to
        self.loser_to = loser_to
        self.match = match

    @property
    def is_bye(self) -> bool:
        return isinstance(self.home, ByeSlot) or isinstance(self.away, ByeSlot)

    @property
    def is_terminal(self) -> bool:
        return self.winner_to is None

    def to_dict(self) -> Dict:
        return {
            'code': self.code,
            'round': self.round_index,
            'stage': self.stage,
            'home': self.home.token,
            'away': self.away.token,
            'isBye': self.is_bye,
            'matchId': self.match.id if self.match else None,
            'winnerTo': self.winner_to.to_dict() if self.winner_to else None,
            'loserTo': self.loser_to.to_dict() if self.loser_to else None,
        }

    def __repr__(self):
        return f"BracketMatch({self.code}: {self.home.token} vs {self.away.token})"


class BracketRound:
    def __init__(self, index, name, matches=None):
        self.index = index
        self.name = name
        self.matches = matches if matches else []

    def playable(self) -> List[BracketMatch]:
        return [bm for bm in self.matches if bm.match is not None]

    def __repr__(self):
        return f"BracketRound({self.index}, {self.name}, matches={len(self.matches)})"


class PlayoffBracket:
    """Ordered rounds of bracket matches plus the seeds they were built from."""

    def __init__(self, rounds, seeds, kind='single_elimination', reseed_size=0):
        self.rounds = rounds
        self.seeds = list(seeds)
        self.kind = kind
        self.reseed_size = reseed_size

    @property
    def matches(self) -> List[Match]:
        """Playable Match records, round by round."""
        return [bm.match for rnd in self.rounds for bm in rnd.matches if bm.match is not None]

    @property
    def byes(self) -> List[BracketMatch]:
        return [bm for rnd in self.rounds for bm in rnd.matches if bm.is_bye]

    @property
    def implicit_winner(self):
        """Sole entrant of a one-team bracket, which wins without playing."""
        if len(self.seeds) == 1 and not self.rounds:
            return self.seeds[0]
        return None

    def bracket_matches(self) -> List[BracketMatch]:
        return [bm for rnd in self.rounds for bm in rnd.matches]

    def find(self, code) -> Optional[BracketMatch]:
        for bm in self.bracket_matches():
            if bm.code == code:
                return bm
        return None

    def seed_of(self, team_id) -> Optional[int]:
        try:
            return self.seeds.index(team_id) + 1
        except ValueError:
            return None

    def to_dict(self) -> Dict:
        return {
            'kind': self.kind,
            'seeds': list(self.seeds),
            'rounds': [
                {
                    'index': rnd.index,
                    'name': rnd.name,
                    'matches': [bm.to_dict() for bm in rnd.matches],
                }
                for rnd in self.rounds
            ],
        }

    def __repr__(self):
        return f"PlayoffBracket(kind={self.kind}, seeds={len(self.seeds)}, rounds={len(self.rounds)})"


class CustomPlayoffConfig:
    def __init__(self, field_size, top_seed_count=4, enable_bye=None):
        self.field_size = field_size
        self.top_seed_count = top_seed_count
        # None means "bye lane whenever the non-top group is odd"
        self.enable_bye = enable_bye

    @classmethod
    def from_dict(cls, data: Dict) -> 'CustomPlayoffConfig':
        if not isinstance(data, dict):
            raise InvalidInput(f"Custom playoff config must be a mapping, got {data!r}")
        field_size = data.get('field_size', data.get('fieldSize'))
        if field_size is None:
            raise InvalidInput("Custom playoff config needs a field size")
        return cls(
            field_size=field_size,
            top_seed_count=data.get('top_seed_count', data.get('topSeedCount', 4)),
            enable_bye=data.get('enable_bye', data.get('enableBye')),
        )

    def to_dict(self) -> Dict:
        return {
            'fieldSize': self.field_size,
            'topSeedCount': self.top_seed_count,
            'enableBye': self.enable_bye,
        }

    def __repr__(self):
        return (f"CustomPlayoffConfig(field_size={self.field_size}, "
                f"top_seed_count={self.top_seed_count}, enable_bye={self.enable_bye})")


class Format:
    def __init__(self, rounds=1, mode=LEAGUE, playoff_qualifiers=None, custom_config=None):
        self.rounds = rounds
        self.mode = mode
        self.playoff_qualifiers = playoff_qualifiers
        self.custom_config = custom_config

    @property
    def has_playoffs(self) -> bool:
        return self.mode != LEAGUE

    def validate(self, team_count: int):
        """Raise InvalidInput unless this format can run with ``team_count`` teams."""
        if self.mode not in MODES:
            raise InvalidInput(f"Unknown format mode '{self.mode}', expected one of {', '.join(MODES)}")
        if not isinstance(self.rounds, int) or self.rounds < 1:
            raise InvalidInput(f"Format rounds must be an integer >= 1, got {self.rounds!r}")
        if self.playoff_qualifiers is not None:
            if not isinstance(self.playoff_qualifiers, int) or self.playoff_qualifiers < 1:
                raise InvalidInput(
                    f"Playoff qualifiers must be a positive integer, got {self.playoff_qualifiers!r}")
            # Swiss clamps its qualifier count instead of failing
            if self.mode == LEAGUE_PLAYOFF and self.playoff_qualifiers > team_count:
                raise InvalidInput(
                    f"Playoff qualifiers ({self.playoff_qualifiers}) exceed team count ({team_count})")
        if self.mode == CUSTOM_PLAYOFF and self.custom_config is None:
            raise InvalidInput("Custom playoff format needs a custom config")

    @classmethod
    def from_dict(cls, data: Dict) -> 'Format':
        if not isinstance(data, dict):
            raise InvalidInput(f"Format must be a mapping, got {data!r}")
        custom = data.get('custom_config', data.get('customConfig'))
        return cls(
            rounds=data.get('rounds', 1),
            mode=data.get('mode', LEAGUE),
            playoff_qualifiers=data.get('playoff_qualifiers', data.get('playoffQualifiers')),
            custom_config=CustomPlayoffConfig.from_dict(custom) if custom is not None else None,
        )

    def to_dict(self) -> Dict:
        data = {'rounds': self.rounds, 'mode': self.mode}
        if self.playoff_qualifiers is not None:
            data['playoffQualifiers'] = self.playoff_qualifiers
        if self.custom_config is not None:
            data['customConfig'] = self.custom_config.to_dict()
        return data

    def __repr__(self):
        return (f"Format(rounds={self.rounds}, mode={self.mode}, "
                f"playoff_qualifiers={self.playoff_qualifiers})")


def _number(value, what, team_id):
    # bool is an int subclass but never a valid score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"Standing for {team_id}: {what} must be a number, got {value!r}")
    return value


class Standing:
    """One team's accumulated Swiss record as supplied by the scoring workflow."""

    def __init__(self, team_id, points=0, goal_difference=0):
        self.team_id = team_id
        self.points = points
        self.goal_difference = goal_difference

    def validate(self):
        """Raise InvalidInput unless points and goal difference are numbers."""
        _number(self.points, 'points', self.team_id)
        _number(self.goal_difference, 'goal difference', self.team_id)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Standing':
        if not isinstance(data, dict):
            raise InvalidInput(f"Standing must be a mapping, got {data!r}")
        team_id = data.get('team_id', data.get('teamId'))
        if team_id is None:
            raise InvalidInput(f"Standing without a team id: {data!r}")
        if 'goal_difference' in data or 'goalDifference' in data:
            goal_difference = data.get('goal_difference', data.get('goalDifference'))
        else:
            goals_for = _number(data.get('goals_for', data.get('goalsFor', 0)), 'goals for', team_id)
            goals_against = _number(data.get('goals_against', data.get('goalsAgainst', 0)),
                                    'goals against', team_id)
            goal_difference = goals_for - goals_against
        standing = cls(team_id, points=data.get('points', 0), goal_difference=goal_difference)
        standing.validate()
        return standing

    def __repr__(self):
        return f"Standing({self.team_id}, points={self.points}, gd={self.goal_difference})"
