"""
Unit tests for scheduling records.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from scheduling.exceptions import InvalidInput
from scheduling.models import (
    ByeSlot,
    CustomPlayoffConfig,
    FeedLink,
    Format,
    Match,
    PlaceholderSlot,
    Standing,
    TeamSlot,
)


class TestMatch:
    """Tests for the Match record."""

    def test_unplayed_match(self):
        match = Match('0-A-B', 0, 'A', 'B')
        assert not match.is_completed
        assert match.winner() is None
        assert match.involves('A')
        assert not match.involves('C')

    def test_winner(self):
        assert Match('m', 0, 'A', 'B', home_goals=2, away_goals=1).winner() == 'A'
        assert Match('m', 0, 'A', 'B', home_goals=0, away_goals=3).winner() == 'B'

    def test_draw_has_no_winner(self):
        match = Match('m', 0, 'A', 'B', home_goals=1, away_goals=1)
        assert match.is_completed
        assert match.winner() is None

    def test_to_dict_omits_unset_fields(self):
        data = Match('0-A-B', 0, 'A', 'B').to_dict()
        assert data == {
            'id': '0-A-B',
            'round': 0,
            'homeTeamId': 'A',
            'awayTeamId': 'B',
            'isPlayoff': False,
        }

    def test_to_dict_playoff(self):
        data = Match('playoff-GF', 5, 'A', 'B', is_playoff=True, playoff_round=6,
                     date_iso='2024-05-01T18:00:00Z').to_dict()
        assert data['playoffRound'] == 6
        assert data['dateISO'] == '2024-05-01T18:00:00Z'

    def test_from_dict(self):
        match = Match.from_dict({'id': 'x', 'round': 2, 'homeTeamId': 'A', 'awayTeamId': 'B',
                                 'homeGoals': 1, 'awayGoals': 0})
        assert match.round == 2
        assert match.winner() == 'A'
        assert match.is_playoff is False

    def test_from_dict_malformed(self):
        with pytest.raises(InvalidInput):
            Match.from_dict({'id': 'x', 'homeTeamId': 'A'})

    def test_with_teams_keeps_identity(self):
        match = Match('playoff-R2-M1', 4, 'winner-of-R1-M1', 'seed-2', is_playoff=True, playoff_round=1)
        resolved = match.with_teams('A', 'B')
        assert resolved.id == match.id
        assert resolved.playoff_round == 1
        assert (resolved.home_team_id, resolved.away_team_id) == ('A', 'B')


class TestSlots:
    """Tests for bracket slot tokens."""

    def test_team_slot(self):
        assert TeamSlot('A').token == 'A'
        assert TeamSlot('A') == TeamSlot('A')

    def test_placeholder_tokens(self):
        assert PlaceholderSlot('winner', 'R1-M2').token == 'winner-of-R1-M2'
        assert PlaceholderSlot('loser', 'MAJ-M1').token == 'loser-of-MAJ-M1'
        assert PlaceholderSlot('seed', 3).token == 'seed-3'
        assert PlaceholderSlot('reseed', 1).token == 'reseed-1'

    def test_placeholder_kind_checked(self):
        with pytest.raises(ValueError):
            PlaceholderSlot('champion', 1)

    def test_bye_slot(self):
        assert ByeSlot().token == 'BYE'
        assert ByeSlot() == ByeSlot()
        assert ByeSlot() != TeamSlot('BYE')

    def test_feed_link_to_dict(self):
        assert FeedLink('R2-M1', 'home').to_dict() == {'matchCode': 'R2-M1', 'slot': 'home'}
        assert FeedLink.to_reseed_pool().to_dict() == {'reseed': True}


class TestFormat:
    """Tests for format parsing and validation."""

    def test_from_dict_camel_case(self):
        fmt = Format.from_dict({
            'rounds': 1,
            'mode': 'custom_playoff',
            'customConfig': {'fieldSize': 9, 'topSeedCount': 4, 'enableBye': True},
        })
        assert fmt.custom_config.field_size == 9
        assert fmt.custom_config.enable_bye is True

    def test_from_dict_snake_case(self):
        fmt = Format.from_dict({'mode': 'league_playoff', 'playoff_qualifiers': 4})
        assert fmt.playoff_qualifiers == 4
        assert fmt.rounds == 1
        assert fmt.has_playoffs

    def test_defaults(self):
        fmt = Format.from_dict({})
        assert fmt.mode == 'league'
        assert not fmt.has_playoffs

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(InvalidInput):
            Format.from_dict(['league'])

    def test_round_trip_shape(self):
        fmt = Format(rounds=2, mode='custom_playoff', custom_config=CustomPlayoffConfig(12))
        assert Format.from_dict(fmt.to_dict()).to_dict() == fmt.to_dict()

    def test_validate_qualifiers(self):
        Format(mode='swiss_elimination', playoff_qualifiers=20).validate(8)
        with pytest.raises(InvalidInput):
            Format(mode='league_playoff', playoff_qualifiers=20).validate(8)
        with pytest.raises(InvalidInput):
            Format(mode='swiss_elimination', playoff_qualifiers=0).validate(8)

    def test_custom_config_needs_field_size(self):
        with pytest.raises(InvalidInput):
            CustomPlayoffConfig.from_dict({'topSeedCount': 4})

    def test_custom_config_defaults(self):
        config = CustomPlayoffConfig.from_dict({'field_size': 8})
        assert config.top_seed_count == 4
        assert config.enable_bye is None


class TestStanding:
    def test_from_goals(self):
        standing = Standing.from_dict({'teamId': 'A', 'points': 4, 'goalsFor': 5, 'goalsAgainst': 2})
        assert standing.goal_difference == 3
        assert standing.points == 4

    def test_from_goal_difference(self):
        standing = Standing.from_dict({'team_id': 'A', 'goal_difference': -2})
        assert standing.goal_difference == -2
        assert standing.points == 0

    def test_needs_team_id(self):
        with pytest.raises(InvalidInput):
            Standing.from_dict({'points': 3})

    def test_not_a_mapping(self):
        with pytest.raises(InvalidInput):
            Standing.from_dict('A')

    def test_goals_not_numbers(self):
        with pytest.raises(InvalidInput, match="goals for"):
            Standing.from_dict({'teamId': 'A', 'goalsFor': None, 'goalsAgainst': 1})

    def test_validate(self):
        Standing('A', points=4.5, goal_difference=-1).validate()
        with pytest.raises(InvalidInput):
            Standing('A', points=None).validate()
