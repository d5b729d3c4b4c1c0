"""
Unit tests for single elimination bracket generation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from scheduling.elimination import (
    build_elimination_bracket,
    build_seed_placeholder_bracket,
    get_elimination_bracket_display,
    get_round_name,
)
from scheduling.exceptions import InvalidInput
from scheduling.models import ByeSlot, PlaceholderSlot, TeamSlot


class TestRoundNames:
    """Tests for round naming."""

    def test_get_round_name_final(self):
        assert get_round_name(2) == "Final"

    def test_get_round_name_semifinal(self):
        assert get_round_name(4) == "Semifinal"

    def test_get_round_name_quarterfinal(self):
        assert get_round_name(8) == "Quarterfinal"

    def test_get_round_name_round_of_16(self):
        assert get_round_name(16) == "Round of 16"

    def test_bracket_round_names(self, make_teams):
        bracket = build_elimination_bracket(make_teams(6))
        assert [r.name for r in bracket.rounds] == ["Quarterfinal", "Semifinal", "Final"]


class TestFiveTeamBracket:
    """Tests for the five-team bracket with three byes."""

    @pytest.fixture
    def bracket(self, make_teams):
        return build_elimination_bracket(make_teams(5))

    def test_byes_go_to_top_seeds(self, bracket):
        bye_teams = set()
        for bm in bracket.byes:
            team = bm.home if isinstance(bm.away, ByeSlot) else bm.away
            bye_teams.add(team.team_id)
        assert bye_teams == {'T1', 'T2', 'T3'}

    def test_first_round_has_one_real_match(self, bracket):
        first = bracket.rounds[0].playable()
        assert len(first) == 1
        assert first[0].code == 'R1-M2'
        assert (first[0].match.home_team_id, first[0].match.away_team_id) == ('T4', 'T5')

    def test_bye_teams_advance_directly(self, bracket):
        semis = bracket.rounds[1].matches
        assert semis[0].home == TeamSlot('T1')
        assert semis[0].away == PlaceholderSlot('winner', 'R1-M2')
        assert semis[1].home == TeamSlot('T2')
        assert semis[1].away == TeamSlot('T3')

    def test_placeholder_ids_in_match_records(self, bracket):
        match = bracket.find('R2-M1').match
        assert match.home_team_id == 'T1'
        assert match.away_team_id == 'winner-of-R1-M2'

    def test_final(self, bracket):
        final = bracket.rounds[-1].matches
        assert len(final) == 1
        assert final[0].home.token == 'winner-of-R2-M1'
        assert final[0].away.token == 'winner-of-R2-M2'
        assert final[0].is_terminal

    def test_playable_match_count(self, bracket):
        assert len(bracket.matches) == 4


class TestBracketStructure:
    """Structural properties for every bracket size."""

    @pytest.mark.parametrize("team_count", range(2, 18))
    def test_playable_matches_is_n_minus_one(self, make_teams, team_count):
        bracket = build_elimination_bracket(make_teams(team_count))
        assert len(bracket.matches) == team_count - 1

    @pytest.mark.parametrize("team_count", range(2, 18))
    def test_byes_only_in_first_round(self, make_teams, team_count):
        bracket = build_elimination_bracket(make_teams(team_count))
        assert all(bm.round_index == 0 for bm in bracket.byes)
        for bm in bracket.byes:
            assert not (isinstance(bm.home, ByeSlot) and isinstance(bm.away, ByeSlot))

    @pytest.mark.parametrize("team_count", [3, 5, 6, 7, 9, 12])
    def test_bye_count(self, make_teams, team_count):
        bracket = build_elimination_bracket(make_teams(team_count))
        size = 1
        while size < team_count:
            size *= 2
        assert len(bracket.byes) == size - team_count

    @pytest.mark.parametrize("team_count", [4, 8, 16])
    def test_top_two_seeds_can_only_meet_in_final(self, make_teams, team_count):
        bracket = build_elimination_bracket(make_teams(team_count))
        first_round = bracket.rounds[0].matches
        half = len(first_round) // 2
        upper = {bm.home.token for bm in first_round[:half]} | {bm.away.token for bm in first_round[:half]}
        lower = {bm.home.token for bm in first_round[half:]} | {bm.away.token for bm in first_round[half:]}
        assert 'T1' in upper
        assert 'T2' in lower

    @pytest.mark.parametrize("team_count", [5, 8, 11])
    def test_feed_links(self, make_teams, team_count):
        """Every match but the final feeds exactly one later slot."""
        bracket = build_elimination_bracket(make_teams(team_count))
        fed = []
        for bm in bracket.bracket_matches():
            if bm is bracket.rounds[-1].matches[0]:
                assert bm.winner_to is None
                continue
            assert bm.winner_to is not None
            target = bracket.find(bm.winner_to.match_code)
            assert target is not None
            assert target.round_index == bm.round_index + 1
            fed.append((bm.winner_to.match_code, bm.winner_to.slot))
        assert len(fed) == len(set(fed))

    def test_match_records(self, make_teams):
        bracket = build_elimination_bracket(make_teams(8))
        for round_index, bracket_round in enumerate(bracket.rounds):
            for bm in bracket_round.playable():
                assert bm.match.is_playoff is True
                assert bm.match.playoff_round == round_index
                assert bm.match.round == round_index
                assert bm.match.id == f"playoff-{bm.code}"

    def test_round_offset(self, make_teams):
        bracket = build_elimination_bracket(make_teams(4), round_offset=7)
        assert [m.round for m in bracket.matches] == [7, 7, 8]
        assert [m.playoff_round for m in bracket.matches] == [0, 0, 1]

    def test_two_teams(self):
        bracket = build_elimination_bracket(['A', 'B'])
        assert len(bracket.rounds) == 1
        assert bracket.rounds[0].name == "Final"
        assert (bracket.matches[0].home_team_id, bracket.matches[0].away_team_id) == ('A', 'B')

    def test_single_team_wins_without_playing(self):
        bracket = build_elimination_bracket(['A'])
        assert bracket.rounds == []
        assert bracket.matches == []
        assert bracket.implicit_winner == 'A'

    def test_deterministic(self, make_teams):
        first = build_elimination_bracket(make_teams(13))
        second = build_elimination_bracket(make_teams(13))
        assert first.to_dict() == second.to_dict()


class TestEliminationValidation:
    def test_no_teams(self):
        with pytest.raises(InvalidInput):
            build_elimination_bracket([])

    def test_duplicate_seeds(self):
        with pytest.raises(InvalidInput):
            build_elimination_bracket(['A', 'B', 'A'])

    def test_placeholder_needs_a_qualifier(self):
        with pytest.raises(InvalidInput):
            build_seed_placeholder_bracket(0)


class TestSeedPlaceholderBracket:
    """Tests for brackets built before the qualifiers are known."""

    def test_seed_tokens(self):
        bracket = build_seed_placeholder_bracket(4)
        first = [(bm.match.home_team_id, bm.match.away_team_id) for bm in bracket.rounds[0].playable()]
        assert first == [('seed-1', 'seed-4'), ('seed-2', 'seed-3')]
        assert bracket.seeds == ['seed-1', 'seed-2', 'seed-3', 'seed-4']

    def test_same_ids_as_real_bracket(self, make_teams):
        placeholder = build_seed_placeholder_bracket(6, round_offset=5)
        real = build_elimination_bracket(make_teams(6), round_offset=5)
        assert [m.id for m in placeholder.matches] == [m.id for m in real.matches]
        assert [m.round for m in placeholder.matches] == [m.round for m in real.matches]


class TestBracketDisplay:
    def test_display_summary(self, make_teams):
        bracket = build_elimination_bracket(make_teams(6))
        display = get_elimination_bracket_display(bracket)

        assert display['total_teams'] == 6
        assert display['bracket_size'] == 8
        assert display['total_rounds'] == 3
        assert display['byes'] == 2
        assert display['seeded_teams'][0] == ('T1', 1)
        assert display['matches_per_round'] == {"Quarterfinal": 2, "Semifinal": 2, "Final": 1}
        assert len(display['rounds']["Quarterfinal"]) == 4
