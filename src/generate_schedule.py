import argparse
import logging
import sys

from scheduling.config import FORMAT_FILE, LOG_LEVEL, SCHEDULE_FILE, TEAMS_FILE, load_format, load_teams, save_schedule
from scheduling.exceptions import SchedulingError
from scheduling.round_robin import matches_by_round
from scheduling.tournament import generate_schedule


def format_schedule(result):
    """Render a schedule as text, one block per round."""
    lines = []
    league_rounds = matches_by_round(result.league_matches)
    for round_number, matches in league_rounds.items():
        if lines:
            lines.append('')
        lines.append(f"# Round {round_number + 1}")
        for match in matches:
            lines.append(f"{match.home_team_id} vs {match.away_team_id}")
        if result.swiss_round is not None and result.swiss_round.bye is not None:
            lines.append(f"{result.swiss_round.bye} has a bye")

    if result.bracket is not None:
        for bracket_round in result.bracket.rounds:
            if lines:
                lines.append('')
            lines.append(f"# {bracket_round.name}")
            for bracket_match in bracket_round.matches:
                if bracket_match.is_bye:
                    team = bracket_match.home if bracket_match.away.kind == 'bye' else bracket_match.away
                    lines.append(f"{bracket_match.code}: {team.token} advances (bye)")
                else:
                    lines.append(f"{bracket_match.code}: {bracket_match.home.token} vs {bracket_match.away.token}")
    return '\n'.join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a tournament schedule.')
    parser.add_argument('teams', nargs='?', default=TEAMS_FILE, help='YAML list of team ids in seed order')
    parser.add_argument('format', nargs='?', default=FORMAT_FILE, help='YAML tournament format')
    parser.add_argument('-o', '--output', nargs='?', const=SCHEDULE_FILE, default=None,
                        help='Save the schedule as YAML (default path when no value is given)')
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, format='%(levelname)s %(name)s: %(message)s')

    try:
        teams = load_teams(args.teams)
        fmt = load_format(args.format)
        result = generate_schedule(teams, fmt)
        print(format_schedule(result))
        if args.output:
            save_schedule(args.output, result)
    except SchedulingError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except OSError as e:
        # filelock.Timeout is a TimeoutError, so a held lock lands here too
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
