"""
Flask JSON service exposing the scheduling engine to the tournament workflow.
"""
import logging
import os

from flask import Flask, jsonify, request

from scheduling.config import LOG_LEVEL
from scheduling.custom_playoff import build_custom_playoff, reseed_preliminary_finals
from scheduling.exceptions import InvalidInput, SchedulingError
from scheduling.models import CustomPlayoffConfig, Format
from scheduling.swiss import SwissRound, generate_swiss_round
from scheduling.tournament import generate_schedule, seed_playoffs

app = Flask(__name__)
app.logger.setLevel(LOG_LEVEL)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data


def _team_list(data, key='teams'):
    teams = data.get(key)
    if not isinstance(teams, list):
        raise InvalidInput(f"'{key}' must be a list of team ids")
    return teams


@app.errorhandler(SchedulingError)
def handle_scheduling_error(error):
    app.logger.warning(f'{request.path} rejected: {error.message}')
    return jsonify({'success': False, 'error': error.code, 'message': error.message}), 400


@app.route('/health')
def health():
    return jsonify({'status': 'ok'})


@app.route('/api/schedule', methods=['POST'])
def api_schedule():
    """Generate the initial schedule for a new tournament."""
    data = _json_body()
    teams = _team_list(data)
    fmt = Format.from_dict(data.get('format') or {})
    result = generate_schedule(teams, fmt)
    app.logger.info(f'Generated {fmt.mode} schedule: {len(result.matches)} matches')
    return jsonify(dict(result.to_dict(), success=True))


@app.route('/api/swiss/round', methods=['POST'])
def api_swiss_round():
    """Pair the next Swiss round from the standings after the previous one."""
    data = _json_body()
    teams = _team_list(data)
    previous = [SwissRound.from_dict(r) for r in data.get('previousRounds') or []]
    round_index = data.get('roundIndex', len(previous))
    swiss_round = generate_swiss_round(
        teams,
        round_index,
        standings=data.get('standings'),
        previous_rounds=previous,
        total_rounds=data.get('totalRounds'),
    )
    return jsonify({'success': True, 'round': swiss_round.to_dict()})


@app.route('/api/playoffs/seed', methods=['POST'])
def api_seed_playoffs():
    """Build the real playoff bracket once the league or Swiss stage is over."""
    data = _json_body()
    fmt = Format.from_dict(data.get('format') or {})
    bracket = seed_playoffs(fmt, _team_list(data, 'standings'))
    return jsonify({
        'success': True,
        'bracket': bracket.to_dict(),
        'matches': [m.to_dict() for m in bracket.matches],
    })


@app.route('/api/playoffs/reseed', methods=['POST'])
def api_reseed_playoffs():
    """Pair the custom playoff's preliminary finals from the actual survivors."""
    data = _json_body()
    teams = _team_list(data)
    config = CustomPlayoffConfig.from_dict(data.get('customConfig') or {})
    winners = data.get('winners') or {}
    if not isinstance(winners, dict):
        raise InvalidInput("'winners' must map match codes to team ids")
    bracket = build_custom_playoff(teams, config)
    matches = reseed_preliminary_finals(bracket, winners)
    return jsonify({'success': True, 'matches': [m.to_dict() for m in matches]})


if __name__ == '__main__':
    logging.basicConfig(level=LOG_LEVEL)
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
