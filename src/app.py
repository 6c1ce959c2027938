"""
Flask web application for the Americano organizer.

Persists roster, configuration, manual points and recorded scores as YAML
files in the data directory and re-derives the fixture and leaderboard on
every request.
"""
import os
import json
import io
import yaml
from datetime import date
from filelock import FileLock
from flask import Flask, jsonify, request, Response, send_file
from americano.exceptions import AmericanoError, InvalidStateDocument
from americano.fixture import generate_fixture, filter_fixture, bench_size_for, validate_configuration
from americano.models import MatchKey
from americano.scoring import compute_scoring, opponent_diversity, is_valid_result, SIDES
from americano.state import (
    TournamentState, record_score, set_adjustment, reset_state, carry_over_points,
    state_to_document, state_from_document, apply_document, decode_document, dump_document,
    export_filename, parse_players_text, parse_courts_text, default_court_names, coerce_int,
)

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('AMERICANO_DATA_DIR', os.path.join(BASE_DIR, 'data'))
os.makedirs(DATA_DIR, exist_ok=True)

PLAYERS_FILE = os.path.join(DATA_DIR, 'players.yaml')
PLAYERS_OVERRIDE_FILE = os.path.join(DATA_DIR, 'players_override.yaml')
CONFIG_FILE = os.path.join(DATA_DIR, 'config.yaml')
CONFIG_SHARED_FILE = os.path.join(DATA_DIR, 'config_shared.yaml')
POINTS_FILE = os.path.join(DATA_DIR, 'points.yaml')
MATCHES_FILE = os.path.join(DATA_DIR, 'matches.yaml')
STATE_SECTIONS = ('points', 'matches')

FALLBACK_PLAYERS = ['Mesut', 'Berk', 'Mumtaz', 'Ahmet', 'Erdem', 'Sercan', 'Sezgin', 'Batuhan', 'Emre', 'Okan']

# Held around every load -> modify -> save sequence; reentrant within a thread.
_data_lock = FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)


def _read_yaml(path):
    """Return parsed YAML or None if the file is missing, empty or unreadable."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return None


def _write_yaml(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True)


def _remove_file(path):
    if os.path.exists(path):
        os.remove(path)


def _clean_player_list(data):
    if not isinstance(data, list):
        return []
    return list(dict.fromkeys(str(p).strip() for p in data if p is not None and str(p).strip()))


# ========== Roster ==========


def load_players_override():
    return _clean_player_list(_read_yaml(PLAYERS_OVERRIDE_FILE))


def save_players_override(players):
    _write_yaml(PLAYERS_OVERRIDE_FILE, list(players))


def clear_players_override():
    _remove_file(PLAYERS_OVERRIDE_FILE)


def load_players():
    """Roster precedence: local override > players.yaml > built-in fallback."""
    override = load_players_override()
    if override:
        return override
    shared = _clean_player_list(_read_yaml(PLAYERS_FILE))
    if shared:
        return shared
    app.logger.info('No player list found, using fallback roster')
    return list(FALLBACK_PLAYERS)


# ========== Configuration ==========


def get_default_config():
    """Return default configuration."""
    return {
        'rounds': 5,
        'slots_per_round': 3,
        'courts': default_court_names(2),
    }


def _positive_int(value, default):
    number = coerce_int(value)
    return number if number >= 1 else default


def normalize_config(data):
    """
    Merge raw config with defaults, repairing invalid values.

    Also reads the `weeks`/`slotsPerWeek` keys used by config.json downloads
    of the browser version.
    """
    defaults = get_default_config()
    if not isinstance(data, dict):
        return defaults
    courts = data.get('courts')
    if isinstance(courts, str):
        courts = parse_courts_text(courts)
    elif isinstance(courts, list):
        courts = [str(c).strip() for c in courts if c is not None and str(c).strip()]
    else:
        courts = None
    rounds = data.get('rounds', data.get('weeks'))
    slots = data.get('slots_per_round', data.get('slotsPerWeek'))
    return {
        'rounds': _positive_int(rounds, defaults['rounds']),
        'slots_per_round': _positive_int(slots, defaults['slots_per_round']),
        'courts': courts or defaults['courts'],
    }


def load_config():
    """Config precedence: local config.yaml > shared config_shared.yaml > defaults."""
    for path in (CONFIG_FILE, CONFIG_SHARED_FILE):
        data = _read_yaml(path)
        if isinstance(data, dict) and data:
            return normalize_config(data)
    return get_default_config()


def save_config(config):
    _write_yaml(CONFIG_FILE, normalize_config(config))


def clear_config():
    """Drop the local config so the shared file (or the defaults) apply again."""
    _remove_file(CONFIG_FILE)


def check_config(players, config):
    """Raise InvalidConfiguration unless a fixture can be built from players and config."""
    validate_configuration(players, config['rounds'], config['slots_per_round'], config['courts'])


# ========== Scores and manual points ==========


def load_state():
    """Load manual points and recorded scores into a TournamentState."""
    points = _read_yaml(POINTS_FILE)
    matches = _read_yaml(MATCHES_FILE)
    document = {
        'points': points if isinstance(points, dict) else {},
        'matches': matches if isinstance(matches, dict) else {},
    }
    try:
        return state_from_document(document)
    except InvalidStateDocument as e:
        app.logger.warning(f'Ignoring corrupt saved state: {e}')
        return TournamentState()


def save_state(state, sections=STATE_SECTIONS):
    """Write the given sections of state; the other files are left untouched."""
    document = state_to_document(state)
    paths = {'points': POINTS_FILE, 'matches': MATCHES_FILE}
    for section in sections:
        _write_yaml(paths[section], document[section])


def current_fixture(players=None, config=None):
    players = players if players is not None else load_players()
    config = config or load_config()
    return generate_fixture(players, config['rounds'], config['slots_per_round'], config['courts'])


def _initial_state(players):
    """Saved state, with every roster player present in the points map."""
    state = load_state()
    if not state.points:
        state.points = carry_over_points({}, players)
    return state


@app.errorhandler(AmericanoError)
def handle_domain_error(e):
    app.logger.warning(f'Request rejected: {e}')
    return jsonify({'success': False, 'error': str(e)}), 400


# ========== Routes ==========


@app.route('/')
def index():
    """Summary of the current roster and configuration."""
    players = load_players()
    config = load_config()
    return jsonify({
        'players': players,
        'config': config,
        'waiting_per_slot': bench_size_for(len(players), len(config['courts'])),
        'override_active': bool(load_players_override()),
    })


@app.route('/api/fixture')
def api_fixture():
    """Fixture with recorded scores, optionally filtered by round/slot/court."""
    fixture = current_fixture()
    state = load_state()
    round_filter = request.args.get('round', type=int)
    slot_filter = request.args.get('slot', type=int)
    court_filter = request.args.get('court') or None
    if court_filter == 'all':
        court_filter = None

    matches = []
    for match in filter_fixture(fixture, round=round_filter, slot=slot_filter, court=court_filter):
        record = state.matches.get(match.key) or {'team_a': 0, 'team_b': 0}
        entry = match.to_dict()
        entry['score'] = record
        entry['valid_result'] = is_valid_result(record['team_a'], record['team_b'])
        matches.append(entry)

    return jsonify({
        'rounds': sorted({m.round for m in fixture}),
        'matches': matches,
    })


@app.route('/api/leaderboard')
def api_leaderboard():
    players = load_players()
    fixture = current_fixture(players)
    state = _initial_state(players)
    result = compute_scoring(fixture, state.matches, state.points, players)
    return jsonify({'leaderboard': result['leaderboard']})


@app.route('/api/opponents')
def api_opponents():
    players = load_players()
    fixture = current_fixture(players)
    result = compute_scoring(fixture, {}, {}, players)
    return jsonify({'opponents': opponent_diversity(result['opponents'], players)})


@app.route('/api/scores', methods=['POST'])
def api_record_score():
    """Record one side of a match score."""
    data = request.get_json(silent=True) or {}
    side = data.get('side')
    if side not in SIDES:
        return jsonify({'success': False, 'error': f'side must be one of {", ".join(SIDES)}'}), 400
    try:
        key = MatchKey(int(data.get('round')), int(data.get('slot')), str(data.get('court')))
    except (TypeError, ValueError):
        return jsonify({'success': False, 'error': 'round, slot and court are required'}), 400

    fixture_keys = {m.key for m in current_fixture()}
    if key not in fixture_keys:
        return jsonify({'success': False, 'error': f'Unknown match {key}'}), 404

    with _data_lock:
        state = load_state()
        record = record_score(state, key, side, data.get('value'))
        save_state(state, ('matches',))
    return jsonify({
        'success': True,
        'match_key': str(key),
        'score': record,
        'valid_result': is_valid_result(record['team_a'], record['team_b']),
    })


@app.route('/api/points', methods=['POST'])
def api_manual_points():
    """Set a player's manual point adjustment."""
    data = request.get_json(silent=True) or {}
    player = str(data.get('player') or '').strip()
    players = load_players()
    if player not in players:
        return jsonify({'success': False, 'error': f'Unknown player "{player}"'}), 404
    with _data_lock:
        state = _initial_state(players)
        value = set_adjustment(state, player, data.get('value'))
        save_state(state, ('points',))
    return jsonify({'success': True, 'player': player, 'manual_points': value})


@app.route('/api/settings/update', methods=['POST'])
def api_update_settings():
    """AJAX endpoint for updating settings."""
    data = request.get_json(silent=True) or {}
    with _data_lock:
        config = load_config()

        if 'rounds' in data:
            config['rounds'] = max(1, coerce_int(data['rounds']) or 1)
        if 'slots_per_round' in data:
            config['slots_per_round'] = max(1, coerce_int(data['slots_per_round']) or 1)
        if 'court_count' in data:
            config['courts'] = default_court_names(coerce_int(data['court_count']))
        if 'courts' in data:
            courts = data['courts']
            courts = parse_courts_text(courts) if isinstance(courts, str) else courts
            if not courts:
                return jsonify({'success': False, 'error': 'At least one court is required.'}), 400
            config['courts'] = courts

        config = normalize_config(config)
        check_config(load_players(), config)
        save_config(config)
    return jsonify({'success': True, 'config': load_config()})


@app.route('/api/players/apply', methods=['POST'])
def api_apply_players():
    """Apply a new roster and court list; clears recorded scores."""
    data = request.get_json(silent=True) or {}
    players = parse_players_text(data.get('players_text', ''))
    if not players:
        return jsonify({'success': False, 'error': 'Enter at least one player.'}), 400

    with _data_lock:
        config = load_config()
        courts = parse_courts_text(data['courts_text']) if 'courts_text' in data else config['courts']
        if not courts:
            return jsonify({'success': False, 'error': 'Enter at least one court.'}), 400
        config['courts'] = courts
        check_config(players, config)

        state = load_state()
        state.points = carry_over_points(state.points, players)
        state.matches = {}

        save_config(config)
        save_players_override(players)
        save_state(state)
    app.logger.info(f'Applied roster of {len(players)} players on {len(courts)} courts')
    return jsonify({'success': True, 'players': players, 'config': load_config()})


@app.route('/api/players/override', methods=['POST', 'DELETE'])
def api_players_override():
    if request.method == 'DELETE':
        with _data_lock:
            clear_players_override()
        return jsonify({'success': True, 'players': load_players()})

    data = request.get_json(silent=True) or {}
    players = parse_players_text(data.get('players_text', ''))
    if not players:
        return jsonify({'success': False, 'error': 'Enter at least one player.'}), 400
    with _data_lock:
        check_config(players, load_config())
        save_players_override(players)
    return jsonify({'success': True, 'players': players})


@app.route('/api/config', methods=['DELETE'])
def api_clear_config():
    with _data_lock:
        clear_config()
    return jsonify({'success': True, 'config': load_config()})


@app.route('/api/reset', methods=['POST'])
def api_reset_all():
    """Zero manual points and clear all recorded scores."""
    with _data_lock:
        state = reset_state(load_state(), load_players())
        save_state(state)
    return jsonify({'success': True})


@app.route('/api/export')
def api_export():
    """Download manual points and recorded scores as JSON."""
    buffer = io.BytesIO(dump_document(load_state()).encode('utf-8'))
    return send_file(
        buffer,
        mimetype='application/json',
        as_attachment=True,
        download_name=export_filename(date.today()),
    )


@app.route('/api/import', methods=['POST'])
def api_import():
    """Import a previously exported JSON document, replacing the sections it contains."""
    file = request.files.get('file')
    if file is not None and file.filename:
        text = file.read().decode('utf-8', errors='replace')
    else:
        text = request.get_data(as_text=True)
    if not text:
        return jsonify({'success': False, 'error': 'No file selected.'}), 400

    with _data_lock:
        state = load_state()
        try:
            document = decode_document(text)
            apply_document(state, document)
        except InvalidStateDocument as e:
            app.logger.warning(f'Import rejected: {e}')
            return jsonify({'success': False, 'error': 'Could not read file. Choose a valid JSON document.'}), 400
        save_state(state, [s for s in STATE_SECTIONS if document.get(s) is not None])
    return jsonify({'success': True, **state_to_document(state)})


@app.route('/api/export/players')
def api_export_players():
    return Response(
        _pretty_json(load_players()),
        mimetype='application/json',
        headers={'Content-Disposition': 'attachment; filename=players.json'}
    )


@app.route('/api/export/config')
def api_export_config():
    config = load_config()
    return Response(
        _pretty_json(config),
        mimetype='application/json',
        headers={'Content-Disposition': 'attachment; filename=config.json'}
    )


def _pretty_json(data):
    return json.dumps(data, indent=2, ensure_ascii=False)


if __name__ == '__main__':
    app.run(debug=True, port=5000)
