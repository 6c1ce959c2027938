"""
Mutable tournament state owned by the caller: manual points and recorded scores.

Also holds the JSON interchange document ({points, matches}) and the parsing
helpers for the admin roster/court text fields.
"""
import json
import re
from datetime import date
from typing import Dict, List, Optional

from .exceptions import InvalidStateDocument
from .models import MatchKey
from .scoring import SIDES, clamp_score

DEFAULT_COURT_PREFIX = 'Saha'

# Score keys written by the browser version's export.
LEGACY_SIDES = {'team_a': 't1', 'team_b': 't2'}


class TournamentState:
    def __init__(self, points=None, matches=None):
        self.points: Dict[str, int] = dict(points) if points else {}
        self.matches: Dict[MatchKey, Dict[str, int]] = dict(matches) if matches else {}

    def __eq__(self, other):
        if not isinstance(other, TournamentState):
            return NotImplemented
        return self.points == other.points and self.matches == other.matches

    def __repr__(self):
        return f"TournamentState(points={self.points}, matches={len(self.matches)} recorded)"


def coerce_int(value) -> int:
    """Numeric input to int; anything else becomes 0."""
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def record_score(state: TournamentState, key: MatchKey, side: str, value) -> Dict[str, int]:
    """Write one side of a match score, clamped to [0, 32]."""
    if side not in SIDES:
        raise ValueError(f"Unknown side {side!r}, expected one of {SIDES}")
    current = state.matches.get(key) or {'team_a': 0, 'team_b': 0}
    updated = {**{'team_a': 0, 'team_b': 0}, **current, side: clamp_score(value)}
    state.matches[key] = updated
    return updated


def set_adjustment(state: TournamentState, player: str, value) -> int:
    state.points[player] = coerce_int(value)
    return state.points[player]


def reset_points(players) -> Dict[str, int]:
    return {player: 0 for player in players}


def carry_over_points(points, players) -> Dict[str, int]:
    """Keep adjustments of players still on the roster; new players start at 0."""
    points = points or {}
    return {player: points.get(player) or 0 for player in players}


def reset_state(state: TournamentState, players) -> TournamentState:
    state.points = reset_points(players)
    state.matches = {}
    return state


# ========== Interchange document ==========


def state_to_document(state: TournamentState) -> dict:
    return {
        'points': dict(state.points),
        'matches': {
            str(key): {'team_a': record.get('team_a', 0), 'team_b': record.get('team_b', 0)}
            for key, record in state.matches.items()
        },
    }


def _parse_points(raw) -> Dict[str, int]:
    if not isinstance(raw, dict):
        raise InvalidStateDocument("'points' must be an object mapping player to number.")
    return {str(player): coerce_int(value) for player, value in raw.items()}


def _parse_matches(raw) -> Dict[MatchKey, Dict[str, int]]:
    if not isinstance(raw, dict):
        raise InvalidStateDocument("'matches' must be an object keyed by match key.")
    matches = {}
    for text_key, record in raw.items():
        try:
            key = MatchKey.parse(text_key)
        except ValueError as e:
            raise InvalidStateDocument(str(e)) from e
        if not isinstance(record, dict):
            raise InvalidStateDocument(f"Score for {text_key!r} must be an object.")
        if not any(side in record or LEGACY_SIDES[side] in record for side in SIDES):
            raise InvalidStateDocument(f"Score for {text_key!r} has neither team_a nor team_b.")
        matches[key] = {
            side: clamp_score(record[side] if side in record else record.get(LEGACY_SIDES[side], 0))
            for side in SIDES
        }
    return matches


def parse_document(data) -> dict:
    """
    Validate a decoded document and return only the sections it contains.

    Returns: {'points': {...}} and/or {'matches': {MatchKey: {...}}}
    """
    if not isinstance(data, dict):
        raise InvalidStateDocument("State document must be a JSON object.")
    sections = {}
    if data.get('points') is not None:
        sections['points'] = _parse_points(data['points'])
    if data.get('matches') is not None:
        sections['matches'] = _parse_matches(data['matches'])
    return sections


def decode_document(text) -> dict:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise InvalidStateDocument(f"Could not read state document: {e}") from e


def state_from_document(data) -> TournamentState:
    sections = parse_document(data)
    return TournamentState(sections.get('points'), sections.get('matches'))


def load_document(text) -> TournamentState:
    """Decode JSON text into a new TournamentState. Raises InvalidStateDocument."""
    return state_from_document(decode_document(text))


def apply_document(state: TournamentState, document) -> TournamentState:
    """
    Replace the sections present in the document (JSON text or decoded dict).

    The whole document is validated before the state is touched.
    """
    data = decode_document(document) if isinstance(document, (str, bytes, bytearray)) else document
    sections = parse_document(data)
    if 'points' in sections:
        state.points = sections['points']
    if 'matches' in sections:
        state.matches = sections['matches']
    return state


def dump_document(state: TournamentState) -> str:
    return json.dumps(state_to_document(state), indent=2, ensure_ascii=False)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"americano-score-{today.isoformat()}.json"


# ========== Admin text fields ==========


def parse_players_text(text) -> List[str]:
    """One player per line; blanks dropped, duplicates keep first occurrence."""
    names = [line.strip() for line in re.split(r'\r?\n', text or '')]
    return list(dict.fromkeys(name for name in names if name))


def parse_courts_text(text) -> List[str]:
    return [name.strip() for name in (text or '').split(',') if name.strip()]


def default_court_names(count: int) -> List[str]:
    return [f"{DEFAULT_COURT_PREFIX} {i}" for i in range(1, max(1, count) + 1)]
