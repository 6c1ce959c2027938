"""
Scoring: per-player match points, leaderboard ordering and opponent diversity.

Each player earns their team's score in every match they play. The team that
reaches exactly 32 while the other side stays at 31 or below also earns a
flat bonus per player.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .models import Match

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 32
WINNER_BONUS = 10
SIDES = ('team_a', 'team_b')


def clamp_score(value) -> int:
    """Coerce a raw score to an int in [0, 32]; non-numeric input counts as 0."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        number = 0
    return max(MIN_SCORE, min(MAX_SCORE, number))


def winning_side(team_a_points, team_b_points) -> Optional[str]:
    """Return 'team_a', 'team_b' or None. 32-32 has no winner."""
    a = clamp_score(team_a_points)
    b = clamp_score(team_b_points)
    if a == MAX_SCORE and b < MAX_SCORE:
        return 'team_a'
    if b == MAX_SCORE and a < MAX_SCORE:
        return 'team_b'
    return None


def is_valid_result(team_a_points, team_b_points) -> bool:
    """A result is complete when exactly one side reached 32."""
    return winning_side(team_a_points, team_b_points) is not None


def _roster_from_fixture(fixture: Sequence[Match]) -> List[str]:
    seen = {}
    for match in fixture:
        for player in match.players + match.benched:
            seen.setdefault(player, None)
    return list(seen)


def calculate_match_points(fixture: Sequence[Match], scores: Mapping) -> Dict[str, int]:
    """
    Sum team points plus winner bonuses for every player in the fixture.

    scores maps MatchKey -> {'team_a': int, 'team_b': int}; missing matches
    count as 0-0.
    """
    award = {player: 0 for player in _roster_from_fixture(fixture)}
    for match in fixture:
        record = scores.get(match.key) or {}
        a = clamp_score(record.get('team_a', 0))
        b = clamp_score(record.get('team_b', 0))

        for player in match.team_a:
            award[player] += a
        for player in match.team_b:
            award[player] += b

        winner = winning_side(a, b)
        if winner is not None:
            for player in getattr(match, winner):
                award[player] += WINNER_BONUS
    return award


def collect_opponents(fixture: Sequence[Match]) -> Dict[str, List[str]]:
    """Distinct opponents faced by each player, regardless of recorded scores."""
    faced = {player: set() for player in _roster_from_fixture(fixture)}
    for match in fixture:
        for a in match.team_a:
            faced[a].update(match.team_b)
        for b in match.team_b:
            faced[b].update(match.team_a)
    return {player: sorted(opponents) for player, opponents in faced.items()}


def opponent_diversity(opponents: Mapping[str, List[str]], players: Sequence[str]) -> List[dict]:
    """Per-player opponent list and count, in roster order."""
    return [
        {
            'player': player,
            'opponent_count': len(opponents.get(player, [])),
            'opponents': list(opponents.get(player, [])),
        }
        for player in players
    ]


def build_leaderboard(players: Sequence[str], match_points: Mapping[str, int],
                      adjustments: Mapping[str, int]) -> List[dict]:
    """
    Rank every roster player by total points (descending), ties by name.

    Returns: [{'player', 'manual_points', 'match_points', 'total_points'}, ...]
    """
    rows = []
    for player in players:
        manual = adjustments.get(player) or 0
        auto = match_points.get(player, 0)
        rows.append({
            'player': player,
            'manual_points': manual,
            'match_points': auto,
            'total_points': manual + auto,
        })
    return sorted(rows, key=lambda r: (-r['total_points'], r['player']))


def compute_scoring(fixture: Sequence[Match], scores: Mapping, adjustments: Mapping,
                    players: Optional[Sequence[str]] = None) -> dict:
    """
    Evaluate the leaderboard and opponent record for a fixture.

    When players is omitted the roster is taken from the fixture in order of
    first appearance.
    """
    if players is None:
        players = _roster_from_fixture(fixture)
    match_points = calculate_match_points(fixture, scores)
    leaderboard = build_leaderboard(players, match_points, adjustments)
    opponents = collect_opponents(fixture)
    logger.debug("Scored %d matches for %d players", len(fixture), len(players))
    return {
        'leaderboard': leaderboard,
        'opponents': {player: opponents.get(player, []) for player in players},
    }
