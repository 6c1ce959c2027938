"""
Fixture generation: rotating doubles pairings across rounds, slots and courts.

Every slot benches the players that do not fit on the courts, then rotates
the remaining players left by the slot index before splitting them into
groups of four (two teams of two) per court. The rotation is the only source
of variety, so the result is fully deterministic.
"""
import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import EmptyAvailablePool, InvalidConfiguration
from .models import Match

logger = logging.getLogger(__name__)

PLAYERS_PER_COURT = 4
MIN_PLAYERS = PLAYERS_PER_COURT


def validate_configuration(players: Sequence[str], rounds: int, slots_per_round: int, courts: Sequence[str]):
    """Reject inputs that cannot produce a fixture."""
    if not players:
        raise InvalidConfiguration("Roster is empty.")
    if len(set(players)) != len(players):
        duplicates = sorted({p for p in players if list(players).count(p) > 1})
        raise InvalidConfiguration(f"Roster contains duplicate players: {', '.join(map(str, duplicates))}")
    if len(players) < MIN_PLAYERS:
        raise InvalidConfiguration(
            f"At least {MIN_PLAYERS} players are required to form one match, got {len(players)}."
        )
    if isinstance(rounds, bool) or not isinstance(rounds, int) or rounds < 1:
        raise InvalidConfiguration(f"Round count must be a positive integer, got {rounds!r}.")
    if isinstance(slots_per_round, bool) or not isinstance(slots_per_round, int) or slots_per_round < 1:
        raise InvalidConfiguration(f"Slots per round must be a positive integer, got {slots_per_round!r}.")
    if not courts:
        raise InvalidConfiguration("At least one court is required.")
    if len(set(courts)) != len(courts):
        raise InvalidConfiguration("Court names must be unique.")


def bench_size_for(player_count: int, court_count: int) -> int:
    """Number of players sitting out each slot."""
    return max(0, player_count - court_count * PLAYERS_PER_COURT)


def rotate(items: Sequence, offset: int) -> list:
    """Rotate left by offset: rotate([a, b, c], 1) == [b, c, a]."""
    items = list(items)
    if not items:
        return items
    offset %= len(items)
    return items[offset:] + items[:offset]


def select_bench(players: Sequence[str], slot_index: int, bench_size: int) -> List[str]:
    """Pick bench_size consecutive players (wrapping) starting at slot_index * bench_size."""
    n = len(players)
    return [players[(slot_index * bench_size + k) % n] for k in range(bench_size)]


def _assign_slot(players, round_number, slot, slot_index, courts) -> List[Match]:
    bench = select_bench(players, slot_index, bench_size_for(len(players), len(courts)))
    benched = set(bench)
    available = [p for p in players if p not in benched]
    if not available:
        raise EmptyAvailablePool(
            f"Every player is benched in round {round_number}, slot {slot}."
        )

    rotated = rotate(available, slot_index % len(available))

    # Only fully staffed courts are used; leftovers sit out with the bench.
    usable_courts = min(len(courts), len(rotated) // PLAYERS_PER_COURT)
    if usable_courts < len(courts):
        logger.warning(
            "Round %d slot %d: only %d of %d courts can be filled with %d available players",
            round_number, slot, usable_courts, len(courts), len(rotated),
        )
    leftover = rotated[usable_courts * PLAYERS_PER_COURT:]
    slot_bench = tuple(bench) + tuple(leftover)

    matches = []
    for c in range(usable_courts):
        base = c * PLAYERS_PER_COURT
        matches.append(Match(
            round=round_number,
            slot=slot,
            court=courts[c],
            team_a=rotated[base:base + 2],
            team_b=rotated[base + 2:base + 4],
            benched=slot_bench,
        ))
    return matches


def generate_fixture(players, rounds, slots_per_round, courts) -> List[Match]:
    """
    Generate the full fixture for a roster.

    Matches are ordered by round, then slot, then court (in court-list order).
    Raises InvalidConfiguration for unusable inputs and EmptyAvailablePool if
    a slot would have nobody to play.
    """
    players = list(players)
    courts = list(courts)
    validate_configuration(players, rounds, slots_per_round, courts)

    fixture = []
    for round_number in range(1, rounds + 1):
        for slot in range(1, slots_per_round + 1):
            slot_index = (round_number - 1) * slots_per_round + (slot - 1)
            fixture.extend(_assign_slot(players, round_number, slot, slot_index, courts))

    logger.debug(
        "Generated %d matches for %d players (%d rounds x %d slots, %d courts)",
        len(fixture), len(players), rounds, slots_per_round, len(courts),
    )
    return fixture


def matches_by_slot(fixture: Sequence[Match]) -> Dict[Tuple[int, int], List[Match]]:
    """Group matches by (round, slot), preserving fixture order."""
    grouped = OrderedDict()
    for match in fixture:
        grouped.setdefault((match.round, match.slot), []).append(match)
    return grouped


def filter_fixture(fixture: Sequence[Match], round: Optional[int] = None,
                   slot: Optional[int] = None, court: Optional[str] = None) -> List[Match]:
    """Select matches by round/slot/court, sorted by slot then court name."""
    selected = [
        m for m in fixture
        if (round is None or m.round == round)
        and (slot is None or m.slot == slot)
        and (court is None or m.court == court)
    ]
    return sorted(selected, key=lambda m: (m.round, m.slot, m.court))
