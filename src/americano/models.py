"""
Data models for fixtures: match keys and matches.
"""
from typing import NamedTuple, Tuple


class MatchKey(NamedTuple):
    """Identity of a match within one fixture: (round, slot, court)."""
    round: int
    slot: int
    court: str

    def __str__(self):
        return f"{self.round}-{self.slot}-{self.court}"

    @classmethod
    def parse(cls, text):
        """Inverse of str(key). Court labels may themselves contain '-'."""
        parts = str(text).split('-', 2)
        if len(parts) != 3:
            raise ValueError(f"Not a match key: {text!r}")
        round_part, slot_part, court = parts
        return cls(int(round_part), int(slot_part), court)


class Match:
    def __init__(self, round, slot, court, team_a, team_b, benched=()):
        self.round = round
        self.slot = slot
        self.court = court
        self.team_a = tuple(team_a)
        self.team_b = tuple(team_b)
        self.benched = tuple(benched)

    @property
    def key(self) -> MatchKey:
        return MatchKey(self.round, self.slot, self.court)

    @property
    def players(self) -> Tuple[str, ...]:
        return self.team_a + self.team_b

    def to_dict(self):
        return {
            'key': str(self.key),
            'round': self.round,
            'slot': self.slot,
            'court': self.court,
            'team_a': list(self.team_a),
            'team_b': list(self.team_b),
            'benched': list(self.benched),
        }

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash((self.key, self.team_a, self.team_b, self.benched))

    def __repr__(self):
        return (f"Match(round={self.round}, slot={self.slot}, court={self.court}, "
                f"team_a={self.team_a}, team_b={self.team_b}, benched={self.benched})")
