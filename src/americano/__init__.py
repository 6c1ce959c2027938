"""
Americano fixture generation and scoring.
"""
from .exceptions import (
    AmericanoError,
    EmptyAvailablePool,
    FixtureError,
    InvalidConfiguration,
    InvalidStateDocument,
)
from .fixture import generate_fixture
from .models import Match, MatchKey
from .scoring import compute_scoring
