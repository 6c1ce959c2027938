"""Exceptions raised by the fixture generator and state handling."""


class AmericanoError(Exception):
    """Base exception for all Americano organizer errors."""

    pass


# ========== Fixture Exceptions ==========


class FixtureError(AmericanoError):
    """Base exception for fixture generation errors."""

    pass


class InvalidConfiguration(FixtureError):
    """Raised when the roster, round/slot counts or court list cannot produce a fixture."""

    pass


class EmptyAvailablePool(FixtureError):
    """Raised when every roster member would be benched in a slot."""

    pass


# ========== State Exceptions ==========


class InvalidStateDocument(AmericanoError):
    """Raised when an imported state document is malformed.

    Nothing from the document is applied when this is raised.
    """

    pass
