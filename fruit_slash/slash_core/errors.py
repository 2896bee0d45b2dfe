"""
Errors
======

Exception types raised at the boundary between the game core and its
score backend.
"""


class SliceError(Exception):
    """Base class for fruit slash errors."""


class NotAuthenticatedError(SliceError):
    """A score operation was attempted without an authenticated principal."""


class ScoreSubmissionError(SliceError):
    """The score backend could not record a session result."""
