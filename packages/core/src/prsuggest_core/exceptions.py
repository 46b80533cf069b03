"""Errors raised by the review pipeline outside the pure core."""


class PrSuggestError(Exception):
    """Base class for every error prsuggest raises deliberately."""


class DiffParseError(PrSuggestError):
    """The diff text could not be parsed as a unified diff."""


class SuggestionError(PrSuggestError):
    """The suggestion source failed to produce a usable response."""
