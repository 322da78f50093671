"""
Exception types for firenews.

Inside the aggregation pipeline collaborator failures are carried as result
values; these exceptions are raised only at the edges (startup, ad-hoc
filter and social endpoints) where the web layer maps them to responses.
"""


class FireNewsError(Exception):
    """Base class for all firenews errors."""

    status_code = 500


class ConfigurationError(FireNewsError):
    """Static configuration or data file is missing or invalid."""


class FeedFetchError(FireNewsError):
    """A single feed could not be fetched or parsed."""

    status_code = 502


class FeedFilterError(FireNewsError):
    """The upstream feed of the filter endpoint could not be processed."""

    status_code = 502


class SocialFeedError(FireNewsError):
    """The social feed API returned an error."""

    status_code = 502


class InvalidPatternError(FireNewsError):
    """A caller-supplied regular expression failed to compile."""

    status_code = 400


class UnknownCategoryError(FireNewsError):
    """No category with the requested name is configured."""

    status_code = 404
