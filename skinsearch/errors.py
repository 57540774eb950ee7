"""
Exceptions raised by the catalog store and the search engine.
"""


class CatalogError(Exception):
    """Base class for catalog and search failures."""


class CatalogUnavailableError(CatalogError):
    """The catalog snapshot is missing, unreadable or not loaded yet."""


class SearchError(CatalogError):
    """A search could not be completed. Never carries partial results."""
