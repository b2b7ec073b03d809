"""Exception types raised inside NodeScout."""


class NodeScoutError(Exception):
    """Base class for NodeScout errors."""


class StoreError(NodeScoutError):
    """Key-value store could not be read or written."""
