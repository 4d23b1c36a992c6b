"""Exceptions raised by graph-ids."""


class GraphIDSError(Exception):
    """Base class for all graph-ids errors."""


class InvalidInputError(GraphIDSError, ValueError):
    """Raised when a graph or its producer violates the input contract."""
