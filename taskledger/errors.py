"""Errors raised by project views."""


class InvalidScopeError(RuntimeError):
    """An operation was called on a view that does not own the requested scope."""


class PageOutOfBoundsError(RuntimeError):
    """The requested page lies outside the collection."""
