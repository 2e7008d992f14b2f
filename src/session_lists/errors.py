from __future__ import annotations


class ListStoreError(Exception):
    """Base class for errors raised by the session list store."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidName(ListStoreError):
    """A list or todo name is outside the allowed length."""


class DuplicateName(ListStoreError):
    """Another list in the session already has this name."""


class NotFound(ListStoreError):
    """The referenced list or todo does not exist."""


class InvalidIdentifier(ListStoreError):
    """A path segment could not be parsed as a decimal identifier."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Invalid identifier: {raw!r}")
        self.raw = raw
