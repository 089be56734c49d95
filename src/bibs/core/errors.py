"""Error types shared by the simulation core."""

from __future__ import annotations


class NotFoundError(KeyError):
    """A relationship, activation, performed-behaviour or coefficient is missing.

    Raised instead of substituting a default value. Subclasses ``KeyError``
    so generic mapping-lookup handlers still catch it.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message
