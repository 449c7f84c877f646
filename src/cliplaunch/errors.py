"""Exception types raised by the launcher core."""

from __future__ import annotations


class CliplaunchError(Exception):
    """Base class for launcher errors."""


class FormValidationError(CliplaunchError):
    """A form update would produce an invalid record; the stored form is unchanged."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
