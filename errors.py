"""Errors surfaced to the user as a status line."""


class ColumnCompareError(Exception):
    """Base error; `message` is shown to the user, `code` is for logs and JSON."""

    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code or "ERROR"
        self.details = details or {}

    def __str__(self):
        return self.message


class LoadError(ColumnCompareError):
    """The uploaded bytes could not be read as a spreadsheet."""


class ComparisonError(ColumnCompareError):
    """A selection could not be resolved against the loaded workbook."""
