"""
Exception hierarchy for package metadata parsing.

Every failure raised by the tokenizer, the record builder and the
version/dependency models derives from PkgbuildError, which is itself a
ValueError so callers that only care about "bad input" can catch that.
"""


class PkgbuildError(ValueError):
    """Base class for all parse, validation and constraint failures."""


class TokenizeError(PkgbuildError):
    """The raw text could not be tokenized (halts the token stream)."""

    def __init__(self, message: str, position: int | None = None):
        super().__init__(message)
        self.position = position

    def __str__(self) -> str:
        message = super().__str__()
        if self.position is None:
            return message
        return f"{message} (at offset {self.position})"


class ValidationError(PkgbuildError):
    """A finished package record is missing or has an invalid required field."""


class ConstraintError(PkgbuildError):
    """A version or dependency constraint string is malformed."""
