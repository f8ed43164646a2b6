"""Error type shared by guards, entities and services."""

from enum import Enum


class ErrorKind(Enum):
    """Categories of rejected input."""

    BLANK = "blank"
    OUT_OF_RANGE = "out_of_range"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    REFERENTIAL_INTEGRITY = "referential_integrity"
    UNDERFLOW = "underflow"
    UNKNOWN_MODEL = "unknown_model"


class ValidationError(Exception):
    """Raised when input violates a domain rule."""

    def __init__(self, message: str, kind: ErrorKind):
        self.message = message
        self.kind = kind
        super().__init__(self.message)
