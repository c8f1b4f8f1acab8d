"""Input validation package."""

from society.validation.validator import RecordValidator, ValidationError

__all__ = ["RecordValidator", "ValidationError"]
