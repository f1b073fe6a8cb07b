from __future__ import annotations

from typing import Any, Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every domain error is recoverable: controllers turn it into a response
    and keep serving.
    """

    code = "domain_error"

    def __init__(self, message: str, *, context: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


class ValidationError(DomainError):
    """Raised when input data is malformed (date, id, range, payload shape)."""

    code = "validation_error"


class NotFoundError(DomainError):
    """Raised when a form or employee does not exist."""

    code = "not_found"


class ConflictError(DomainError):
    """Raised on duplicate creation or a repeated once-only action."""

    code = "conflict"


class DuplicateFormError(ConflictError):
    """A form already exists for this (employee, date)."""


class AlreadySubmittedError(ConflictError):
    """Today's form was already submitted."""


class ForbiddenError(DomainError):
    """Raised when the caller lacks the role, or the form is locked for them."""

    code = "forbidden"


class StateError(DomainError):
    """Raised when a transition is not valid from the form's current state."""

    code = "invalid_state"


class PersistenceError(Exception):
    """The storage backend is unavailable.

    Infrastructure failure, deliberately not a DomainError.
    """
