from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


# PUBLIC_INTERFACE
class AppError(Exception):
    """
    Application error carrying an HTTP-like status code and a human message.

    Anything raised that is not an AppError is treated as an unexpected failure
    and reported to clients as a generic 500.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def details(self) -> Optional[Any]:
        return None


class ValidationError(AppError):
    """Malformed, missing or out-of-range input."""

    status_code = 400

    def __init__(self, errors: Sequence[FieldError], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors: List[FieldError] = list(errors)

    @property
    def details(self) -> List[Dict[str, str]]:
        return [e.to_dict() for e in self.errors]

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        return f"{self.message}: " + "; ".join(f"{e.field}: {e.message}" for e in self.errors)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(AppError):
    """Business-rule rejection, e.g. a duplicate title within a subject."""

    status_code = 409


class InternalError(AppError):
    status_code = 500
