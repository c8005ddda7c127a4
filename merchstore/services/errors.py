from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ServiceError(RuntimeError):
    """Failure raised by the service layer.

    ``kind`` decides how the transport reports the failure; ``details`` holds
    the offending keys (ids, quantities, field errors) and is merged into the
    response payload as-is.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = dict(details or {})

    @classmethod
    def validation(cls, message: str, **details: Any) -> "ServiceError":
        return cls(ErrorKind.VALIDATION, message, details)

    @classmethod
    def not_found(cls, message: str, **details: Any) -> "ServiceError":
        return cls(ErrorKind.NOT_FOUND, message, details)

    @classmethod
    def conflict(cls, message: str, **details: Any) -> "ServiceError":
        return cls(ErrorKind.CONFLICT, message, details)

    @classmethod
    def internal(cls, message: str, **details: Any) -> "ServiceError":
        return cls(ErrorKind.INTERNAL, message, details)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ServiceError {self.kind.value}: {self.message}>"
