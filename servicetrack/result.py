"""Result and error types returned across the public contract."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class ErrorCode(Enum):
    """Error taxonomy for failed operations."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    SERVER_ERROR = "SERVER_ERROR"


@dataclass(frozen=True)
class ServiceError:
    """Structured error carried by a failed Result."""

    code: ErrorCode
    message: str
    details: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


@dataclass(frozen=True)
class Result:
    """Outcome of a gateway or cache operation: data on success, error otherwise."""

    success: bool
    data: Any = None
    error: Optional[ServiceError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls, code: ErrorCode, message: str, details: Optional[List[str]] = None
    ) -> "Result":
        return cls(
            success=False, error=ServiceError(code, message, list(details or []))
        )

    @property
    def code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None
