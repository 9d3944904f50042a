####################################
# --- Request/response schemas --- #
####################################

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self


class ListingFormat(str, Enum):
    """Body formats offered by `GET /files/v1`."""
    TEXT = "text"
    JSON = "json"


class GetFilesResponse(BaseModel):
    """Response model for `GET /files/v1?format=json`."""
    files: List[str] = Field(description="Stored file names, in storage enumeration order.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "files": ["report.csv", "a.txt"],
            }
        }
    )


class FailureKind(str, Enum):
    """Everything that can go wrong with a request, as the client sees it."""
    NOT_FOUND = "not_found"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INVALID_REQUEST = "invalid_request"
    STORAGE = "storage"
    INTERNAL = "internal"


class Failure(BaseModel):
    """A tagged failure plus a human-readable detail."""
    kind: FailureKind
    detail: str = ""

    model_config = ConfigDict(frozen=True)


class Outcome(BaseModel):
    """Result of a handler: a value on success, a Failure otherwise."""
    value: Any = None
    failure: Optional[Failure] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def check_value_and_failure_are_mutually_exclusive(self) -> Self:
        if self.failure is not None and self.value is not None:
            raise ValueError("an outcome carries either a value or a failure, not both")
        return self

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: Any = None) -> "Outcome":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, detail: str = "") -> "Outcome":
        return cls(failure=Failure(kind=kind, detail=detail))
