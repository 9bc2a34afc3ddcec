"""
Errors raised by the task service layers.

Repositories raise TaskRepositoryError tagged with an ErrorKind; the tag is
the only thing that crosses the repository boundary. The delivery layer
raises TaskValidationError for request bodies it refuses.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Stable vocabulary of repository failures."""

    UUID_FORMAT = "uuid_format"
    QUERY_CONTEXT = "query_context"
    QUERY_PREPARE_CTX = "query_prepare_ctx"
    QUERY_EXEC = "query_exec"
    ROW_DATA_TYPES = "row_data_types"
    ROW_CORRUPT = "row_corrupt"
    NOT_FOUND = "not_found"
    CONFLICT_INSERT = "conflict_insert"
    CONFLICT_UPDATE = "conflict_update"
    CONFLICT_DELETE = "conflict_delete"


class TaskRepositoryError(Exception):
    """Raised by repositories. str(error) is the kind tag."""

    def __init__(self, kind: ErrorKind, cause: Optional[BaseException] = None) -> None:
        self.kind = kind
        self.cause = cause
        super().__init__(kind.value)

    def __str__(self) -> str:
        return self.kind.value


class TaskValidationError(Exception):
    """Raised when a request body cannot be turned into a valid Task."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
