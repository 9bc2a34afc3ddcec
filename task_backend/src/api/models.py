from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Mapping, Optional
from uuid import UUID

logger = logging.getLogger(__name__)

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10
# Bound parameters are stored as signed 64-bit integers.
MAX_INT_PARAM = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")


# PUBLIC_INTERFACE
@dataclass
class Task:
    """
    A single to-do item.

    Fields:
    - title: Short title, required (non-blank after trimming)
    - description: Detailed description, required (non-blank after trimming)
    - id: UUID assigned by the repository on insert
    - created_at: Set once on insert
    - updated_at: Equal to created_at on insert, refreshed on every update
    """

    title: str = ""
    description: str = ""
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# PUBLIC_INTERFACE
@dataclass
class TaskCollection:
    """A page of tasks plus the total number of rows in storage."""

    data: List[Task] = field(default_factory=list)
    total: int = 0


def _int_param(params: Mapping[str, str], key: str, default: int, log: logging.Logger) -> int:
    raw = params.get(key)
    if raw is None or raw == "":
        return default
    if not _INT_RE.fullmatch(raw):
        log.warning("Invalid query parameter %s=%r, using %d", key, raw, default)
        return default
    if raw.startswith("-"):
        log.warning("Negative query parameter %s=%s, using %d", key, raw, default)
        return default
    # Length first: int() refuses very long digit strings.
    if len(raw.lstrip("+0")) > len(str(MAX_INT_PARAM)) or int(raw) > MAX_INT_PARAM:
        log.warning("Query parameter %s=%s out of range, using %d", key, raw, default)
        return default
    return int(raw)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Filter:
    """
    Pagination parameters for listing tasks.

    sort_by is accepted and echoed but ordering is always by creation time.
    """

    offset: int = DEFAULT_OFFSET
    limit: int = DEFAULT_LIMIT
    sort_by: str = ""

    @classmethod
    def from_query_params(
        cls, params: Mapping[str, str], log: Optional[logging.Logger] = None
    ) -> "Filter":
        """
        Build a Filter from query string values.

        Malformed numbers never fail the request: they are logged and the
        default is used instead.
        """
        log = log or logger
        return cls(
            offset=_int_param(params, "offset", DEFAULT_OFFSET, log),
            limit=_int_param(params, "limit", DEFAULT_LIMIT, log),
            sort_by=params.get("sort_by") or "",
        )
