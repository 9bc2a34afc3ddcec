"""
FastAPI dependency providers.

Collaborators are built once in main.create_app and stored on app.state;
these functions hand them to the routers.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from fastapi import Request

from .usecases import TaskUseCase


def get_task_use_case(request: Request) -> TaskUseCase:
    return request.app.state.task_use_case


def get_logger(request: Request) -> logging.Logger:
    return request.app.state.logger


REQUEST_TIMEOUT_HEADER = "X-Request-Timeout"


def get_request_timeout(request: Request) -> Optional[float]:
    """
    Deadline, in seconds, for the storage work of this request.

    Taken from the X-Request-Timeout header and capped by QUERY_TIMEOUT.
    Missing, malformed and non-positive header values are ignored. None
    means no deadline.
    """
    configured = request.app.state.settings.query_timeout or None
    raw = request.headers.get(REQUEST_TIMEOUT_HEADER)
    if raw is None:
        return configured
    try:
        requested = float(raw)
    except ValueError:
        request.app.state.logger.warning("Ignoring %s=%r", REQUEST_TIMEOUT_HEADER, raw)
        return configured
    if not math.isfinite(requested) or requested <= 0:
        request.app.state.logger.warning("Ignoring %s=%r", REQUEST_TIMEOUT_HEADER, raw)
        return configured
    return min(requested, configured) if configured else requested
