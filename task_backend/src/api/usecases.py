"""
Task use cases.

The use case sits between the HTTP routers and the repository. Today every
operation delegates straight to the repository, results and errors alike;
rules that span more than storage (auditing, derived fields) belong here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from .models import Filter, Task, TaskCollection
from .repositories import TaskId, TaskRepository


# PUBLIC_INTERFACE
class TaskUseCase(ABC):
    """Operations the delivery layer may call on tasks."""

    @abstractmethod
    def fetch(self, task_filter: Filter, timeout: Optional[float] = None) -> TaskCollection:
        """List a window of tasks plus the total count."""

    @abstractmethod
    def get_by_id(self, task_id: TaskId, timeout: Optional[float] = None) -> Task:
        """Return one task."""

    @abstractmethod
    def insert(self, task: Task, timeout: Optional[float] = None) -> Task:
        """Persist a new task."""

    @abstractmethod
    def update(self, task_id: TaskId, task: Task, timeout: Optional[float] = None) -> Task:
        """Overwrite an existing task."""

    @abstractmethod
    def delete(self, task_id: TaskId, timeout: Optional[float] = None) -> None:
        """Remove a task."""


class TaskService(TaskUseCase):
    """Pass-through use case backed by a TaskRepository."""

    def __init__(self, repository: TaskRepository, logger: Optional[logging.Logger] = None) -> None:
        self._repo = repository
        self._log = logger or logging.getLogger(__name__)

    def fetch(self, task_filter: Filter, timeout: Optional[float] = None) -> TaskCollection:
        self._log.debug("Fetching tasks offset=%d limit=%d", task_filter.offset, task_filter.limit)
        return self._repo.fetch(task_filter, timeout=timeout)

    def get_by_id(self, task_id: TaskId, timeout: Optional[float] = None) -> Task:
        return self._repo.get_by_id(task_id, timeout=timeout)

    def insert(self, task: Task, timeout: Optional[float] = None) -> Task:
        return self._repo.insert(task, timeout=timeout)

    def update(self, task_id: TaskId, task: Task, timeout: Optional[float] = None) -> Task:
        return self._repo.update(task_id, task, timeout=timeout)

    def delete(self, task_id: TaskId, timeout: Optional[float] = None) -> None:
        self._repo.delete(task_id, timeout=timeout)
