from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union
from uuid import UUID

from .models import Filter, Task, TaskCollection

TaskId = Union[str, UUID]


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """
    Abstract repository contract for task storage backends.

    Implementations own identifier and timestamp generation and raise
    TaskRepositoryError (never raw storage errors) on failure. Every
    operation takes an optional timeout in seconds; a statement still running
    when it expires is aborted and reported as a TaskRepositoryError.
    """

    @abstractmethod
    def fetch(self, task_filter: Filter, timeout: Optional[float] = None) -> TaskCollection:
        """Return a window of tasks ordered by creation time and the total row count."""

    @abstractmethod
    def get_by_id(self, task_id: TaskId, timeout: Optional[float] = None) -> Task:
        """Return a Task by id. Raises not_found when missing."""

    @abstractmethod
    def insert(self, task: Task, timeout: Optional[float] = None) -> Task:
        """Assign id and timestamps, persist the task and return it."""

    @abstractmethod
    def update(self, task_id: TaskId, task: Task, timeout: Optional[float] = None) -> Task:
        """Overwrite title/description of an existing task and refresh updated_at."""

    @abstractmethod
    def delete(self, task_id: TaskId, timeout: Optional[float] = None) -> None:
        """Delete a task by id. Raises not_found when missing."""
