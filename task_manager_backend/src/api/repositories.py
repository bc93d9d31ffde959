from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from threading import Lock, RLock
from typing import Iterable, List, Optional

from .models import CategoryEntity, CategorySnapshot, TaskEntity
from .schemas import CategoryCreate, CategoryUpdate, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


class CategoryNotFoundError(LookupError):
    """Raised when a task refers to a category that does not exist."""

    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category {category_id} not found")
        self.category_id = category_id


class TaskNotFoundError(LookupError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for category and task storage backends."""

    @abstractmethod
    def create_category(self, data: CategoryCreate) -> CategoryEntity:
        """Create and return a new CategoryEntity."""

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Return a CategoryEntity by id, or None if not found."""

    @abstractmethod
    def list_categories(self) -> List[CategoryEntity]:
        """Return all categories in insertion order."""

    @abstractmethod
    def update_category(self, category_id: int, data: CategoryUpdate) -> Optional[CategoryEntity]:
        """Update provided fields of a category. Return the updated entity or None if not found."""

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """Delete a category and all of its tasks. Return True if deleted, False if not found."""

    @abstractmethod
    def create_task(self, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity. Raises CategoryNotFoundError for unknown categories."""

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update_task(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        """
        Update provided fields of a task. Return the updated entity or None if not found.
        Raises CategoryNotFoundError when moving the task to an unknown category.
        """

    @abstractmethod
    def delete_task(self, task_id: int) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""

    @abstractmethod
    def snapshot(self) -> List[CategorySnapshot]:
        """Return every category with its tasks, both in insertion order."""

    # PUBLIC_INTERFACE
    def toggle_task(self, task_id: int) -> TaskEntity:
        """Flip the completion flag of a task. Raises TaskNotFoundError if it does not exist."""
        task = self.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        updated = self.update_task(task_id, TaskUpdate(completed=not task["completed"]))
        if updated is None:
            raise TaskNotFoundError(task_id)
        return updated

    # PUBLIC_INTERFACE
    def delete_tasks(self, task_ids: Iterable[int]) -> int:
        """Delete several tasks; return how many were actually removed."""
        return sum(1 for task_id in task_ids if self.delete_task(task_id))

    # PUBLIC_INTERFACE
    def seed_sample_data(self) -> bool:
        """
        Insert demo categories and tasks unless a 'Work' or 'Personal' category exists.

        Returns True when data was created.
        """
        names = {c["name"] for c in self.list_categories()}
        if "Work" in names or "Personal" in names:
            logger.info("Sample data already exists")
            return False

        now = datetime.now()
        work = self.create_category(CategoryCreate(name="Work", color="007AFF"))
        personal = self.create_category(CategoryCreate(name="Personal", color="34C759"))
        self.create_category(CategoryCreate(name="Shopping", color="FF9500"))

        samples = [
            TaskCreate(
                title="Finish SwiftData project",
                description="Complete the task manager app with SwiftData",
                due_date=now + timedelta(days=1),
                priority=2,
                category_id=work["id"],
            ),
            TaskCreate(
                title="Buy groceries",
                due_date=now + timedelta(hours=12),
                priority=1,
                completed=True,
                category_id=personal["id"],
            ),
            TaskCreate(
                title="Meeting with team",
                description="Weekly team sync",
                due_date=now + timedelta(days=2),
                priority=3,
                category_id=work["id"],
            ),
        ]
        for sample in samples:
            self.create_task(sample)
        logger.info("Sample data created successfully")
        return True


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    Dicts preserve insertion order, which is the display order of categories and tasks.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._categories: dict[int, CategoryEntity] = {}
        self._tasks: dict[int, TaskEntity] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now()

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def _require_category(self, category_id: int) -> None:
        if category_id not in self._categories:
            raise CategoryNotFoundError(category_id)

    def create_category(self, data: CategoryCreate) -> CategoryEntity:
        entity: CategoryEntity = {
            "id": self._allocate_id(),
            "name": data.name,
            "color": data.color,
            "created_at": self._now(),
        }
        with self._lock:
            self._categories[entity["id"]] = entity
        logger.debug("Created category id=%s name=%r", entity["id"], entity["name"])
        return entity.copy()

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        with self._lock:
            item = self._categories.get(category_id)
            return None if item is None else item.copy()

    def list_categories(self) -> List[CategoryEntity]:
        with self._lock:
            return [c.copy() for c in self._categories.values()]

    def update_category(self, category_id: int, data: CategoryUpdate) -> Optional[CategoryEntity]:
        with self._lock:
            existing = self._categories.get(category_id)
            if existing is None:
                return None
            updated = existing.copy()
            if data.name is not None:
                updated["name"] = data.name
            if data.color is not None:
                updated["color"] = data.color
            self._categories[category_id] = updated
            return updated.copy()

    def delete_category(self, category_id: int) -> bool:
        with self._lock:
            if self._categories.pop(category_id, None) is None:
                return False
            orphans = [tid for tid, t in self._tasks.items() if t["category_id"] == category_id]
            for tid in orphans:
                del self._tasks[tid]
        logger.debug("Deleted category id=%s with %d task(s)", category_id, len(orphans))
        return True

    def create_task(self, data: TaskCreate) -> TaskEntity:
        now = self._now()
        with self._lock:
            self._require_category(data.category_id)
            entity: TaskEntity = {
                "id": self._allocate_id(),
                "title": data.title,
                "description": data.description,
                "due_date": data.due_date,
                "priority": data.priority,
                "completed": data.completed,
                "created_at": now,
                "updated_at": now,
                "category_id": data.category_id,
            }
            self._tasks[entity["id"]] = entity
            return entity.copy()

    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        with self._lock:
            item = self._tasks.get(task_id)
            return None if item is None else item.copy()

    def update_task(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._tasks.get(task_id)
            if existing is None:
                return None
            if data.category_id is not None:
                self._require_category(data.category_id)

            # Update only provided fields
            updated = existing.copy()
            for field in ("title", "description", "due_date", "priority", "completed", "category_id"):
                value = getattr(data, field)
                if value is not None:
                    updated[field] = value  # type: ignore[literal-required]
            updated["updated_at"] = self._now()

            self._tasks[task_id] = updated
            return updated.copy()

    def delete_task(self, task_id: int) -> bool:
        with self._lock:
            return self._tasks.pop(task_id, None) is not None

    def snapshot(self) -> List[CategorySnapshot]:
        with self._lock:
            by_category: dict[int, List[TaskEntity]] = {cid: [] for cid in self._categories}
            for t in self._tasks.values():
                by_category[t["category_id"]].append(t.copy())
            # Return copies to avoid external mutation
            return [
                CategorySnapshot(category=c.copy(), tasks=tuple(by_category[cid]))
                for cid, c in self._categories.items()
            ]


_repository: Optional[Repository] = None
_repository_lock = Lock()


# PUBLIC_INTERFACE
def get_repository() -> Repository:
    """
    Return the process-wide repository, created on first use so every request shares the same store.
    Sync endpoints run in a threadpool, so creation is serialized.
    """
    global _repository
    with _repository_lock:
        if _repository is None:
            _repository = InMemoryRepository()
        return _repository


# PUBLIC_INTERFACE
def reset_repository() -> None:
    """Drop the shared repository; the next get_repository() call starts empty."""
    global _repository
    with _repository_lock:
        _repository = None
