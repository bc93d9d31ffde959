from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from src.api.repositories import (
    CategoryNotFoundError,
    InMemoryRepository,
    TaskNotFoundError,
    get_repository,
    reset_repository,
)
from src.api.routers.sync import get_sync_monitor
from src.api.schemas import CategoryCreate, TaskCreate, TaskUpdate


def add_task(repo, category_id, title, **extra):
    return repo.create_task(
        TaskCreate(title=title, due_date=datetime(2099, 1, 1), category_id=category_id, **extra)
    )


class TestSnapshot:
    def test_groups_tasks_in_insertion_order(self):
        repo = InMemoryRepository()
        work = repo.create_category(CategoryCreate(name="Work"))
        home = repo.create_category(CategoryCreate(name="Home"))
        add_task(repo, home["id"], "Dishes")
        add_task(repo, work["id"], "Report")
        add_task(repo, work["id"], "Email")

        snap = repo.snapshot()
        assert [s.category["name"] for s in snap] == ["Work", "Home"]
        assert [t["title"] for t in snap[0].tasks] == ["Report", "Email"]
        assert [t["title"] for t in snap[1].tasks] == ["Dishes"]

    def test_snapshot_is_a_copy(self):
        repo = InMemoryRepository()
        cat = repo.create_category(CategoryCreate(name="Work"))
        task = add_task(repo, cat["id"], "Report")

        snap = repo.snapshot()
        snap[0].tasks[0]["title"] = "changed"
        snap[0].category["name"] = "changed"
        assert repo.get_task(task["id"])["title"] == "Report"
        assert repo.get_category(cat["id"])["name"] == "Work"


class TestMutations:
    def test_unknown_category(self):
        repo = InMemoryRepository()
        with pytest.raises(CategoryNotFoundError):
            add_task(repo, 42, "Orphan")

        cat = repo.create_category(CategoryCreate(name="Work"))
        task = add_task(repo, cat["id"], "Report")
        with pytest.raises(CategoryNotFoundError):
            repo.update_task(task["id"], TaskUpdate(category_id=99))

    def test_toggle_and_delete_tasks(self):
        repo = InMemoryRepository()
        cat = repo.create_category(CategoryCreate(name="Work"))
        a = add_task(repo, cat["id"], "A")
        b = add_task(repo, cat["id"], "B", completed=True)

        assert repo.toggle_task(a["id"])["completed"] is True
        assert repo.toggle_task(b["id"])["completed"] is False
        with pytest.raises(TaskNotFoundError):
            repo.toggle_task(999)

        assert repo.delete_tasks([a["id"], b["id"], 999]) == 2
        assert repo.snapshot()[0].tasks == ()

    def test_seed_sample_data_skips_existing_personal(self):
        repo = InMemoryRepository()
        repo.create_category(CategoryCreate(name="Personal"))
        assert repo.seed_sample_data() is False
        assert [c["name"] for c in repo.list_categories()] == ["Personal"]


class TestDueDateInput:
    def test_offsets_are_stored_as_local_naive(self):
        zulu = TaskCreate(title="A", due_date="2099-01-01T09:00:00Z", category_id=1)
        offset = TaskCreate(title="B", due_date="2099-01-01T10:00:00+01:00", category_id=1)
        aware = datetime(2099, 1, 1, 9, tzinfo=timezone.utc)
        assert zulu.due_date.tzinfo is None
        assert zulu.due_date == offset.due_date == aware.astimezone().replace(tzinfo=None)

    def test_aware_update_compares_with_naive(self):
        upd = TaskUpdate(due_date=datetime(2099, 1, 1, tzinfo=timezone(timedelta(hours=-5))))
        assert upd.due_date.tzinfo is None
        assert upd.due_date > datetime(2098, 12, 31)


class TestSharedInstances:
    def test_concurrent_first_calls_share_one_repository(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            repos = list(pool.map(lambda _: get_repository(), range(64)))
        assert all(r is repos[0] for r in repos)

        repos[0].create_category(CategoryCreate(name="Work"))
        reset_repository()
        assert get_repository() is not repos[0]
        assert get_repository().list_categories() == []

    def test_concurrent_first_calls_share_one_monitor(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            monitors = list(pool.map(lambda _: get_sync_monitor(), range(64)))
        assert all(m is monitors[0] for m in monitors)
