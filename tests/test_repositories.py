"""
Тесты для Repository Layer (доступ к данным).

Проверяем:
- CRUD операции базового репозитория
- Ограничение выборок владельцем (user_id)
- Исключение удалённых задач
- Агрегаты: task_count у категорий, usage_count у тегов
"""

import pytest

from src.models import Category, Task, TaskStatus
from src.repositories import CategoryRepository, TagRepository, TaskRepository, UserRepository

# ============================================================================
# USER REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_user_get_by_email_ignores_case(test_db, user):
    repo = UserRepository(test_db)

    found = await repo.get_by_email("  ANNA@Example.com ")

    assert found is not None
    assert found.id == user.id


@pytest.mark.asyncio
async def test_user_email_taken(test_db, user):
    repo = UserRepository(test_db)

    assert await repo.email_taken("anna@example.com")
    assert not await repo.email_taken("anna@example.com", exclude_user_id=user.id)
    assert not await repo.email_taken("nobody@example.com")


@pytest.mark.asyncio
async def test_user_settings_created_lazily(test_db, user):
    repo = UserRepository(test_db)

    assert await repo.get_settings(user.id) is None

    settings = await repo.get_or_create_settings(user.id)
    again = await repo.get_or_create_settings(user.id)

    assert settings.id == again.id
    assert settings.timezone == "UTC"


# ============================================================================
# CATEGORY REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_category_get_owned(test_db, user, other_user):
    repo = CategoryRepository(test_db)
    category = await repo.create(Category(user_id=user.id, name="Work"))

    assert (await repo.get_owned(category.id, user.id)).name == "Work"
    assert await repo.get_owned(category.id, other_user.id) is None


@pytest.mark.asyncio
async def test_category_get_by_name_case_insensitive(test_db, user):
    repo = CategoryRepository(test_db)
    await repo.create(Category(user_id=user.id, name="Work"))

    assert await repo.get_by_name(user.id, "work") is not None
    assert await repo.get_by_name(user.id, "Home") is None


@pytest.mark.asyncio
async def test_category_task_counts_skip_deleted(test_db, user):
    repo = CategoryRepository(test_db)
    task_repo = TaskRepository(test_db)
    work = await repo.create(Category(user_id=user.id, name="Work"))
    await repo.create(Category(user_id=user.id, name="Home"))

    await task_repo.create(Task(user_id=user.id, title="A", category_id=work.id))
    await task_repo.create(Task(user_id=user.id, title="B", category_id=work.id))
    await task_repo.create(
        Task(user_id=user.id, title="C", category_id=work.id, status=TaskStatus.DELETED)
    )

    counts = {category.name: count for category, count in await repo.get_with_task_counts(user.id)}

    assert counts == {"Home": 0, "Work": 2}


@pytest.mark.asyncio
async def test_category_detach_tasks(test_db, user):
    repo = CategoryRepository(test_db)
    task_repo = TaskRepository(test_db)
    work = await repo.create(Category(user_id=user.id, name="Work"))
    task = await task_repo.create(Task(user_id=user.id, title="A", category_id=work.id))

    detached = await repo.detach_tasks(work.id)
    await test_db.refresh(task)

    assert detached == 1
    assert task.category_id is None


# ============================================================================
# TAG REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_tag_bulk_get_or_create(test_db, user):
    repo = TagRepository(test_db)
    existing = (await repo.bulk_get_or_create(user.id, ["work"]))[0]

    tags = await repo.bulk_get_or_create(user.id, ["urgent", "work", "urgent"])

    assert [tag.name for tag in tags] == ["urgent", "work"]
    assert tags[1].id == existing.id


@pytest.mark.asyncio
async def test_tags_are_scoped_per_user(test_db, user, other_user):
    repo = TagRepository(test_db)
    mine = (await repo.bulk_get_or_create(user.id, ["work"]))[0]
    theirs = (await repo.bulk_get_or_create(other_user.id, ["work"]))[0]

    assert mine.id != theirs.id
    assert (await repo.get_by_name(user.id, "work")).id == mine.id


@pytest.mark.asyncio
async def test_tag_usage_counts_only_active_tasks(test_db, user):
    repo = TagRepository(test_db)
    task_repo = TaskRepository(test_db)
    work, home = await repo.bulk_get_or_create(user.id, ["work", "home"])

    active = await task_repo.create(Task(user_id=user.id, title="A"))
    deleted = await task_repo.create(
        Task(user_id=user.id, title="B", status=TaskStatus.DELETED)
    )
    await task_repo.set_tags(active, [work])
    await task_repo.set_tags(deleted, [work, home])

    assert await repo.usage_count(work.id) == 1
    assert await repo.usage_count(home.id) == 0
    usage = {tag.name: count for tag, count in await repo.get_with_usage(user.id)}
    assert usage == {"home": 0, "work": 1}


# ============================================================================
# TASK REPOSITORY TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_task_get_active(test_db, user, other_user):
    repo = TaskRepository(test_db)
    task = await repo.create(Task(user_id=user.id, title="Mine"))
    deleted = await repo.create(Task(user_id=user.id, title="Gone", status=TaskStatus.DELETED))

    assert (await repo.get_active(task.id, user.id)).title == "Mine"
    assert await repo.get_active(task.id, other_user.id) is None
    assert await repo.get_active(deleted.id, user.id) is None


@pytest.mark.asyncio
async def test_task_list_active_newest_first(test_db, user, other_user):
    repo = TaskRepository(test_db)
    first = await repo.create(Task(user_id=user.id, title="First"))
    second = await repo.create(Task(user_id=user.id, title="Second"))
    await repo.create(Task(user_id=user.id, title="Deleted", status=TaskStatus.DELETED))
    await repo.create(Task(user_id=other_user.id, title="Foreign"))

    tasks = await repo.list_active(user.id)

    assert [task.id for task in tasks] == [second.id, first.id]


@pytest.mark.asyncio
async def test_task_get_active_many(test_db, user, other_user):
    repo = TaskRepository(test_db)
    a = await repo.create(Task(user_id=user.id, title="A"))
    b = await repo.create(Task(user_id=user.id, title="B"))
    foreign = await repo.create(Task(user_id=other_user.id, title="C"))

    tasks = await repo.get_active_many(user.id, [a.id, b.id, foreign.id, 999])

    assert {task.id for task in tasks} == {a.id, b.id}
    assert await repo.get_active_many(user.id, []) == []


@pytest.mark.asyncio
async def test_task_set_tags_replaces(test_db, user):
    repo = TaskRepository(test_db)
    tag_repo = TagRepository(test_db)
    work, home = await tag_repo.bulk_get_or_create(user.id, ["work", "home"])
    task = await repo.create(Task(user_id=user.id, title="Tagged"))

    await repo.set_tags(task, [work, home])
    await repo.set_tags(task, [home])
    reloaded = await repo.get_active(task.id, user.id)

    assert [tag.name for tag in reloaded.tags] == ["home"]
