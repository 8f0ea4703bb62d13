"""
Тесты для API Layer (REST endpoints).

Проверяем:
- HTTP статус-коды
- Форматы запросов/ответов (JSON)
- Обработку ошибок (400, 404, 422)
- Интеграцию всех слоёв (API → Service → Repository → DB)
"""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient

from tests.conftest import register

API = "/api/v1"


def future(days: float = 1) -> str:
    return (datetime.now(UTC) + timedelta(days=days)).isoformat()


async def create_task(client: AsyncClient, headers, **payload) -> dict:
    payload.setdefault("title", "Task")
    response = await client.post(f"{API}/tasks", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# ROOT / HEALTH
# ============================================================================


@pytest.mark.asyncio
async def test_root(test_client: AsyncClient):
    response = await test_client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["tasks"] == "/api/v1/tasks"


@pytest.mark.asyncio
async def test_health(test_client: AsyncClient):
    response = await test_client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "connected"


@pytest.mark.asyncio
async def test_request_id_header(test_client: AsyncClient):
    response = await test_client.get("/", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


# ============================================================================
# TASK API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_task(test_client: AsyncClient, auth_headers):
    """Test: POST /tasks - создание задачи с тегами."""
    data = await create_task(
        test_client,
        auth_headers,
        title="Buy milk",
        description="2 liters",
        priority="high",
        due_date=future(2),
        tags=["shopping", "home"],
    )

    assert data["title"] == "Buy milk"
    assert data["status"] == "pending"
    assert data["priority"] == "high"
    assert data["completed_at"] is None
    assert sorted(tag["name"] for tag in data["tags"]) == ["home", "shopping"]


@pytest.mark.asyncio
async def test_create_task_validation_error(test_client: AsyncClient, auth_headers):
    """Test: POST /tasks - пустое название отклоняется Pydantic (422)."""
    response = await test_client.post(f"{API}/tasks", headers=auth_headers, json={"title": ""})

    assert response.status_code == 422
    data = response.json()
    assert data["error"]["code"] == "VALIDATION_ERROR"
    assert "title" in [detail["field"] for detail in data["error"]["details"]]


@pytest.mark.asyncio
async def test_create_task_past_due_date(test_client: AsyncClient, auth_headers):
    response = await test_client.post(
        f"{API}/tasks", headers=auth_headers, json={"title": "Late", "due_date": future(-1)}
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Due date must be in the future"


@pytest.mark.asyncio
async def test_get_update_delete_task(test_client: AsyncClient, auth_headers):
    task = await create_task(test_client, auth_headers, title="Draft", due_date=future(3))
    url = f"{API}/tasks/{task['id']}"

    assert (await test_client.get(url, headers=auth_headers)).json()["title"] == "Draft"

    updated = await test_client.put(
        url, headers=auth_headers, json={"title": "Final", "due_date": None}
    )
    assert updated.status_code == 200
    assert updated.json()["title"] == "Final"
    assert updated.json()["due_date"] is None

    deleted = await test_client.delete(url, headers=auth_headers)
    assert deleted.status_code == 204
    missing = await test_client.get(url, headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_task_status(test_client: AsyncClient, auth_headers):
    task = await create_task(test_client, auth_headers)
    url = f"{API}/tasks/{task['id']}/status"

    done = await test_client.patch(url, headers=auth_headers, json={"status": "completed"})
    assert done.json()["status"] == "completed"
    assert done.json()["completed_at"] is not None

    reopened = await test_client.patch(url, headers=auth_headers, json={"status": "pending"})
    assert reopened.json()["completed_at"] is None


@pytest.mark.asyncio
async def test_other_users_task_is_not_found(test_client: AsyncClient, auth_headers):
    task = await create_task(test_client, auth_headers, title="Private")
    other = await register(test_client, email="boris@example.com", name="Boris")
    other_headers = {"Authorization": f"Bearer {other['access_token']}"}

    response = await test_client.get(f"{API}/tasks/{task['id']}", headers=other_headers)

    assert response.status_code == 404
    listing = await test_client.get(f"{API}/tasks", headers=other_headers)
    assert listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_list_tasks_filters_sort_and_pagination(test_client: AsyncClient, auth_headers):
    await create_task(test_client, auth_headers, title="Low work", priority="low", tags=["work"])
    await create_task(test_client, auth_headers, title="High work", priority="high", tags=["work"])
    await create_task(test_client, auth_headers, title="Home chore", tags=["home"])
    done = await create_task(test_client, auth_headers, title="Finished")
    await test_client.patch(
        f"{API}/tasks/{done['id']}/status", headers=auth_headers, json={"status": "completed"}
    )

    response = await test_client.get(
        f"{API}/tasks",
        headers=auth_headers,
        params={"tags": "work", "sort_by": "priority", "sort_direction": "desc"},
    )
    assert [task["title"] for task in response.json()["items"]] == ["High work", "Low work"]

    pending = await test_client.get(
        f"{API}/tasks", headers=auth_headers, params={"status": "pending", "limit": 2}
    )
    body = pending.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert len(body["items"]) == 2

    # Некорректный фильтр не ломает запрос
    lenient = await test_client.get(
        f"{API}/tasks", headers=auth_headers, params={"status": "bogus", "search": "WORK"}
    )
    assert lenient.status_code == 200
    assert lenient.json()["total"] == 2


@pytest.mark.asyncio
async def test_bulk_operations(test_client: AsyncClient, auth_headers):
    a = await create_task(test_client, auth_headers, title="A")
    b = await create_task(test_client, auth_headers, title="B")

    missing = await test_client.post(
        f"{API}/tasks/bulk",
        headers=auth_headers,
        json={"operation": "delete", "task_ids": [a["id"], 9999]},
    )
    assert missing.status_code == 404

    no_status = await test_client.post(
        f"{API}/tasks/bulk",
        headers=auth_headers,
        json={"operation": "update_status", "task_ids": [a["id"]]},
    )
    assert no_status.status_code == 400

    done = await test_client.post(
        f"{API}/tasks/bulk",
        headers=auth_headers,
        json={"operation": "update_status", "task_ids": [a["id"], b["id"]], "status": "completed"},
    )
    assert done.json() == {"operation": "update_status", "affected": 2}

    stats = await test_client.get(f"{API}/dashboard/statistics", headers=auth_headers)
    assert stats.json()["completion_rate"] == 100


@pytest.mark.asyncio
async def test_export_import(test_client: AsyncClient, auth_headers):
    await create_task(test_client, auth_headers, title="Exported", tags=["x"])

    export = await test_client.get(f"{API}/tasks/export", headers=auth_headers)
    assert export.status_code == 200
    assert export.json()["count"] == 1

    response = await test_client.post(
        f"{API}/tasks/import",
        headers=auth_headers,
        json={
            "tasks": [
                {"title": "Imported", "priority": "low", "tags": ["x", "y"]},
                {"title": ""},
                {"title": "Old", "due_date": future(-30), "status": "completed"},
                {"title": "Bad priority", "priority": "urgent"},
            ]
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["imported"] == 2
    assert body["failed"] == 2
    assert [error["index"] for error in body["errors"]] == [1, 3]

    listing = await test_client.get(f"{API}/tasks", headers=auth_headers)
    assert listing.json()["total"] == 3


# ============================================================================
# CATEGORY API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_category_crud(test_client: AsyncClient, auth_headers):
    created = await test_client.post(
        f"{API}/categories",
        headers=auth_headers,
        json={"name": "Work", "color": "#ff0000", "description": "Office"},
    )
    assert created.status_code == 201
    category = created.json()
    assert category["color"] == "#FF0000"

    duplicate = await test_client.post(
        f"{API}/categories", headers=auth_headers, json={"name": "work"}
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error"]["code"] == "ALREADY_EXISTS"

    await create_task(test_client, auth_headers, title="Report", category_id=category["id"])
    listing = await test_client.get(f"{API}/categories", headers=auth_headers)
    assert listing.json()[0]["task_count"] == 1

    renamed = await test_client.put(
        f"{API}/categories/{category['id']}", headers=auth_headers, json={"name": "Job"}
    )
    assert renamed.json()["name"] == "Job"


@pytest.mark.asyncio
async def test_delete_category_keeps_tasks(test_client: AsyncClient, auth_headers):
    category = (
        await test_client.post(f"{API}/categories", headers=auth_headers, json={"name": "Tmp"})
    ).json()
    task = await create_task(test_client, auth_headers, category_id=category["id"])

    response = await test_client.delete(f"{API}/categories/{category['id']}", headers=auth_headers)
    assert response.status_code == 204

    reloaded = await test_client.get(f"{API}/tasks/{task['id']}", headers=auth_headers)
    assert reloaded.status_code == 200
    assert reloaded.json()["category_id"] is None


@pytest.mark.asyncio
async def test_create_task_with_unknown_category(test_client: AsyncClient, auth_headers):
    response = await test_client.post(
        f"{API}/tasks", headers=auth_headers, json={"title": "X", "category_id": 42}
    )

    assert response.status_code == 404


# ============================================================================
# TAG API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_tag_crud(test_client: AsyncClient, auth_headers):
    created = await test_client.post(f"{API}/tags", headers=auth_headers, json={"name": "urgent"})
    assert created.status_code == 201
    tag = created.json()

    updated = await test_client.put(
        f"{API}/tags/{tag['id']}", headers=auth_headers, json={"color": "#00FF00"}
    )
    assert updated.json()["color"] == "#00FF00"

    deleted = await test_client.delete(f"{API}/tags/{tag['id']}", headers=auth_headers)
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_tag_in_use_cannot_be_deleted(test_client: AsyncClient, auth_headers):
    await create_task(test_client, auth_headers, tags=["work"])
    tags = (await test_client.get(f"{API}/tags", headers=auth_headers)).json()
    assert tags[0]["usage_count"] == 1

    response = await test_client.delete(f"{API}/tags/{tags[0]['id']}", headers=auth_headers)

    assert response.status_code == 400
    assert "cannot be deleted" in response.json()["error"]["message"]


# ============================================================================
# DASHBOARD API TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_dashboard(test_client: AsyncClient, auth_headers):
    soon = await create_task(test_client, auth_headers, title="Soon", due_date=future(2))
    await create_task(test_client, auth_headers, title="Someday")
    done = await create_task(test_client, auth_headers, title="Done")
    await test_client.patch(
        f"{API}/tasks/{done['id']}/status", headers=auth_headers, json={"status": "completed"}
    )

    stats = (await test_client.get(f"{API}/dashboard/statistics", headers=auth_headers)).json()
    assert stats == {
        "total_tasks": 3,
        "completed_tasks": 1,
        "pending_tasks": 2,
        "overdue_tasks": 0,
        "today_tasks": 0,
        "upcoming_tasks": 1,
        "completion_rate": 33,
    }

    upcoming = await test_client.get(f"{API}/dashboard/upcoming", headers=auth_headers)
    assert [task["id"] for task in upcoming.json()] == [soon["id"]]

    overdue = await test_client.get(f"{API}/dashboard/overdue", headers=auth_headers)
    assert overdue.json() == []

    activity = (await test_client.get(f"{API}/dashboard/activity", headers=auth_headers)).json()
    assert activity["created_this_week"] == 3
    assert activity["completed_this_week"] == 1
