#!/usr/bin/env python3
"""
Seed script: creates a demo user with default categories and sample tasks.
"""

from datetime import UTC, datetime, timedelta

import requests

API_URL = "http://localhost:8000/api/v1"

DEMO_USER = {
    "name": "Demo User",
    "email": "demo@example.com",
    "password": "demo-password",
    "confirm_password": "demo-password",
}

# Категории по умолчанию для нового пользователя
CATEGORIES = [
    {"name": "Personal", "description": "Личные дела", "color": "#8B5CF6"},
    {"name": "Work", "description": "Рабочие задачи", "color": "#3B82F6"},
    {"name": "Shopping", "description": "Покупки", "color": "#F59E0B"},
    {"name": "Health", "description": "Здоровье и спорт", "color": "#22C55E"},
    {"name": "Learning", "description": "Курсы, книги, статьи", "color": "#06B6D4"},
]

# due_in_days - смещение дедлайна от текущего момента
TASKS = {
    "Personal": [
        {"title": "Продлить страховку автомобиля", "priority": "high", "due_in_days": 2},
        {"title": "Разобрать фотографии за год", "priority": "low", "tags": ["home"]},
    ],
    "Work": [
        {
            "title": "Подготовить квартальный отчёт",
            "priority": "high",
            "due_in_days": 1,
            "description": "Сводка по проектам и бюджету",
            "tags": ["report", "urgent"],
        },
        {"title": "Code review для команды", "priority": "medium", "due_in_days": 3},
        {"title": "Обновить документацию API", "priority": "low", "due_in_days": 14},
    ],
    "Shopping": [
        {"title": "Купить продукты на неделю", "priority": "medium", "due_in_days": 1},
        {"title": "Подарок на день рождения", "priority": "high", "due_in_days": 6},
    ],
    "Health": [
        {"title": "Записаться к стоматологу", "priority": "medium", "due_in_days": 5},
        {"title": "Тренировка в зале", "priority": "low", "tags": ["sport"]},
    ],
    "Learning": [
        {"title": "Дочитать книгу по SQLAlchemy", "priority": "medium", "due_in_days": 10},
        {"title": "Пройти модуль курса по FastAPI", "priority": "high", "tags": ["python"]},
    ],
}


def authenticate() -> dict:
    """Register the demo user (or log in if it already exists)."""
    response = requests.post(f"{API_URL}/auth/register", json=DEMO_USER)
    if response.status_code == 400:
        response = requests.post(
            f"{API_URL}/auth/login",
            json={"email": DEMO_USER["email"], "password": DEMO_USER["password"]},
        )
    response.raise_for_status()
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


def create_category(category_data, headers):
    """Create a category via API."""
    response = requests.post(f"{API_URL}/categories", headers=headers, json=category_data)
    if response.status_code == 201:
        return response.json()
    else:
        print(f"Error creating category {category_data['name']}: {response.text}")
        return None


def create_task(task_data, category_id, headers):
    """Create a task via API."""
    task_payload = {
        "title": task_data["title"],
        "category_id": category_id,
        "priority": task_data.get("priority", "medium"),
        "tags": task_data.get("tags", []),
    }

    if "description" in task_data:
        task_payload["description"] = task_data["description"]

    if "due_in_days" in task_data:
        due = datetime.now(UTC) + timedelta(days=task_data["due_in_days"])
        task_payload["due_date"] = due.isoformat()

    response = requests.post(f"{API_URL}/tasks", headers=headers, json=task_payload)
    if response.status_code == 201:
        return response.json()
    else:
        print(f"Error creating task {task_data['title']}: {response.text}")
        return None


def main():
    print("=" * 60)
    print("Seeding database with demo data")
    print("=" * 60)

    headers = authenticate()
    print(f"\n👤 Signed in as {DEMO_USER['email']}")

    category_ids = {}
    print("\n📁 Creating categories...")
    for category_data in CATEGORIES:
        category = create_category(category_data, headers)
        if category:
            category_ids[category_data["name"]] = category["id"]
            print(f"  ✅ {category_data['name']} (id={category['id']})")

    print("\n📋 Creating tasks...")
    total_tasks = 0
    for category_name, tasks in TASKS.items():
        if category_name not in category_ids:
            print(f"  ⚠️ Category {category_name} not found, skipping tasks")
            continue

        print(f"\n  📁 {category_name}:")
        for task_data in tasks:
            task = create_task(task_data, category_ids[category_name], headers)
            if task:
                total_tasks += 1
                due = task.get("due_date") or "no date"
                print(f"    ✅ {task_data['title'][:50]} ({due})")

    print("\n" + "=" * 60)
    print(f"✅ Done! Created {len(category_ids)} categories and {total_tasks} tasks")
    print("=" * 60)


if __name__ == "__main__":
    main()
