"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- test_client: HTTP клиент для тестирования API endpoints
- auth_headers: заголовок Authorization зарегистрированного пользователя
- make_task: фабрика задач-значений для чистых функций (фильтры, сортировка, статистика)
"""

from datetime import datetime
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.dependencies import get_db
from src.core.security import hash_password
from src.main import app, limiter
from src.models import Base, User

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Фиксированный "сейчас" для тестов, зависящих от времени
NOW = datetime(2026, 3, 10, 12, 0, 0)

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    StaticPool обеспечивает что используется одно и то же соединение,
    что критично для in-memory БД (иначе данные теряются).

    ВАЖНО: Таблицы пересоздаются для каждого теста, обеспечивая полную изоляцию.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """
    Предоставляет async session для работы с тестовой БД.

    Каждый тест получает чистую БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def user(test_db) -> User:
    """Пользователь для тестов сервисов и репозиториев."""
    user = User(
        email="anna@example.com", name="Anna", password_hash=hash_password(DEFAULT_PASSWORD)
    )
    test_db.add(user)
    await test_db.flush()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def other_user(test_db) -> User:
    """Второй пользователь: проверка изоляции данных."""
    user = User(email="boris@example.com", name="Boris", password_hash="not-a-real-hash")
    test_db.add(user)
    await test_db.flush()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_client(test_engine):
    """
    Предоставляет HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо production БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def register(client: AsyncClient, email: str = "anna@example.com", name: str = "Anna"):
    """Зарегистрировать пользователя через API и вернуть тело ответа."""
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "name": name,
            "email": email,
            "password": DEFAULT_PASSWORD,
            "confirm_password": DEFAULT_PASSWORD,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def auth_headers(test_client) -> dict[str, str]:
    data = await register(test_client)
    return {"Authorization": f"Bearer {data['access_token']}"}


@pytest.fixture
def make_task():
    """
    Фабрика лёгких задач (SimpleNamespace) для тестов чистых функций.

    Пример:
        task = make_task(1, priority="high", due_date=NOW)
    """

    def factory(
        id: int,
        title: str | None = None,
        status: str = "pending",
        priority: str = "medium",
        due_date: datetime | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        completed_at: datetime | None = None,
        category_id: int | None = None,
        tags: tuple[str, ...] = (),
        description: str | None = None,
    ):
        created = created_at or NOW
        return SimpleNamespace(
            id=id,
            title=title or f"Task {id}",
            description=description,
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=created,
            updated_at=updated_at or created,
            completed_at=completed_at,
            category_id=category_id,
            tags=[SimpleNamespace(name=name) for name in tags],
        )

    return factory


# Pytest configuration
@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
