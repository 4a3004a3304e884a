import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

# Переменные окружения тестов задаем до импорта модулей приложения (настройки читаются при импорте)
os.environ.setdefault("DEVELOPMENT", "true")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "test-cloud")
os.environ.setdefault("CLOUDINARY_UPLOAD_PRESET", "test-preset")
os.environ.setdefault("API_BASE_URL", "http://test")
os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import httpx
import pytest
import pytest_asyncio

from src.profile_editor.core.config import settings
from src.profile_editor.schemas import CurrentUser, SelectedImage
from src.profile_editor.services import AccountClient, InMemorySessionStore, ProfileEditor, StorageClient

# Обработчик запросов для httpx.MockTransport (может быть синхронным или асинхронным)
Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]

UPLOAD_URL = "https://storage.test/v1_1/test-cloud/image/upload"
# Маленький кусок тела запроса, чтобы загрузка давала несколько уведомлений о прогрессе
TEST_CHUNK_SIZE = 50_000


# --- ФИКСТУРА БЕЗОПАСНОСТИ ---


@pytest.fixture(scope="session", autouse=True)
def verify_test_environment():
    """
    Проверяет, что тесты запускаются с тестовыми настройками окружения.

    Эта фикстура выполняется автоматически перед началом тестовой сессии.
    """
    assert settings.DEVELOPMENT is True, (
        "❌ ОШИБКА КОНФИГУРАЦИИ: Тесты должны запускаться в режиме разработки/тестирования (DEVELOPMENT=True)."
    )
    assert "test" in settings.CLOUDINARY_CLOUD_NAME, (
        f"❌ ОПАСНОСТЬ: Тесты пытаются использовать хранилище '{settings.CLOUDINARY_CLOUD_NAME}'. "
        "Тестовое хранилище должно содержать 'test' в названии."
    )


# --- ДАННЫЕ ---


@pytest.fixture
def user_record() -> dict[str, Any]:
    """Запись пользователя в формате Backend API."""
    return {
        "_id": "665f1c2e9a1b2c3d4e5f6a7b",
        "username": "alice",
        "email": "alice@example.com",
        "profilePicture": "https://cdn/default.png",
        "isAdmin": False,
        "createdAt": "2026-01-10T10:00:00.000Z",
        "updatedAt": "2026-01-10T10:00:00.000Z",
    }


@pytest.fixture
def session_store(user_record: dict[str, Any]) -> InMemorySessionStore:
    """Хранилище сессии с вошедшим пользователем."""
    return InMemorySessionStore(CurrentUser.model_validate(user_record))


@pytest.fixture
def make_image() -> Callable[..., SelectedImage]:
    """Фабрика изображений заданного размера."""

    def factory(size: int, filename: str = "avatar.png", content_type: str = "image/png") -> SelectedImage:
        return SelectedImage(filename=filename, content=b"\x89" * size, content_type=content_type)

    return factory


# --- HTTP-КЛИЕНТЫ С ТЕСТОВЫМ ТРАНСПОРТОМ ---


@pytest_asyncio.fixture
async def make_storage_client() -> AsyncGenerator[Callable[[Handler], StorageClient], None]:
    """Фабрика клиентов хранилища, отвечающих через переданный обработчик."""
    clients: list[StorageClient] = []

    def factory(handler: Handler) -> StorageClient:
        client = StorageClient(
            upload_url=UPLOAD_URL,
            upload_preset="test-preset",
            chunk_size=TEST_CHUNK_SIZE,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


@pytest_asyncio.fixture
async def make_account_client() -> AsyncGenerator[Callable[[Handler], AccountClient], None]:
    """Фабрика клиентов Backend API, отвечающих через переданный обработчик."""
    clients: list[AccountClient] = []

    def factory(handler: Handler) -> AccountClient:
        client = AccountClient(
            http_client=httpx.AsyncClient(base_url="http://test", transport=httpx.MockTransport(handler)),
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


def unexpected_request(request: httpx.Request) -> httpx.Response:
    """Обработчик для клиентов, которые не должны делать запросов."""
    raise AssertionError(f"Неожиданный запрос: {request.method} {request.url}")


@pytest.fixture
def make_editor(
    session_store: InMemorySessionStore,
    make_storage_client: Callable[[Handler], StorageClient],
    make_account_client: Callable[[Handler], AccountClient],
) -> Callable[..., ProfileEditor]:
    """Фабрика редакторов профиля с тестовыми обработчиками хранилища и Backend API."""

    def factory(storage_handler: Handler = unexpected_request, account_handler: Handler = unexpected_request) -> ProfileEditor:
        return ProfileEditor(
            session_store=session_store,
            storage_client=make_storage_client(storage_handler),
            account_client=make_account_client(account_handler),
        )

    return factory
