from collections.abc import AsyncGenerator, Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from src.bot.services import session_registry
from src.bot.services.session_registry import ProfileSessionRegistry
from src.profile_editor.schemas import CurrentUser

TELEGRAM_ID = 100500


def reject_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Неожиданный запрос: {request.method} {request.url}")


@pytest_asyncio.fixture
async def make_sessions(
    make_storage_client, make_account_client, monkeypatch
) -> AsyncGenerator[Callable[..., ProfileSessionRegistry], None]:
    """Фабрика реестров сессий, HTTP-клиенты которых отвечают через тестовые обработчики."""
    registries: list[ProfileSessionRegistry] = []

    def factory(storage_handler=reject_request, account_handler=reject_request) -> ProfileSessionRegistry:
        # Клиент Backend API создается на каждую сессию
        monkeypatch.setattr(session_registry, "AccountClient", lambda: make_account_client(account_handler))
        registry = ProfileSessionRegistry(storage_client=make_storage_client(storage_handler))
        registries.append(registry)
        return registry

    yield factory

    for registry in registries:
        await registry.close()


@pytest.fixture
def sign_in(user_record) -> Callable[[ProfileSessionRegistry], None]:
    """Помечает пользователя Telegram как вошедшего в аккаунт."""

    def apply(registry: ProfileSessionRegistry) -> None:
        registry.get(TELEGRAM_ID).store.sign_in_success(CurrentUser.model_validate(user_record))

    return apply


@pytest.fixture
def message() -> AsyncMock:
    """Сообщение Telegram без фото и документа."""
    msg = AsyncMock()
    msg.from_user = SimpleNamespace(id=TELEGRAM_ID, first_name="Alice")
    msg.text = None
    msg.photo = None
    msg.document = None
    return msg


@pytest.fixture
def state() -> AsyncMock:
    """Контекст FSM."""
    fsm = AsyncMock()
    fsm.get_data.return_value = {}
    fsm.get_state.return_value = None
    return fsm


@pytest.fixture
def callback() -> AsyncMock:
    """Колбэк от inline-кнопки."""
    cb = AsyncMock()
    cb.from_user = SimpleNamespace(id=TELEGRAM_ID, first_name="Alice")
    return cb

