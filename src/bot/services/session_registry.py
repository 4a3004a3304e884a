"""
Реестр пользовательских сессий редактора профиля.

Каждый пользователь Telegram получает собственное хранилище сессии, собственный
клиент Backend API (с отдельным cookie jar) и собственный редактор профиля.
Клиент хранилища изображений общий - он не хранит состояния пользователя.
"""

from src.core_shared.logging_setup import setup_logger
from src.profile_editor.services import AccountClient, InMemorySessionStore, ProfileEditor, StorageClient

# Настраиваем логгер
log = setup_logger("BotSessionRegistry")


class ProfileSession:
    """
    Сессия одного пользователя Telegram.

    Attributes:
        store (InMemorySessionStore): Хранилище сессии с записью вошедшего пользователя.
        account_client (AccountClient): Клиент Backend API этого пользователя.
        editor (ProfileEditor): Редактор профиля.
    """

    def __init__(self, storage_client: StorageClient, account_client: AccountClient | None = None):
        self.store = InMemorySessionStore()
        self.account_client = account_client or AccountClient()
        self.editor = ProfileEditor(self.store, storage_client, self.account_client)

    async def close(self) -> None:
        """Закрывает клиент Backend API сессии."""
        await self.account_client.close()


class ProfileSessionRegistry:
    """Хранит сессии пользователей по Telegram ID и создает их по требованию."""

    def __init__(self, storage_client: StorageClient | None = None):
        self.storage_client = storage_client or StorageClient()
        self._sessions: dict[int, ProfileSession] = {}

    def get(self, telegram_id: int) -> ProfileSession:
        """Возвращает сессию пользователя, создавая новую при первом обращении."""
        session = self._sessions.get(telegram_id)
        if session is None:
            session = ProfileSession(self.storage_client)
            self._sessions[telegram_id] = session
            log.debug(f"Создана сессия профиля для пользователя {telegram_id}.")
        return session

    async def reset(self, telegram_id: int) -> ProfileSession:
        """Закрывает текущую сессию пользователя (если есть) и создает новую - пустую."""
        session = self._sessions.pop(telegram_id, None)
        if session is not None:
            await session.close()
        return self.get(telegram_id)

    async def close(self) -> None:
        """Закрывает все сессии и общий клиент хранилища."""
        for session in self._sessions.values():
            await session.close()
        self._sessions.clear()
        await self.storage_client.close()
