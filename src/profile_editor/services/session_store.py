"""
Хранилище сессии - источник записи текущего пользователя.

Редактор профиля получает хранилище как зависимость и взаимодействует с ним
только через явный контракт `SessionStore`: чтение текущего пользователя и
три сигнала изменения (начало, успех, ошибка обновления).
"""

from typing import Protocol, runtime_checkable

from src.profile_editor.core.logging import editor_log as log
from src.profile_editor.schemas import CurrentUser


@runtime_checkable
class SessionStore(Protocol):
    """Контракт хранилища сессии, который использует редактор профиля."""

    def get_current_user(self) -> CurrentUser | None: ...

    def update_start(self) -> None: ...

    def update_success(self, updated_user: CurrentUser) -> None: ...

    def update_failure(self, message: str) -> None: ...


class InMemorySessionStore:
    """
    Хранилище сессии в памяти процесса.

    Помимо контракта `SessionStore` хранит флаг выполнения запроса и последнюю ошибку,
    а также поддерживает сигналы входа и выхода, которыми пользуется хост (бот).

    Attributes:
        current_user (CurrentUser | None): Запись текущего пользователя.
        loading (bool): Выполняется ли сейчас запрос, изменяющий сессию.
        error (str | None): Сообщение последней ошибки.
    """

    def __init__(self, current_user: CurrentUser | None = None):
        self.current_user = current_user
        self.loading = False
        self.error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def get_current_user(self) -> CurrentUser | None:
        return self.current_user

    # --- Обновление профиля ---

    def update_start(self) -> None:
        self.loading = True
        self.error = None

    def update_success(self, updated_user: CurrentUser) -> None:
        self.current_user = updated_user
        self.loading = False
        self.error = None
        log.info(f"Запись пользователя {updated_user.id} в сессии обновлена.")

    def update_failure(self, message: str) -> None:
        self.loading = False
        self.error = message
        log.warning(f"Обновление профиля не удалось: {message}")

    # --- Вход и выход ---

    def sign_in_start(self) -> None:
        self.loading = True
        self.error = None

    def sign_in_success(self, user: CurrentUser) -> None:
        self.current_user = user
        self.loading = False
        self.error = None
        log.info(f"Пользователь {user.id} вошел в аккаунт.")

    def sign_in_failure(self, message: str) -> None:
        self.loading = False
        self.error = message

    def sign_out(self) -> None:
        self.current_user = None
        self.loading = False
        self.error = None

