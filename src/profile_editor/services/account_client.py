"""
Клиент для взаимодействия с Backend API аккаунта.

Редактор профиля использует этот клиент для отправки черновика изменений,
а бот - для входа пользователя в аккаунт.
"""

from typing import Any

import httpx

from src.profile_editor.core.config import settings
from src.profile_editor.schemas import CurrentUser, SignInRequest
from src.core_shared.logging_setup import setup_logger

# Настраиваем логгер
log = setup_logger("AccountClient", log_level_override=settings.LOG_LEVEL)


class AccountClientError(Exception):
    """
    Ошибка, возникающая при работе с Backend API.
    Используется для того, чтобы не пробрасывать httpx exceptions в логику редактора и бота.

    Attributes:
        message (str): Сообщение (для отказов сервера - сообщение из ответа API).
        status_code (int | None): HTTP статус ответа. None, если ответ не был получен.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_rejection(self) -> bool:
        """True, если сервер ответил, но отклонил запрос (не-2xx)."""
        return self.status_code is not None


class AccountClient:
    """
    Асинхронный HTTP-клиент Backend API аккаунта.

    Клиент создается на одну пользовательскую сессию: cookie авторизации,
    выданные при входе, хранятся в cookie jar клиента и отправляются с последующими запросами.
    """

    def __init__(self, base_url: str | None = None, http_client: httpx.AsyncClient | None = None):
        """
        Инициализирует клиент с базовым URL и настройками таймаута.

        Args:
            base_url (str | None): Базовый URL Backend API. По умолчанию из настроек.
            http_client (httpx.AsyncClient | None): Готовый HTTP-клиент (например, с тестовым транспортом).
        """
        self.base_url = base_url or settings.API_BASE_URL
        self.http_client = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=settings.HTTP_TIMEOUT)

    async def close(self) -> None:
        """Корректно закрывает сессию HTTP-клиента."""
        await self.http_client.aclose()

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> str:
        """Достает сообщение об ошибке из ответа API ({"message": ...}), иначе - текст или статус ответа."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])

        return response.text or f"Request failed with status code {response.status_code}"

    async def _request(self, method: str, endpoint: str, json: dict[str, Any] | None = None) -> Any:
        """
        Внутренний метод для выполнения запроса к API.

        Args:
            method (str): HTTP метод ("PUT", "POST", etc).
            endpoint (str): Путь API (например, "/api/user/update/42").
            json (dict | None): Тело запроса.

        Returns:
            Any: Данные ответа (обычно dict).

        Raises:
            AccountClientError: Если сервер отклонил запрос, запрос не удалось выполнить или ответ некорректен.
        """
        try:
            log.debug(f"API Request: {method} {endpoint}")
            response = await self.http_client.request(method, endpoint, json=json)
        except httpx.RequestError as exc:
            log.error(f"Ошибка сети на {method} {endpoint}: {exc}")
            raise AccountClientError(str(exc) or "Network Error")
        except Exception as exc:
            # Например, значение черновика, которое нельзя закодировать в JSON
            log.exception(f"Непредвиденная ошибка при запросе {method} {endpoint}: {exc}")
            raise AccountClientError(str(exc) or "Unknown error")

        if response.is_error:
            message = self._extract_error_message(response)
            log.warning(f"API вернул ошибку {response.status_code} на {method} {endpoint}: {message}")
            raise AccountClientError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            log.error(f"Некорректный JSON в ответе {method} {endpoint}: {exc}")
            raise AccountClientError(f"Malformed response from server: {exc}")

    # --- Публичные методы API ---

    async def update_user(self, user_id: str, changes: dict[str, Any]) -> CurrentUser:
        """
        Отправляет изменения профиля пользователя.

        Использует эндпоинт PUT /api/user/update/{user_id}.

        Args:
            user_id (str): Идентификатор пользователя.
            changes (dict[str, Any]): Черновик изменений (username, email, password, profilePicture).

        Returns:
            CurrentUser: Обновленная запись пользователя.
        """
        data = await self._request("PUT", f"/api/user/update/{user_id}", json=changes)
        return self._parse_user(data)

    async def sign_in(self, credentials: SignInRequest) -> CurrentUser:
        """
        Выполняет вход в аккаунт.

        Использует эндпоинт POST /api/auth/signin. Cookie авторизации сохраняется в клиенте.

        Args:
            credentials (SignInRequest): Email и пароль.

        Returns:
            CurrentUser: Запись вошедшего пользователя.
        """
        data = await self._request("POST", "/api/auth/signin", json=credentials.model_dump())
        return self._parse_user(data)

    @staticmethod
    def _parse_user(data: Any) -> CurrentUser:
        """Преобразует ответ API в запись пользователя."""
        try:
            return CurrentUser.model_validate(data)
        except ValueError as exc:
            log.error(f"Ответ API не похож на запись пользователя: {exc}")
            raise AccountClientError(f"Malformed user record in response: {exc}")
