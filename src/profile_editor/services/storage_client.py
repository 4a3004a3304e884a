"""
Клиент для загрузки изображений в удаленное хранилище (Cloudinary).

Отправляет multipart-запрос {file, upload_preset} и сообщает о прогрессе
по мере того, как транспорт вычитывает тело запроса.
"""

from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from src.profile_editor.core.config import settings
from src.profile_editor.schemas import SelectedImage
from src.core_shared.logging_setup import setup_logger

# Настраиваем логгер
log = setup_logger("StorageClient", log_level_override=settings.LOG_LEVEL)

# Колбэк прогресса: (отправлено байт, всего байт)
ProgressCallback = Callable[[int, int], None]


class StorageClientError(Exception):
    """
    Ошибка при обращении к хранилищу изображений.
    Используется для того, чтобы не пробрасывать httpx exceptions в логику редактора.

    Attributes:
        status_code (int | None): HTTP статус ответа, если запрос дошел до сервера.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class StorageClient:
    """
    Асинхронный HTTP-клиент хранилища изображений.

    Обеспечивает:
    - Формирование multipart-запроса на загрузку.
    - Уведомления о прогрессе передачи тела запроса.
    - Обработку сетевых ошибок и ошибок ответа.
    """

    def __init__(
        self,
        upload_url: str | None = None,
        upload_preset: str | None = None,
        chunk_size: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Инициализирует клиент.

        Args:
            upload_url (str | None): URL эндпоинта загрузки. По умолчанию из настроек.
            upload_preset (str | None): Токен upload preset. По умолчанию из настроек.
            chunk_size (int | None): Размер куска тела запроса для уведомлений о прогрессе.
            http_client (httpx.AsyncClient | None): Готовый HTTP-клиент (например, с тестовым транспортом).
        """
        self.upload_url = upload_url or settings.STORAGE_UPLOAD_URL
        self.upload_preset = upload_preset or settings.CLOUDINARY_UPLOAD_PRESET
        self.chunk_size = chunk_size or settings.UPLOAD_CHUNK_SIZE
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)

    async def close(self) -> None:
        """Корректно закрывает сессию HTTP-клиента."""
        await self.http_client.aclose()

    async def _iter_body(self, body: bytes, on_progress: ProgressCallback | None) -> AsyncIterator[bytes]:
        """
        Отдает тело запроса кусками и сообщает о прогрессе после передачи каждого куска.

        Args:
            body (bytes): Закодированное тело запроса.
            on_progress (ProgressCallback | None): Колбэк прогресса.
        """
        total = len(body)
        sent = 0

        for start in range(0, total, self.chunk_size):
            chunk = body[start : start + self.chunk_size]
            yield chunk

            # Транспорт запросил следующий кусок - значит, текущий уже передан
            sent += len(chunk)
            if on_progress is not None:
                on_progress(sent, total)

    def _build_request(self, image: SelectedImage, on_progress: ProgressCallback | None) -> httpx.Request:
        """Формирует multipart-запрос, тело которого передается кусками с уведомлением о прогрессе."""
        encoded = self.http_client.build_request(
            "POST",
            self.upload_url,
            data={"upload_preset": self.upload_preset},
            files={"file": (image.filename, image.content, image.content_type)},
        )
        body = encoded.read()

        # Заголовки (Content-Type с boundary и Content-Length) берем из закодированного запроса
        return httpx.Request(
            "POST",
            encoded.url,
            headers=encoded.headers,
            content=self._iter_body(body, on_progress),
        )

    async def upload_image(self, image: SelectedImage, on_progress: ProgressCallback | None = None) -> str | None:
        """
        Загружает изображение в хранилище.

        Args:
            image (SelectedImage): Выбранное изображение.
            on_progress (ProgressCallback | None): Колбэк прогресса (отправлено байт, всего байт).

        Returns:
            str | None: Постоянный URL изображения (`secure_url`) или None, если хранилище его не вернуло.

        Raises:
            StorageClientError: Если запрос не удалось выполнить или ответ некорректен.
        """
        log.debug(f"Storage Request: POST {self.upload_url} | File: {image.filename} ({image.size} bytes)")

        try:
            request = self._build_request(image, on_progress)
            response = await self.http_client.send(request)

            # Если статус ответа 4xx или 5xx, выбрасываем исключение
            response.raise_for_status()

            data: Any = response.json()

        except httpx.HTTPStatusError as exc:
            log.warning(f"Хранилище вернуло ошибку {exc.response.status_code}: {exc.response.text}")
            raise StorageClientError(
                f"Ошибка загрузки в хранилище: {exc.response.status_code}", status_code=exc.response.status_code
            )
        except httpx.RequestError as exc:
            log.error(f"Сетевая ошибка при загрузке изображения: {exc}")
            raise StorageClientError("Хранилище недоступно (сетевая ошибка).")
        except ValueError as exc:
            # Тело ответа не является JSON
            log.error(f"Некорректный ответ хранилища: {exc}")
            raise StorageClientError("Некорректный ответ хранилища.")
        except Exception as exc:
            log.exception(f"Непредвиденная ошибка клиента хранилища: {exc}")
            raise StorageClientError("Неизвестная ошибка клиента хранилища.")

        secure_url = data.get("secure_url") if isinstance(data, dict) else None
        if not secure_url:
            log.warning(f"Хранилище не вернуло secure_url для файла {image.filename}.")
            return None

        return secure_url
