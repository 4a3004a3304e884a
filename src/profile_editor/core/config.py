"""
Конфигурация редактора профиля.

Определяет настройки, загружаемые из переменных окружения (.env),
и вычисляемые свойства, необходимые для работы с хранилищем изображений и Backend API.
"""

from pydantic import Field, computed_field

from src.core_shared.config import AppSettings

# Максимальный размер изображения аватара по умолчанию (2 MiB)
DEFAULT_MAX_IMAGE_SIZE_BYTES = 2 * 1024 * 1024


class Settings(AppSettings):
    """
    Настройки редактора профиля.

    Читаются один раз при старте и далее не изменяются.
    """

    # --- Хранилище изображений (Cloudinary) ---
    CLOUDINARY_CLOUD_NAME: str = Field(..., description="Идентификатор аккаунта (cloud name) в хранилище")
    CLOUDINARY_UPLOAD_PRESET: str = Field(..., description="Токен unsigned upload preset")
    STORAGE_BASE_URL: str = Field(
        default="https://api.cloudinary.com",
        description="Базовый URL сервиса хранения изображений",
    )

    # --- Backend API ---
    # При локальном запуске блог-сервер обычно доступен на http://localhost:3000
    API_BASE_URL: str = Field(default="http://localhost:3000", description="Базовый URL Backend API")

    # --- Ограничения и транспорт ---
    MAX_IMAGE_SIZE_BYTES: int = Field(
        default=DEFAULT_MAX_IMAGE_SIZE_BYTES,
        gt=0,
        description="Максимальный размер загружаемого изображения в байтах",
    )
    UPLOAD_CHUNK_SIZE: int = Field(
        default=64 * 1024,
        gt=0,
        description="Размер куска тела запроса, после отправки которого сообщается прогресс",
    )
    HTTP_TIMEOUT: float = Field(default=30.0, gt=0, description="Таймаут HTTP-запросов в секундах")

    # Формируем URL загрузки изображения
    @computed_field
    def STORAGE_UPLOAD_URL(self) -> str:
        """
        Возвращает полный URL эндпоинта загрузки изображений.

        Пример: https://api.cloudinary.com/v1_1/demo/image/upload
        """
        return f"{self.STORAGE_BASE_URL.rstrip('/')}/v1_1/{self.CLOUDINARY_CLOUD_NAME}/image/upload"


# Создаем глобальный экземпляр настроек
settings = Settings()  # type: ignore[call-arg]
