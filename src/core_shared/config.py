"""
Общая база настроек редактора профиля и бота.

Сервисы наследуют `AppSettings` и добавляют свои поля (хранилище изображений,
Backend API, токен бота). Значения читаются из окружения и файла .env.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Поля, нужные каждому процессу: метаданные релиза для Sentry, режим запуска и уровень логов.

    Attributes:
        PROJECT_NAME (str): Имя проекта в релизе Sentry.
        APP_VERSION (str): Версия в релизе Sentry.
        DEVELOPMENT (bool): Режим разработки/тестирования.
        SENTRY_DSN (str | None): DSN Sentry; без него мониторинг не включается.
        LOG_LEVEL (str): Уровень логирования для `setup_logger`.
    """

    PROJECT_NAME: str = "Profile Editor"
    APP_VERSION: str = "0.1.0"

    DEVELOPMENT: bool = Field(default=False, description="Режим разработки/тестирования (тесты требуют True)")

    SENTRY_DSN: str | None = Field(default=None, description="Sentry DSN бота")

    LOG_LEVEL: str = Field(default="INFO", description="Уровень логирования редактора и бота")

    @property
    def PRODUCTION(self) -> bool:
        """Environment для Sentry: все, что не DEVELOPMENT, считается продакшеном."""
        return not self.DEVELOPMENT

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # В общем .env лежат и поля других настроек (BOT_TOKEN, CLOUDINARY_*)
        extra="ignore",
    )
