"""
Конфигурация Телеграм-бота.

Определяет настройки, загружаемые из переменных окружения (.env).
Настройки хранилища изображений и Backend API читает редактор профиля (src.profile_editor.core.config).
"""

from pydantic import Field

from src.core_shared.config import AppSettings


class Settings(AppSettings):
    """
    Основные настройки бота.

    Наследуется от AppSettings (Pydantic BaseSettings) для автоматической валидации и загрузки переменных окружения.
    """

    # --- Настройки Telegram ---
    BOT_TOKEN: str = Field(..., description="Токен телеграм бота, полученный от BotFather")


# Создаем глобальный экземпляр настроек
settings = Settings()  # type: ignore
