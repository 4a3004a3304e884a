"""Создаём экземпляр настроенного логгера для редактора профиля"""

from src.core_shared.logging_setup import setup_logger

from .config import settings

# Получаем экземпляр логгера редактора профиля
editor_log = setup_logger(service_name="ProfileEditor", log_level_override=settings.LOG_LEVEL)
