"""Централизованная настройка логирования для редактора профиля и бота."""

import os
import sys
from typing import TYPE_CHECKING

from loguru import logger as global_loguru_logger
from pydantic import BaseModel, Field

# Импортируем Logger только для проверки типов
if TYPE_CHECKING:
    from loguru import Logger


class LogConfig(BaseModel):
    """Конфигурация логирования."""

    level: str = Field(default="INFO", description="Уровень логирования")
    format: str = Field(
        default=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[service_name]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
        ),
        description="Формат лог сообщения",
    )
    rotation: str = Field(default="10 MB", description="Ротация лог-файлов по размеру")
    retention: str = Field(default="7 days", description="Время хранения лог-файлов")
    serialize: bool = Field(default=False, description="Сериализовать логи в JSON")
    enable_file_logging: bool = Field(default=False, description="Включить логирование в файл")
    log_file_path: str = Field(
        default="logs/profile_editor_{time:YYYY-MM-DD}.log",
        description="Путь к файлу логов",
    )


# Уровень, с которым уже настроены обработчики (None - еще не настроены)
_configured_level: str | None = None


def _add_file_handler(config: LogConfig) -> None:
    """Добавляет обработчик записи в файл, если удается создать директорию для логов."""
    # Отсекаем динамическую часть имени файла, чтобы получить директорию
    if "{time" in config.log_file_path:
        log_dir = os.path.dirname(config.log_file_path.split("{time")[0])
    else:
        log_dir = os.path.dirname(config.log_file_path)

    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
        except OSError as exc:
            global_loguru_logger.bind(service_name="Logging").warning(
                f"Не удалось создать директорию для логов '{log_dir}': {exc}. Логирование в файл отключено."
            )
            return

    global_loguru_logger.add(
        config.log_file_path,
        level=config.level,
        format=config.format,
        rotation=config.rotation,
        retention=config.retention,
        serialize=config.serialize,
        encoding="utf-8",
    )


def setup_logger(
    service_name: str,
    log_config: LogConfig | None = None,
    log_level_override: str | None = None,
) -> "Logger":
    """
    Возвращает логгер Loguru, привязанный к имени сервиса/модуля.

    Обработчики (stderr и файл) настраиваются один раз на процесс. Повторный вызов
    перенастраивает их только если передан явный конфиг или изменился уровень логирования,
    поэтому модули могут свободно вызывать функцию при импорте.

    Args:
        service_name: Имя сервиса/модуля (например, "ProfileEditor", "StorageClient", "BotMain").
        log_config: Объект конфигурации LogConfig. Если None, используются значения по умолчанию.
        log_level_override: Переопределяет уровень логирования из конфигурации.

    Returns:
        Экземпляр логгера Loguru с `service_name` в `extra`.
    """
    global _configured_level

    current_config = log_config.model_copy() if log_config is not None else LogConfig()

    # Применяем переопределения, если они есть
    level = (log_level_override or current_config.level).upper()
    current_config.level = level

    service_logger = global_loguru_logger.bind(service_name=service_name)

    if _configured_level is not None and log_config is None and (log_level_override is None or level == _configured_level):
        return service_logger

    # Удаляем все предыдущие обработчики, чтобы избежать дублирования
    global_loguru_logger.remove()

    # Значение по умолчанию для записей, сделанных без bind (например, из сторонних библиотек)
    global_loguru_logger.configure(extra={"service_name": "-"})

    global_loguru_logger.add(
        sys.stderr,
        level=current_config.level,
        format=current_config.format,
        colorize=True,
        serialize=current_config.serialize,
    )

    if current_config.enable_file_logging:
        _add_file_handler(current_config)

    _configured_level = level
    service_logger.debug(f"Loguru сконфигурирован. Уровень: {current_config.level}")
    return service_logger


__all__ = ["setup_logger", "LogConfig"]
