"""Базовые конфигурации и схемы для Pydantic."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Базовая схема Pydantic с общей конфигурацией."""

    model_config = ConfigDict(
        populate_by_name=True,  # Позволяет использовать как имя поля, так и alias
        extra="ignore",  # Игнорировать лишние поля при парсинге
    )
