"""
Перечисления (Enums) для бота.

Используются для избежания "магических строк" в callback_data и хендлерах.
"""

from enum import StrEnum


class ProfileField(StrEnum):
    """Редактируемые текстовые поля профиля (ключи черновика)."""

    USERNAME = "username"
    EMAIL = "email"
    PASSWORD = "password"


class ProfileAction(StrEnum):
    """Действия в профиле."""

    EDIT_USERNAME = "edit_username"  # Изменить имя пользователя
    EDIT_EMAIL = "edit_email"  # Изменить email
    EDIT_PASSWORD = "edit_password"  # Изменить пароль
    SUBMIT = "submit"  # Отправить изменения
