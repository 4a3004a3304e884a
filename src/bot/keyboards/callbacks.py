"""
Определение структур CallbackData для Inline-кнопок.

Модуль использует aiogram.filters.callback_data для создания типизированных
объектов, которые сериализуются в строку (например, "profile:submit") и
автоматически парсятся обратно в объект при нажатии кнопки.
"""

from aiogram.filters.callback_data import CallbackData

from src.bot.core.enums import ProfileAction


class ProfileActionCallback(CallbackData, prefix="profile"):
    """
    Данные, связанные с действиями в профиле.

    Attributes:
        action (ProfileAction): Тип действия.
            Возможные значения:
            - "edit_username": Изменить имя пользователя.
            - "edit_email": Изменить email.
            - "edit_password": Изменить пароль.
            - "submit": Отправить изменения.
    """

    action: ProfileAction
