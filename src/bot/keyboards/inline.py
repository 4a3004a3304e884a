"""
Генераторы Inline-клавиатур (кнопок под сообщениями).
"""

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from src.bot.core.enums import ProfileAction
from src.bot.keyboards.callbacks import ProfileActionCallback


def get_profile_keyboard() -> InlineKeyboardMarkup:
    """
    Генерирует клавиатуру панели профиля.

    Включает кнопки редактирования полей и кнопку отправки изменений.

    Returns:
        InlineKeyboardMarkup: Клавиатура с действиями.
    """
    builder = InlineKeyboardBuilder()

    builder.button(text="✏️ Имя пользователя", callback_data=ProfileActionCallback(action=ProfileAction.EDIT_USERNAME))
    builder.button(text="📧 Email", callback_data=ProfileActionCallback(action=ProfileAction.EDIT_EMAIL))
    builder.button(text="🔑 Пароль", callback_data=ProfileActionCallback(action=ProfileAction.EDIT_PASSWORD))
    builder.button(text="💾 Обновить", callback_data=ProfileActionCallback(action=ProfileAction.SUBMIT))

    # Макет: три кнопки полей в ряд, кнопка отправки отдельной строкой
    builder.adjust(3, 1)

    return builder.as_markup()
