"""
Reply-клавиатура главного меню.
"""

from aiogram.types import ReplyKeyboardMarkup
from aiogram.utils.keyboard import ReplyKeyboardBuilder

# Тексты кнопок главного меню (используются и как фильтры хендлеров)
BTN_PROFILE = "👤 Профиль"
BTN_SIGN_OUT = "🚪 Выйти"


def get_main_menu_keyboard() -> ReplyKeyboardMarkup:
    """Генерирует клавиатуру главного меню."""
    builder = ReplyKeyboardBuilder()
    builder.button(text=BTN_PROFILE)
    builder.button(text=BTN_SIGN_OUT)
    builder.adjust(2)
    return builder.as_markup(resize_keyboard=True)
