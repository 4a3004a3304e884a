"""
Определение состояний FSM (Finite State Machine) для сценариев работы с профилем.
"""

from aiogram.fsm.state import State, StatesGroup


class SignIn(StatesGroup):
    """
    Группа состояний для входа в аккаунт.

    1. waiting_for_email: Ожидание ввода email.
    2. waiting_for_password: Ожидание ввода пароля.
    """

    waiting_for_email = State()
    waiting_for_password = State()


class ProfileEdit(StatesGroup):
    """
    Группа состояний для редактирования полей профиля (Menu-based editing).

    - waiting_for_username: Ожидание ввода нового имени пользователя.
    - waiting_for_email: Ожидание ввода нового email.
    - waiting_for_password: Ожидание ввода нового пароля.
    """

    waiting_for_username = State()
    waiting_for_email = State()
    waiting_for_password = State()
