"""
Обработчики общих команд бота (/start, /cancel, /signin, /signout).

Эти обработчики доступны из любого состояния и служат точками входа или выхода из сценариев.
"""

from contextlib import suppress

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message
from pydantic import ValidationError

from src.bot.keyboards.reply import BTN_SIGN_OUT, get_main_menu_keyboard
from src.bot.services.session_registry import ProfileSessionRegistry
from src.bot.states.profile_states import SignIn
from src.core_shared.logging_setup import setup_logger
from src.profile_editor.schemas import SignInRequest
from src.profile_editor.services import AccountClientError

# Настраиваем логгер
log = setup_logger("BotCommonHandlers")

# Создаем роутер
router = Router(name="common_commands")


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext, sessions: ProfileSessionRegistry) -> None:
    """
    Обработчик команды /start.

    Сбрасывает активное состояние FSM и отправляет приветствие с Главным меню.

    Args:
        message (Message): Объект сообщения Telegram.
        state (FSMContext): Контекст машины состояний.
        sessions (ProfileSessionRegistry): Реестр сессий профиля.
    """
    # Гарантированно сбрасываем состояние диалога при рестарте
    await state.clear()

    if not message.from_user:
        return

    session = sessions.get(message.from_user.id)
    hint = (
        "Откройте <b>👤 Профиль</b>, чтобы изменить аватар и данные аккаунта."
        if session.store.is_authenticated
        else "Для начала войдите в аккаунт: /signin"
    )

    await message.answer(
        f"Привет, <b>{message.from_user.first_name}</b>! 👋\n\n{hint}",
        reply_markup=get_main_menu_keyboard(),
    )
    log.info(f"Пользователь {message.from_user.id} запустил бота (/start).")


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext) -> None:
    """
    Команда отмены текущего действия (/cancel).

    Сбрасывает текущее состояние FSM. Черновик изменений профиля при этом сохраняется.

    Args:
        message (Message): Объект сообщения Telegram.
        state (FSMContext): Контекст машины состояний.
    """
    current_state = await state.get_state()

    if current_state is None:
        await message.answer("Нет активных действий для отмены.", reply_markup=get_main_menu_keyboard())
        return

    await state.clear()

    log.info(f"Пользователь {message.from_user.id} отменил действие (было состояние: {current_state}).")

    await message.answer("❌ Действие отменено.\nВозвращаюсь в главное меню.", reply_markup=get_main_menu_keyboard())


# ==============================================================================
# Вход в аккаунт (FSM: SignIn)
# ==============================================================================


@router.message(Command("signin"))
async def cmd_sign_in(message: Message, state: FSMContext) -> None:
    """Начало входа в аккаунт: запрашиваем email."""
    await state.clear()
    await message.answer("🔐 <b>Вход в аккаунт</b>\n\nВведите ваш <b>email</b>:")
    await state.set_state(SignIn.waiting_for_email)


@router.message(SignIn.waiting_for_email)
async def process_sign_in_email(message: Message, state: FSMContext) -> None:
    """Сохраняет email и запрашивает пароль."""
    if not message.text or not message.text.strip():
        await message.answer("⚠️ Пожалуйста, отправьте email текстом.")
        return

    await state.update_data(email=message.text.strip())
    await message.answer("Введите <b>пароль</b>:")
    await state.set_state(SignIn.waiting_for_password)


@router.message(SignIn.waiting_for_password)
async def process_sign_in_password(message: Message, state: FSMContext, sessions: ProfileSessionRegistry) -> None:
    """
    Выполняет вход в аккаунт и записывает пользователя в хранилище сессии.

    Args:
        message (Message): Объект сообщения Telegram.
        state (FSMContext): Контекст машины состояний.
        sessions (ProfileSessionRegistry): Реестр сессий профиля.
    """
    if not message.from_user or not message.text:
        await message.answer("⚠️ Пожалуйста, отправьте пароль текстом.")
        return

    data = await state.get_data()
    password = message.text

    # Пароль не должен оставаться в истории чата
    with suppress(Exception):
        await message.delete()

    try:
        credentials = SignInRequest(email=data.get("email", ""), password=password)
    except ValidationError:
        await message.answer("⚠️ Email и пароль не должны быть пустыми. Попробуйте еще раз: /signin")
        await state.clear()
        return

    # Новый вход - новая сессия с пустым черновиком
    session = await sessions.reset(message.from_user.id)
    session.store.sign_in_start()

    try:
        user = await session.account_client.sign_in(credentials)
    except AccountClientError as exc:
        session.store.sign_in_failure(exc.message)
        log.warning(f"Пользователь {message.from_user.id} не смог войти: {exc.message}")
        await message.answer(f"❌ Не удалось войти: {exc.message}\nПопробуйте еще раз: /signin")
    else:
        session.store.sign_in_success(user)
        await message.answer(
            f"✅ Вы вошли как <b>{user.username}</b>.", reply_markup=get_main_menu_keyboard()
        )
    finally:
        await state.clear()


@router.message(Command("signout"))
@router.message(F.text == BTN_SIGN_OUT)
async def cmd_sign_out(message: Message, state: FSMContext, sessions: ProfileSessionRegistry) -> None:
    """Выход из аккаунта: сессия и черновик пользователя сбрасываются."""
    await state.clear()

    if not message.from_user:
        return

    sessions.get(message.from_user.id).store.sign_out()
    await sessions.reset(message.from_user.id)

    await message.answer("👋 Вы вышли из аккаунта. Чтобы войти снова: /signin", reply_markup=get_main_menu_keyboard())
