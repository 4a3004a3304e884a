"""
Обработчики раздела "Профиль".

Панель профиля показывает текущие данные пользователя, состояние загрузки аватара
и черновик изменений. Фото, отправленное в чат, становится новым аватаром
(загрузка запускается сразу), текстовые поля редактируются через FSM,
кнопка "Обновить" отправляет черновик в Backend API.
"""

import io
from contextlib import suppress
from html import escape

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.fsm.state import State
from aiogram.types import CallbackQuery, Message

from src.bot.core.enums import ProfileAction, ProfileField
from src.bot.keyboards.callbacks import ProfileActionCallback
from src.bot.keyboards.inline import get_profile_keyboard
from src.bot.keyboards.reply import BTN_PROFILE
from src.bot.services.session_registry import ProfileSession, ProfileSessionRegistry
from src.bot.states.profile_states import ProfileEdit
from src.core_shared.logging_setup import setup_logger
from src.profile_editor.core.exceptions import ImageValidationError, SubmissionError
from src.profile_editor.schemas import SelectedImage

# Настраиваем логгер
log = setup_logger("BotProfileHandlers")

# Создаем роутер
router = Router(name="profile_handlers")

NOT_SIGNED_IN_TEXT = "🔐 Сначала войдите в аккаунт: /signin"

# Словарь для переключений состояний - dict[Action, tuple[text, new_state]]
FIELD_PROMPTS: dict[ProfileAction, tuple[str, State]] = {
    ProfileAction.EDIT_USERNAME: (
        "Введите новое <b>имя пользователя</b>:",
        ProfileEdit.waiting_for_username,
    ),
    ProfileAction.EDIT_EMAIL: (
        "Введите новый <b>email</b>:",
        ProfileEdit.waiting_for_email,
    ),
    ProfileAction.EDIT_PASSWORD: (
        "Введите новый <b>пароль</b>:",
        ProfileEdit.waiting_for_password,
    ),
}


def _format_profile_text(session: ProfileSession) -> str:
    """
    Формирует текст панели профиля.

    Args:
        session (ProfileSession): Сессия пользователя.

    Returns:
        str: HTML-текст панели.
    """
    user = session.store.get_current_user()
    editor = session.editor
    upload = editor.upload_state

    lines = [
        "👤 <b>Ваш профиль</b>\n",
        f"🪪 Имя пользователя: <b>{escape(user.username)}</b>" if user else "",
        f"📧 Email: <b>{escape(user.email)}</b>" if user else "",
    ]

    # Локальный data: URI предпросмотра в чате не показываем
    avatar_url = editor.avatar_url
    if avatar_url and not avatar_url.startswith("data:"):
        lines.append(f'🖼 Аватар: <a href="{escape(avatar_url)}">открыть</a>')

    if upload.in_progress:
        lines.append(f"\n⏳ Uploading Image... {upload.progress or 0}%")
    if upload.error:
        lines.append(f"\n⚠️ {escape(upload.error)}")

    if editor.draft:
        pending = ", ".join(f"<code>{escape(key)}</code>" for key in editor.draft)
        lines.append(f"\n📝 Несохраненные изменения: {pending}")

    lines.append("\n<i>Отправьте фото (до 2 МБ), чтобы сменить аватар.</i>")
    return "\n".join(line for line in lines if line)


async def _download_image(message: Message, bot: Bot) -> SelectedImage | None:
    """
    Скачивает изображение из сообщения (фото или документ image/*).

    Returns:
        SelectedImage | None: Изображение или None, если в сообщении нет изображения.
    """
    if message.photo:
        # Берем самый крупный вариант фото
        photo = message.photo[-1]
        file_id = photo.file_id
        filename = f"{photo.file_unique_id}.jpg"
        content_type = "image/jpeg"
    elif message.document and (message.document.mime_type or "").startswith("image/"):
        file_id = message.document.file_id
        filename = message.document.file_name or message.document.file_unique_id
        content_type = message.document.mime_type or "image/jpeg"
    else:
        return None

    buffer = io.BytesIO()
    await bot.download(file_id, destination=buffer)

    return SelectedImage(filename=filename, content=buffer.getvalue(), content_type=content_type)


@router.message(Command("profile"))
@router.message(F.text == BTN_PROFILE)
async def show_profile(message: Message, sessions: ProfileSessionRegistry) -> None:
    """
    Отображает панель профиля.

    Args:
        message (Message): Объект сообщения Telegram.
        sessions (ProfileSessionRegistry): Реестр сессий профиля.
    """
    if not message.from_user:
        return

    session = sessions.get(message.from_user.id)
    if not session.store.is_authenticated:
        await message.answer(NOT_SIGNED_IN_TEXT)
        return

    await message.answer(_format_profile_text(session), reply_markup=get_profile_keyboard())


@router.message(F.photo | F.document)
async def process_avatar(message: Message, bot: Bot, sessions: ProfileSessionRegistry) -> None:
    """
    Принимает новое изображение аватара и дожидается результата его загрузки.

    Пока загрузка идет, пользователь может редактировать поля; отправка изменений
    в это время отклоняется редактором.

    Args:
        message (Message): Сообщение с фото или документом.
        bot (Bot): Экземпляр бота (для скачивания файла).
        sessions (ProfileSessionRegistry): Реестр сессий профиля.
    """
    if not message.from_user:
        return

    session = sessions.get(message.from_user.id)
    if not session.store.is_authenticated:
        await message.answer(NOT_SIGNED_IN_TEXT)
        return

    image = await _download_image(message, bot)
    if image is None:
        await message.answer("⚠️ Отправьте изображение (фото или файл с типом image/*).")
        return

    try:
        session.editor.select_image(image)
    except ImageValidationError as exc:
        await message.answer(f"⚠️ {exc.message}")
        return

    processing_msg = await message.answer("⏳ Uploading Image...")

    try:
        await session.editor.wait_for_upload()
    finally:
        with suppress(Exception):
            await processing_msg.delete()

    upload = session.editor.upload_state
    if upload.error:
        await message.answer(f"❌ {upload.error}. Отправьте изображение еще раз.")
        return

    if upload.in_progress:
        # Ожидаемая загрузка была заменена более новой - о ней сообщит свой хендлер
        return

    await message.answer(
        "✅ Аватар загружен (100%). Нажмите «💾 Обновить», чтобы сохранить изменения.",
        reply_markup=get_profile_keyboard(),
    )


@router.callback_query(
    ProfileActionCallback.filter(
        F.action.in_({ProfileAction.EDIT_USERNAME, ProfileAction.EDIT_EMAIL, ProfileAction.EDIT_PASSWORD})
    )
)
async def start_editing_field(
    callback: CallbackQuery, callback_data: ProfileActionCallback, state: FSMContext
) -> None:
    """
    Запускает редактирование поля профиля.

    Args:
        callback (CallbackQuery): Объект колбэка.
        callback_data (ProfileActionCallback): Данные с действием.
        state (FSMContext): Контекст машины состояний.
    """
    # Всегда отвечаем на callback, чтобы убрать часики загрузки у кнопки
    await callback.answer()

    if callback_data.action not in FIELD_PROMPTS or not callback.message:
        return

    text, new_state = FIELD_PROMPTS[callback_data.action]

    await state.set_state(new_state)
    await callback.message.answer(text + "\n\n<i>Или /cancel для отмены.</i>")


async def _save_field(message: Message, state: FSMContext, sessions: ProfileSessionRegistry, field: ProfileField) -> None:
    """
    Записывает введенное значение поля в черновик.

    Args:
        message (Message): Сообщение с новым значением.
        state (FSMContext): Контекст машины состояний.
        sessions (ProfileSessionRegistry): Реестр сессий профиля.
        field (ProfileField): Редактируемое поле.
    """
    if not message.from_user:
        return

    if not message.text or not message.text.strip():
        await message.answer("⚠️ Пожалуйста, отправьте значение текстом или нажмите /cancel.")
        return

    value = message.text.strip()

    if field is ProfileField.PASSWORD:
        # Пароль не должен оставаться в истории чата
        with suppress(Exception):
            await message.delete()

    session = sessions.get(message.from_user.id)
    session.editor.edit_field(field, value)
    await state.clear()

    await message.answer(_format_profile_text(session), reply_markup=get_profile_keyboard())


@router.message(ProfileEdit.waiting_for_username)
async def process_new_username(message: Message, state: FSMContext, sessions: ProfileSessionRegistry) -> None:
    """Обработка ввода нового имени пользователя."""
    await _save_field(message, state, sessions, ProfileField.USERNAME)


@router.message(ProfileEdit.waiting_for_email)
async def process_new_email(message: Message, state: FSMContext, sessions: ProfileSessionRegistry) -> None:
    """Обработка ввода нового email."""
    await _save_field(message, state, sessions, ProfileField.EMAIL)


@router.message(ProfileEdit.waiting_for_password)
async def process_new_password(message: Message, state: FSMContext, sessions: ProfileSessionRegistry) -> None:
    """Обработка ввода нового пароля."""
    await _save_field(message, state, sessions, ProfileField.PASSWORD)


@router.callback_query(ProfileActionCallback.filter(F.action == ProfileAction.SUBMIT))
async def submit_profile(callback: CallbackQuery, sessions: ProfileSessionRegistry) -> None:
    """
    Отправляет черновик изменений в Backend API.

    Args:
        callback (CallbackQuery): Объект колбэка от кнопки 'Обновить'.
        sessions (ProfileSessionRegistry): Реестр сессий профиля.
    """
    await callback.answer()

    if not callback.message:
        return

    session = sessions.get(callback.from_user.id)

    try:
        outcome = await session.editor.submit()
    except SubmissionError as exc:
        await callback.message.answer(f"❌ {escape(exc.message)}")
        return

    log.info(f"Профиль пользователя {callback.from_user.id} обновлен.")
    await callback.message.answer(
        f"✅ {outcome.success}\n\n{_format_profile_text(session)}", reply_markup=get_profile_keyboard()
    )
