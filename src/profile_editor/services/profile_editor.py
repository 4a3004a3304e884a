"""
Редактор профиля пользователя.

Объединяет три процесса:
1. Выбор и проверку изображения аватара (`select_image`).
2. Асинхронную загрузку изображения в хранилище с отслеживанием прогресса (`upload_image`).
3. Накопление изменений в черновике и их отправку в Backend API (`edit_field`, `submit`).

Все операции выполняются в одном event loop. Загрузка запускается автоматически
при каждом успешном выборе изображения и идет независимо от редактирования полей.
Отправка черновика не ждет загрузку, а сразу отклоняется, пока загрузка не завершена.
"""

import asyncio
import math
from collections.abc import Callable
from typing import Any

from src.profile_editor.core.config import settings
from src.profile_editor.core.exceptions import (
    UPDATE_SUCCESS_MESSAGE,
    ImageTooLargeError,
    NoChangesError,
    NotSignedInError,
    ServerRejectedError,
    SubmissionError,
    SubmissionTransportError,
    UploadError,
    UploadPendingError,
    UploadServerError,
    UploadTransportError,
)
from src.profile_editor.core.logging import editor_log as log
from src.profile_editor.schemas import SelectedImage, SubmissionOutcome, UploadState
from src.profile_editor.services.account_client import AccountClient, AccountClientError
from src.profile_editor.services.session_store import SessionStore
from src.profile_editor.services.storage_client import StorageClient, StorageClientError

# Ключ черновика, в который попадает URL загруженного аватара
PROFILE_PICTURE_FIELD = "profilePicture"

# Слушатель прогресса загрузки: получает процент [0, 100]
ProgressListener = Callable[[int], None]


def compute_progress(sent: int, total: int) -> int:
    """
    Вычисляет прогресс загрузки в процентах.

    Args:
        sent (int): Передано байт.
        total (int): Всего байт.

    Returns:
        int: sent * 100 / total, округленный до целого (половина - вверх) и ограниченный диапазоном [0, 100].
    """
    if total <= 0:
        return 0
    return max(0, min(100, math.floor(sent * 100 / total + 0.5)))


class ProfileEditor:
    """
    Состояние и операции панели редактирования профиля.

    Attributes:
        selected_image (SelectedImage | None): Текущее выбранное изображение.
        upload_state (UploadState): Состояние последней попытки загрузки.
        draft (dict[str, Any]): Черновик изменений (username, email, password, profilePicture).
        outcome (SubmissionOutcome): Результат последней отправки черновика.
        upload_task (asyncio.Task | None): Задача последней запущенной загрузки.
    """

    def __init__(
        self,
        session_store: SessionStore,
        storage_client: StorageClient,
        account_client: AccountClient,
        max_image_size: int | None = None,
    ):
        """
        Инициализирует редактор с пустым черновиком.

        Args:
            session_store (SessionStore): Хранилище сессии с записью текущего пользователя.
            storage_client (StorageClient): Клиент хранилища изображений.
            account_client (AccountClient): Клиент Backend API аккаунта.
            max_image_size (int | None): Максимальный размер изображения в байтах. По умолчанию из настроек.
        """
        self.session_store = session_store
        self.storage_client = storage_client
        self.account_client = account_client
        self.max_image_size = max_image_size or settings.MAX_IMAGE_SIZE_BYTES

        self.selected_image: SelectedImage | None = None
        self.upload_state = UploadState()
        self.draft: dict[str, Any] = {}
        self.outcome = SubmissionOutcome()
        self.upload_task: asyncio.Task[None] | None = None

        # Номер последней начатой попытки загрузки. Результаты более ранних попыток отбрасываются.
        self._attempt = 0
        self._progress_listeners: list[ProgressListener] = []

    # --- Чтение состояния ---

    @property
    def avatar_url(self) -> str | None:
        """URL для отображения аватара: предпросмотр/загруженное изображение или текущий аватар пользователя."""
        if self.selected_image and self.selected_image.preview_url:
            return self.selected_image.preview_url

        user = self.session_store.get_current_user()
        return user.profile_picture if user else None

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """Подписывает слушателя на уведомления о прогрессе загрузки."""
        self._progress_listeners.append(listener)

    def remove_progress_listener(self, listener: ProgressListener) -> None:
        """Отписывает слушателя от уведомлений о прогрессе загрузки."""
        if listener in self._progress_listeners:
            self._progress_listeners.remove(listener)

    # --- Выбор изображения ---

    def select_image(self, image: SelectedImage | None) -> SelectedImage | None:
        """
        Принимает выбранное пользователем изображение и запускает его загрузку.

        Должен вызываться из работающего event loop: загрузка планируется как задача asyncio.

        Args:
            image (SelectedImage | None): Выбранный файл. None - пользователь отменил выбор.

        Returns:
            SelectedImage | None: Принятое изображение с локальным предпросмотром или None при отмене.

        Raises:
            ImageTooLargeError: Если размер файла превышает допустимый.
        """
        if image is None:
            return None

        if image.size > self.max_image_size:
            log.info(f"Изображение {image.filename} отклонено: {image.size} байт > {self.max_image_size}.")
            self.selected_image = None
            error = ImageTooLargeError()
            self.upload_state.error = error.message
            raise error

        self.upload_state.error = None
        self.selected_image = image.model_copy(update={"preview_url": image.make_local_preview()})

        # Выбор и загрузка связаны: каждый принятый выбор сразу открывает новую попытку.
        # Попытка открывается синхронно, чтобы отправка черновика сразу видела идущую загрузку.
        attempt = self._begin_attempt(self.selected_image)
        self.upload_task = asyncio.create_task(self._run_attempt(attempt, self.selected_image))
        return self.selected_image

    # --- Загрузка изображения ---

    def _is_current(self, attempt: int) -> bool:
        return attempt == self._attempt

    def _on_transfer_progress(self, attempt: int, sent: int, total: int) -> None:
        """Обрабатывает уведомление транспорта о переданных байтах."""
        self._report_progress(attempt, compute_progress(sent, total))

    def _report_progress(self, attempt: int, progress: int) -> None:
        """Записывает прогресс текущей попытки и уведомляет слушателей."""
        if not self._is_current(attempt):
            return

        # Наблюдаемый прогресс одной попытки не убывает
        if progress < (self.upload_state.progress or 0):
            return

        self.upload_state.progress = progress
        log.debug(f"Загрузка #{attempt}: {progress}%")

        for listener in list(self._progress_listeners):
            # Ошибка слушателя не должна менять результат загрузки
            try:
                listener(progress)
            except Exception as exc:
                log.exception(f"Слушатель прогресса загрузки #{attempt} завершился ошибкой: {exc}")

    async def _transfer(self, attempt: int, image: SelectedImage) -> str:
        """
        Передает изображение в хранилище.

        Returns:
            str: Постоянный URL изображения.

        Raises:
            UploadServerError: Хранилище не вернуло URL.
            UploadTransportError: Запрос не удалось выполнить.
        """
        try:
            secure_url = await self.storage_client.upload_image(
                image, on_progress=lambda sent, total: self._on_transfer_progress(attempt, sent, total)
            )
        except StorageClientError as exc:
            raise UploadTransportError() from exc

        if not secure_url:
            raise UploadServerError()

        return secure_url

    def _begin_attempt(self, image: SelectedImage) -> int:
        """Открывает новую попытку загрузки: сбрасывает состояние и возвращает ее номер."""
        self._attempt += 1
        self.upload_state = UploadState(in_progress=True, progress=0, error=None)
        log.info(f"Загрузка #{self._attempt} начата: {image.filename} ({image.size} байт).")
        return self._attempt

    async def upload_image(self, image: SelectedImage) -> None:
        """
        Выполняет одну попытку загрузки изображения.

        Ошибки не пробрасываются: они записываются в `upload_state.error`, черновик при этом не меняется.
        Если за время загрузки была начата более новая попытка, результат этой попытки отбрасывается.

        Args:
            image (SelectedImage): Изображение, прошедшее проверку.
        """
        await self._run_attempt(self._begin_attempt(image), image)

    async def _run_attempt(self, attempt: int, image: SelectedImage) -> None:
        try:
            secure_url = await self._transfer(attempt, image)
        except UploadError as exc:
            if not self._is_current(attempt):
                log.info(f"Загрузка #{attempt} завершилась ошибкой, но уже заменена попыткой #{self._attempt}.")
                return

            self.upload_state.error = exc.message
            self.upload_state.in_progress = False
            log.warning(f"Загрузка #{attempt} не удалась: {exc.message} ({exc.__cause__ or 'нет secure_url'})")
            return

        if not self._is_current(attempt):
            log.info(f"Результат загрузки #{attempt} отброшен: уже начата попытка #{self._attempt}.")
            return

        if self.selected_image is not None:
            self.selected_image = self.selected_image.model_copy(update={"preview_url": secure_url})
        self.draft[PROFILE_PICTURE_FIELD] = secure_url

        self._report_progress(attempt, 100)
        self.upload_state.in_progress = False
        log.info(f"Загрузка #{attempt} завершена: {secure_url}")

    async def wait_for_upload(self) -> None:
        """Дожидается завершения последней запущенной загрузки (если она есть)."""
        if self.upload_task is not None:
            await self.upload_task

    # --- Черновик и отправка ---

    def edit_field(self, name: str, value: Any) -> None:
        """
        Записывает новое значение поля в черновик (перезаписывая прежнее).

        Args:
            name (str): Имя поля (username, email, password, ...).
            value (Any): Новое значение.
        """
        self.draft[str(name)] = value

    async def _submit_draft(self) -> SubmissionOutcome:
        """Проверяет предусловия и отправляет черновик в Backend API."""
        if not self.draft:
            raise NoChangesError()

        if self.upload_state.in_progress:
            raise UploadPendingError()

        user = self.session_store.get_current_user()
        if user is None:
            raise NotSignedInError()

        self.session_store.update_start()

        try:
            updated_user = await self.account_client.update_user(user.id, dict(self.draft))
        except AccountClientError as exc:
            self.session_store.update_failure(exc.message)
            if exc.is_rejection:
                raise ServerRejectedError(exc.message) from exc
            raise SubmissionTransportError(exc.message) from exc

        self.session_store.update_success(updated_user)
        self.outcome.success = UPDATE_SUCCESS_MESSAGE
        return self.outcome

    async def submit(self) -> SubmissionOutcome:
        """
        Отправляет черновик изменений.

        Перед каждой попыткой результат предыдущей очищается. Черновик после отправки не очищается.

        Returns:
            SubmissionOutcome: Результат с сообщением об успехе.

        Raises:
            NoChangesError: Черновик пуст (запрос не отправляется).
            UploadPendingError: Идет загрузка изображения (запрос не отправляется).
            NotSignedInError: В сессии нет текущего пользователя (запрос не отправляется).
            ServerRejectedError: Backend API отклонил изменения.
            SubmissionTransportError: Запрос не удалось выполнить.
        """
        self.outcome = SubmissionOutcome()

        try:
            return await self._submit_draft()
        except SubmissionError as exc:
            self.outcome.error = exc.message
            log.warning(f"Отправка профиля отклонена: {exc.message}")
            raise
