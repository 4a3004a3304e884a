"""
Исключения редактора профиля.

Все сообщения предназначены для показа пользователю. Ни одна из ошибок не является фатальной:
после любой из них редактор остается в рабочем состоянии и шаг можно повторить.
"""

# Сообщения, показываемые пользователю
IMAGE_TOO_LARGE_MESSAGE = "Image must be less than 2MB"
UPLOAD_FAILED_MESSAGE = "Upload failed"
UPLOAD_ERROR_MESSAGE = "Upload error"
NO_CHANGES_MESSAGE = "No changes Made"
UPLOAD_PENDING_MESSAGE = "Please wait for image upload"
UPDATE_SUCCESS_MESSAGE = "User's profile updated successfully"


class ProfileEditorError(Exception):
    """
    Базовое исключение редактора профиля.

    Attributes:
        message (str): Сообщение для пользователя.
    """

    default_message = "Profile editor error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# --- Выбор изображения ---


class ImageValidationError(ProfileEditorError):
    """Выбранный файл не прошел проверку."""


class ImageTooLargeError(ImageValidationError):
    """Размер изображения превышает допустимый."""

    default_message = IMAGE_TOO_LARGE_MESSAGE


# --- Загрузка изображения ---


class UploadError(ProfileEditorError):
    """Базовая ошибка попытки загрузки изображения."""


class UploadServerError(UploadError):
    """Хранилище приняло запрос, но не вернуло пригодный URL."""

    default_message = UPLOAD_FAILED_MESSAGE


class UploadTransportError(UploadError):
    """Запрос к хранилищу завершился ошибкой (сеть, таймаут, некорректный ответ)."""

    default_message = UPLOAD_ERROR_MESSAGE


# --- Отправка изменений ---


class SubmissionError(ProfileEditorError):
    """Базовая ошибка отправки черновика."""


class NoChangesError(SubmissionError):
    """Черновик пуст - отправлять нечего."""

    default_message = NO_CHANGES_MESSAGE


class UploadPendingError(SubmissionError):
    """Отправка невозможна, пока идет загрузка изображения."""

    default_message = UPLOAD_PENDING_MESSAGE


class NotSignedInError(SubmissionError):
    """В хранилище сессии нет текущего пользователя."""

    default_message = "Sign in to update your profile"


class ServerRejectedError(SubmissionError):
    """Backend API отклонил обновление (не-2xx ответ)."""


class SubmissionTransportError(SubmissionError):
    """Запрос на обновление не удалось выполнить (сеть, таймаут, некорректный ответ)."""
