"""Схемы состояния выбора и загрузки изображения."""

import base64

from pydantic import Field

from .base_schema import BaseSchema


class SelectedImage(BaseSchema):
    """
    Локально выбранное изображение, прошедшее проверку размера.

    Attributes:
        filename (str): Имя файла.
        content (bytes): Содержимое файла.
        content_type (str): MIME-тип (image/*).
        preview_url (str | None): Ссылка для предпросмотра - сначала локальный data: URI,
            после успешной загрузки заменяется постоянным URL из хранилища.
    """

    filename: str = Field(default="avatar", description="Имя файла")
    content: bytes = Field(..., repr=False, description="Содержимое файла")
    content_type: str = Field(default="image/jpeg", description="MIME-тип файла")
    preview_url: str | None = Field(default=None, repr=False, description="Ссылка для предпросмотра")

    @property
    def size(self) -> int:
        """Размер файла в байтах."""
        return len(self.content)

    def make_local_preview(self) -> str:
        """Формирует временную локальную ссылку предпросмотра (data: URI)."""
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class UploadState(BaseSchema):
    """
    Состояние текущей попытки загрузки изображения.

    Attributes:
        in_progress (bool): Идет ли загрузка.
        progress (int | None): Прогресс в процентах [0, 100].
        error (str | None): Сообщение об ошибке последней попытки.
    """

    in_progress: bool = False
    progress: int | None = Field(default=None, ge=0, le=100)
    error: str | None = None


class SubmissionOutcome(BaseSchema):
    """Результат последней отправки черновика. Поля взаимоисключающие."""

    success: str | None = None
    error: str | None = None
