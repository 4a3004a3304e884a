"""Схемы Pydantic редактора профиля."""

from .base_schema import BaseSchema
from .upload_schema import SelectedImage, SubmissionOutcome, UploadState
from .user_schema import CurrentUser, SignInRequest

__all__ = [
    "BaseSchema",
    "CurrentUser",
    "SelectedImage",
    "SignInRequest",
    "SubmissionOutcome",
    "UploadState",
]
