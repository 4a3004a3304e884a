"""Инициализация модуля сервисов редактора профиля."""

from .account_client import AccountClient, AccountClientError
from .profile_editor import PROFILE_PICTURE_FIELD, ProfileEditor, compute_progress
from .session_store import InMemorySessionStore, SessionStore
from .storage_client import StorageClient, StorageClientError

__all__ = [
    "AccountClient",
    "AccountClientError",
    "InMemorySessionStore",
    "PROFILE_PICTURE_FIELD",
    "ProfileEditor",
    "SessionStore",
    "StorageClient",
    "StorageClientError",
    "compute_progress",
]
