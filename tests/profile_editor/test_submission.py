import asyncio
import json
from unittest.mock import MagicMock

import httpx
import pytest

from src.profile_editor.core.exceptions import (
    NO_CHANGES_MESSAGE,
    UPDATE_SUCCESS_MESSAGE,
    UPLOAD_PENDING_MESSAGE,
    NoChangesError,
    NotSignedInError,
    ServerRejectedError,
    SubmissionTransportError,
    UploadPendingError,
)
from src.profile_editor.schemas import CurrentUser
from src.profile_editor.services import PROFILE_PICTURE_FIELD, InMemorySessionStore, ProfileEditor

# Помечаем все тесты в модуле как асинхронные
pytestmark = pytest.mark.asyncio


def unexpected_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Неожиданный запрос: {request.method} {request.url}")


async def test_submit_empty_draft_is_rejected_without_request(make_editor, session_store):
    """Пустой черновик -> 'No changes Made', запрос не отправляется, хранилище сессии не трогается."""
    editor = make_editor()

    with pytest.raises(NoChangesError):
        await editor.submit()

    assert editor.outcome.error == NO_CHANGES_MESSAGE
    assert editor.outcome.success is None
    assert session_store.loading is False
    assert session_store.error is None


async def test_submit_during_upload_is_rejected_without_request(make_editor, make_image):
    """Пока идет загрузка, отправка отклоняется сразу, без ожидания загрузки."""
    release = asyncio.Event()

    async def storage_handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return httpx.Response(200, json={"secure_url": "https://cdn/x.png"})

    editor = make_editor(storage_handler=storage_handler)
    editor.edit_field("username", "bob")
    editor.select_image(make_image(1_000))

    with pytest.raises(UploadPendingError):
        await editor.submit()

    assert editor.outcome.error == UPLOAD_PENDING_MESSAGE
    assert editor.upload_state.in_progress is True

    release.set()
    await editor.wait_for_upload()


async def test_successful_submit_updates_session(make_editor, session_store, user_record):
    """Успешная отправка -> сообщение об успехе, запись в хранилище сессии заменена ответом сервера."""
    updated_record = {**user_record, "username": "alice2"}
    requests: list[httpx.Request] = []

    def account_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=updated_record)

    editor = make_editor(account_handler=account_handler)
    editor.edit_field("username", "alice2")

    outcome = await editor.submit()

    assert outcome.success == UPDATE_SUCCESS_MESSAGE
    assert outcome.error is None
    assert session_store.get_current_user() == CurrentUser.model_validate(updated_record)
    assert session_store.loading is False

    assert len(requests) == 1
    assert requests[0].method == "PUT"
    assert requests[0].url.path == f"/api/user/update/{user_record['_id']}"
    assert json.loads(requests[0].content) == {"username": "alice2"}


async def test_submit_sends_uploaded_picture_with_fields(make_editor, make_image, user_record):
    """После загрузки URL аватара отправляется вместе с остальными полями."""
    sent_bodies: list[dict] = []

    def storage_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"secure_url": "https://cdn/x.png"})

    def account_handler(request: httpx.Request) -> httpx.Response:
        sent_bodies.append(json.loads(request.content))
        return httpx.Response(200, json={**user_record, "profilePicture": "https://cdn/x.png"})

    editor = make_editor(storage_handler=storage_handler, account_handler=account_handler)
    editor.edit_field("email", "new@example.com")
    editor.select_image(make_image(500_000))
    await editor.wait_for_upload()

    await editor.submit()

    assert sent_bodies == [{"email": "new@example.com", PROFILE_PICTURE_FIELD: "https://cdn/x.png"}]


async def test_rejected_submit_reports_server_message(
    make_storage_client, make_account_client, session_store, user_record
):
    """Отказ сервера с {message} -> сообщение в результате, сигнал update_failure в хранилище сессии."""
    store = MagicMock(wraps=session_store)

    def account_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"success": False, "statusCode": 400, "message": "email taken"})

    editor = ProfileEditor(
        session_store=store,
        storage_client=make_storage_client(unexpected_request),
        account_client=make_account_client(account_handler),
    )
    editor.edit_field("email", "bob@example.com")

    with pytest.raises(ServerRejectedError) as exc_info:
        await editor.submit()

    assert exc_info.value.message == "email taken"
    assert editor.outcome.error == "email taken"
    assert editor.outcome.success is None

    store.update_start.assert_called_once()
    store.update_failure.assert_called_once_with("email taken")
    store.update_success.assert_not_called()

    # Запись пользователя не изменилась
    assert session_store.get_current_user() == CurrentUser.model_validate(user_record)
    assert session_store.error == "email taken"


async def test_rejected_submit_without_message_uses_status(make_editor, session_store):
    """Отказ сервера без тела -> сообщение со статусом ответа."""

    def account_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403)

    editor = make_editor(account_handler=account_handler)
    editor.edit_field("username", "bob")

    with pytest.raises(ServerRejectedError):
        await editor.submit()

    assert editor.outcome.error == "Request failed with status code 403"
    assert session_store.error == editor.outcome.error


async def test_transport_failure_on_submit(make_editor, session_store):
    """Сетевая ошибка -> описание ошибки в результате и в хранилище сессии."""

    def account_handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    editor = make_editor(account_handler=account_handler)
    editor.edit_field("username", "bob")

    with pytest.raises(SubmissionTransportError):
        await editor.submit()

    assert editor.outcome.error == "connection refused"
    assert session_store.error == "connection refused"
    assert session_store.loading is False


async def test_unencodable_draft_value_is_transport_failure(make_editor, session_store):
    """Значение черновика, которое нельзя закодировать в JSON -> ошибка отправки, сессия не зависает в loading."""
    editor = make_editor()
    editor.edit_field("username", {1, 2})

    with pytest.raises(SubmissionTransportError):
        await editor.submit()

    assert "not JSON serializable" in editor.outcome.error
    assert editor.outcome.success is None
    assert session_store.loading is False
    assert session_store.error == editor.outcome.error


async def test_submit_without_signed_in_user(make_storage_client, make_account_client):
    """Без текущего пользователя отправка отклоняется без запроса."""
    store = InMemorySessionStore()
    editor = ProfileEditor(
        session_store=store,
        storage_client=make_storage_client(unexpected_request),
        account_client=make_account_client(unexpected_request),
    )
    editor.edit_field("username", "bob")

    with pytest.raises(NotSignedInError):
        await editor.submit()

    assert editor.outcome.error == NotSignedInError.default_message
    assert store.loading is False


async def test_editing_same_field_twice_keeps_last_value(make_editor):
    """Повторное редактирование поля перезаписывает значение, не добавляя ключей."""
    editor = make_editor()

    editor.edit_field("username", "bob")
    editor.edit_field("username", "bob")
    assert editor.draft == {"username": "bob"}

    editor.edit_field("username", "carol")
    assert editor.draft == {"username": "carol"}


async def test_draft_survives_submit_and_outcome_resets(make_editor, user_record):
    """Черновик не очищается после отправки, результат очищается перед каждой попыткой."""
    responses = iter(
        [
            httpx.Response(200, json={**user_record, "username": "bob"}),
            httpx.Response(409, json={"message": "username taken"}),
        ]
    )

    editor = make_editor(account_handler=lambda request: next(responses))
    editor.edit_field("username", "bob")

    await editor.submit()
    assert editor.draft == {"username": "bob"}
    assert editor.outcome.success == UPDATE_SUCCESS_MESSAGE

    with pytest.raises(ServerRejectedError):
        await editor.submit()

    assert editor.outcome.success is None
    assert editor.outcome.error == "username taken"
    assert editor.draft == {"username": "bob"}
