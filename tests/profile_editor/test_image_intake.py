import json

import httpx
import pytest

from src.profile_editor.core.config import DEFAULT_MAX_IMAGE_SIZE_BYTES
from src.profile_editor.core.exceptions import IMAGE_TOO_LARGE_MESSAGE, ImageTooLargeError

# Помечаем все тесты в модуле как асинхронные
pytestmark = pytest.mark.asyncio


def ok_storage(calls: list[httpx.Request]):
    """Обработчик хранилища, считающий запросы и возвращающий secure_url."""

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"secure_url": f"https://cdn/{len(calls)}.png"})

    return handler


@pytest.mark.parametrize("size", [DEFAULT_MAX_IMAGE_SIZE_BYTES + 1, DEFAULT_MAX_IMAGE_SIZE_BYTES * 2])
async def test_oversized_image_is_rejected(make_editor, make_image, size):
    """Изображение больше 2 MiB отклоняется, выбор и предпросмотр сбрасываются, загрузка не начинается."""
    calls: list[httpx.Request] = []
    editor = make_editor(storage_handler=ok_storage(calls))

    with pytest.raises(ImageTooLargeError) as exc_info:
        editor.select_image(make_image(size))

    assert exc_info.value.message == IMAGE_TOO_LARGE_MESSAGE
    assert editor.selected_image is None
    assert editor.upload_state.error == IMAGE_TOO_LARGE_MESSAGE
    assert editor.upload_state.in_progress is False
    assert editor.upload_task is None
    assert calls == []


async def test_oversized_image_clears_previous_selection(make_editor, make_image):
    """Отклоненный выбор убирает ранее принятое изображение и его предпросмотр."""
    editor = make_editor(storage_handler=ok_storage([]))

    editor.select_image(make_image(1_000))
    await editor.wait_for_upload()
    assert editor.selected_image is not None

    with pytest.raises(ImageTooLargeError):
        editor.select_image(make_image(DEFAULT_MAX_IMAGE_SIZE_BYTES + 1))

    assert editor.selected_image is None
    # Аватар снова берется из записи пользователя
    assert editor.avatar_url == "https://cdn/default.png"


@pytest.mark.parametrize("size", [1, 500_000, DEFAULT_MAX_IMAGE_SIZE_BYTES])
async def test_accepted_image_starts_exactly_one_upload(make_editor, make_image, size):
    """Изображение до 2 MiB включительно принимается и запускает ровно одну загрузку."""
    calls: list[httpx.Request] = []
    editor = make_editor(storage_handler=ok_storage(calls))

    selected = editor.select_image(make_image(size))

    assert selected is not None
    assert selected.size == size
    assert selected.preview_url.startswith("data:image/png;base64,")
    assert editor.upload_state.in_progress is True

    await editor.wait_for_upload()

    assert len(calls) == 1
    assert editor.upload_state.in_progress is False


async def test_accepted_image_clears_previous_error(make_editor, make_image):
    """Успешный выбор после отклоненного убирает сообщение об ошибке."""
    editor = make_editor(storage_handler=ok_storage([]))

    with pytest.raises(ImageTooLargeError):
        editor.select_image(make_image(DEFAULT_MAX_IMAGE_SIZE_BYTES + 1))

    editor.select_image(make_image(10))

    assert editor.upload_state.error is None
    await editor.wait_for_upload()


async def test_cancelled_selection_is_noop(make_editor):
    """Отмена выбора файла (None) ничего не меняет."""
    editor = make_editor()

    assert editor.select_image(None) is None
    assert editor.selected_image is None
    assert editor.upload_task is None
    assert editor.upload_state.in_progress is False


async def test_upload_request_carries_file_and_preset(make_editor, make_image):
    """Запрос в хранилище - multipart с файлом и upload_preset."""
    captured: dict[str, bytes] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = request.content
        captured["content_type"] = request.headers["Content-Type"].encode()
        return httpx.Response(200, content=json.dumps({"secure_url": "https://cdn/x.png"}))

    editor = make_editor(storage_handler=handler)
    editor.select_image(make_image(100, filename="me.png"))
    await editor.wait_for_upload()

    assert captured["content_type"].startswith(b"multipart/form-data; boundary=")
    assert b'name="upload_preset"' in captured["body"]
    assert b"test-preset" in captured["body"]
    assert b'name="file"; filename="me.png"' in captured["body"]
