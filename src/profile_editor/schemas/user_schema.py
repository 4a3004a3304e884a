"""Схемы Pydantic для записи пользователя, получаемой от Backend API."""

from pydantic import ConfigDict, Field

from .base_schema import BaseSchema


class CurrentUser(BaseSchema):
    """
    Запись текущего пользователя (ответ Backend API).

    Хранит все поля, которые вернул сервер, включая неописанные здесь
    (createdAt, updatedAt и т.д.), чтобы запись в сессии совпадала с ответом API.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., alias="_id", description="Идентификатор пользователя в Backend API")
    username: str = Field(..., description="Имя пользователя")
    email: str = Field(..., description="Email пользователя")
    profile_picture: str | None = Field(None, alias="profilePicture", description="URL аватара")
    is_admin: bool = Field(False, alias="isAdmin", description="Признак администратора")

    def to_api(self) -> dict:
        """Возвращает запись в формате Backend API (с оригинальными ключами)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SignInRequest(BaseSchema):
    """Данные для входа в аккаунт."""

    email: str = Field(..., min_length=1, description="Email пользователя")
    password: str = Field(..., min_length=1, description="Пароль пользователя")
