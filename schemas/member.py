from typing import Optional, List
from datetime import datetime, date

from pydantic import BaseModel, Field

from schemas.photo import PhotoRead


class MemberRead(BaseModel):
    id: int = Field(..., description="PK в базе данных")
    username: str = Field(..., description="Имя пользователя (логин)")
    age: int = Field(..., description="Возраст на сегодняшний день")
    known_as: Optional[str] = Field(None, description="Отображаемое имя")
    photo_url: Optional[str] = Field(None, description="URL главной фотографии")
    gender: str = Field(..., description="Пол")
    introduction: Optional[str] = Field(None, description="О себе")
    looking_for: Optional[str] = Field(None, description="Кого ищет")
    interests: Optional[str] = Field(None, description="Интересы")
    city: Optional[str] = Field(None, description="Город")
    country: Optional[str] = Field(None, description="Страна")
    created_at: datetime = Field(..., description="Дата и время создания аккаунта")
    last_active: datetime = Field(..., description="Последняя активность")
    photos: List[PhotoRead] = Field([], description="Фотографии профиля")

    class Config:
        from_attributes = True
        validate_by_name = True


class MemberUpdate(BaseModel):
    introduction: Optional[str] = Field(None, description="О себе")
    looking_for: Optional[str] = Field(None, description="Кого ищет")
    interests: Optional[str] = Field(None, description="Интересы")
    city: Optional[str] = Field(None, max_length=64, description="Город")
    country: Optional[str] = Field(None, max_length=64, description="Страна")
