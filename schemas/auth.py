from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=4, max_length=128)
    known_as: str = Field(..., max_length=100, description="Отображаемое имя")
    gender: Literal["male", "female"]
    date_of_birth: date = Field(..., description="Дата рождения (YYYY-MM-DD)")
    city: Optional[str] = Field(None, max_length=64)
    country: Optional[str] = Field(None, max_length=64)


class LoginRequest(BaseModel):
    username: str
    password: str


class AccountRead(BaseModel):
    """
    Ответ при успешной регистрации или логине.
    """
    username: str
    token: str
    known_as: Optional[str] = None
    gender: str
    photo_url: Optional[str] = None
