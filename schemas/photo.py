from typing import Optional

from pydantic import BaseModel, Field


class PhotoRead(BaseModel):
    id: int = Field(..., description="PK в базе данных")
    url: str = Field(..., description="URL изображения")
    is_main: bool = Field(..., description="Признак главной фотографии")
    public_id: Optional[str] = Field(None, description="Ключ объекта в хранилище")

    class Config:
        from_attributes = True
        validate_by_name = True
