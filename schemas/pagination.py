from pydantic import BaseModel, Field


class PaginationHeader(BaseModel):
    """Содержимое заголовка Pagination."""

    current_page: int = Field(..., alias="currentPage")
    items_per_page: int = Field(..., alias="itemsPerPage")
    total_items: int = Field(..., alias="totalItems")
    total_pages: int = Field(..., alias="totalPages")

    class Config:
        validate_by_name = True
