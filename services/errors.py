from starlette import status


class DomainError(Exception):
    """Базовая ошибка сервисного слоя; main.py превращает её в JSON-ответ."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PersistenceError(DomainError):
    """Сохранение не применило ни одного изменения или упало."""

    status_code = status.HTTP_400_BAD_REQUEST
