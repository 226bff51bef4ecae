import uuid
from io import BytesIO

from minio import Minio
from minio.error import S3Error

from core.config import settings
from utils.image_tools import compress_image_bytes

# ==== Настройка клиента MinIO ====
_endpoint = settings.AWS_S3_ENDPOINT_URL.replace("https://", "").replace("http://", "")
_s3 = Minio(
    _endpoint,
    access_key=settings.AWS_ACCESS_KEY_ID,
    secret_key=settings.AWS_SECRET_ACCESS_KEY,
    region=settings.AWS_S3_REGION,
    secure=settings.AWS_S3_ENDPOINT_URL.startswith("https://"),
)


class StorageError(Exception):
    """Хранилище фотографий вернуло ошибку."""


def build_photo_url(s3_key: str) -> str:
    return f"{settings.s3_base_url}/{s3_key}"


def upload_file_to_s3(file_like, user_id: int, bucket_name: str) -> tuple[str, str]:
    """
    Нормализует изображение и кладёт его в S3.
    Возвращает (url, s3_key).
    Бросает ValueError, если файл не изображение, StorageError при проблемах с S3.
    """
    data = file_like.read()
    compressed_data, ext = compress_image_bytes(data, quality=85)

    s3_key = f"users/{user_id}/{uuid.uuid4().hex}.{ext}"
    try:
        _s3.put_object(
            bucket_name,
            s3_key,
            BytesIO(compressed_data),
            length=len(compressed_data),
            content_type=f"image/{'jpeg' if ext == 'jpg' else ext}",
        )
    except S3Error as e:
        raise StorageError(f"Upload to storage failed: {e}") from e

    return build_photo_url(s3_key), s3_key


def delete_file_from_s3(s3_key: str, bucket_name: str) -> None:
    try:
        _s3.remove_object(bucket_name, s3_key)
    except S3Error as e:
        raise StorageError(f"Delete from storage failed: {e}") from e
