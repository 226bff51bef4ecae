from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

# Фото профиля не больше этого размера по длинной стороне
MAX_SIDE = 1600


def compress_image_bytes(data: bytes, quality: int = 85) -> tuple[bytes, str]:
    """
    Готовит фото профиля к загрузке:
    - поворачивает по EXIF и выбрасывает метаданные;
    - уменьшает до MAX_SIDE по длинной стороне;
    - WebP остаётся WebP, всё остальное сохраняется в JPEG.

    Возвращает (bytes, ext), где ext: "webp" или "jpg".
    Бросает ValueError, если данные не являются изображением.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("Uploaded file is not an image") from exc

    orig_fmt = (img.format or "JPEG").upper()
    img = ImageOps.exif_transpose(img)
    img.thumbnail((MAX_SIDE, MAX_SIDE))

    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buf = BytesIO()
    if orig_fmt == "WEBP":
        img.save(buf, "WEBP", quality=quality)
        ext = "webp"
    else:
        img.save(buf, "JPEG", quality=quality, optimize=True, progressive=True)
        ext = "jpg"

    return buf.getvalue(), ext
