import io
import os
import uuid

from PIL import Image, UnidentifiedImageError


def _ext_from_mime(mime_type: str) -> str:
    mime = (mime_type or "").lower()
    if mime == "image/png":
        return ".png"
    if mime in {"image/jpeg", "image/jpg"}:
        return ".jpg"
    if mime == "image/webp":
        return ".webp"
    return ".bin"


class LocalMediaStore:
    """Writes image bytes under ``root_dir`` and returns the URL they are served at."""

    def __init__(self, root_dir: str, url_prefix: str):
        self.root_dir = root_dir
        self.url_prefix = url_prefix.rstrip("/")

    def save_image_bytes(self, image_bytes: bytes, mime_type: str) -> str:
        os.makedirs(self.root_dir, exist_ok=True)
        filename = f"{uuid.uuid4()}{_ext_from_mime(mime_type)}"
        with open(os.path.join(self.root_dir, filename), "wb") as f:
            f.write(image_bytes)
        return f"{self.url_prefix}/{filename}"


def sniff_image_mime(image_bytes: bytes) -> str:
    """Return the MIME type of an image payload, raising ValueError if it is not one."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img.verify()
            fmt = img.format
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("uploaded file is not a readable image") from exc
    mime = Image.MIME.get(fmt or "")
    if not mime:
        raise ValueError(f"unsupported image format: {fmt}")
    return mime
