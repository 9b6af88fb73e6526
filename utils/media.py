"""Upload handling for optional complaint and missing-person media."""
import io
import os
import uuid
from typing import Dict, Tuple

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}
ALLOWED_VIDEO_EXTENSIONS = {"mp4", "mov", "webm"}
ALLOWED_MEDIA_EXTENSIONS = ALLOWED_IMAGE_EXTENSIONS | ALLOWED_VIDEO_EXTENSIONS
DEFAULT_MAX_MEDIA_BYTES = 25 * 1024 * 1024
PUBLIC_MEDIA_PREFIX = "/uploads/"

# Pillow format names for the accepted image extensions.
_IMAGE_FORMATS = {"JPEG", "PNG", "WEBP", "GIF"}


def _fail_if(condition: bool, message: str) -> None:
    if condition:
        raise ValueError(message)


def has_upload(file: FileStorage | None) -> bool:
    return bool(file and file.filename)


def validate_media_file(file: FileStorage, max_bytes: int = DEFAULT_MAX_MEDIA_BYTES) -> Tuple[bytes, str]:
    _fail_if(not file, "No file provided")
    filename = secure_filename(file.filename or "")
    _fail_if(not filename or "." not in filename, "Unsupported file name")
    ext = filename.rsplit(".", 1)[1].lower()
    _fail_if(ext not in ALLOWED_MEDIA_EXTENSIONS, "File type not allowed")

    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    _fail_if(size == 0, "Empty file")
    _fail_if(size > max_bytes, "File exceeds size limits")

    content = file.read()
    _fail_if(len(content) > max_bytes, "File exceeds size limits")

    if ext in ALLOWED_IMAGE_EXTENSIONS:
        try:
            with Image.open(io.BytesIO(content)) as img:
                detected = img.format
                img.verify()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Invalid image data") from exc
        _fail_if(detected not in _IMAGE_FORMATS, "Invalid image data")

    file.stream.seek(0)
    return content, ext


def save_media_bytes(content: bytes, upload_dir: str, extension: str) -> Tuple[str, str]:
    os.makedirs(upload_dir, exist_ok=True)
    safe_name = secure_filename(f"{uuid.uuid4().hex}.{extension}")
    path = os.path.join(upload_dir, safe_name)
    with open(path, "wb") as handle:
        handle.write(content)
    return path, safe_name


def persist_media(file: FileStorage, upload_dir: str, max_bytes: int = DEFAULT_MAX_MEDIA_BYTES) -> Dict:
    """Validate and store an upload, returning its disk path and public reference."""
    content, ext = validate_media_file(file, max_bytes=max_bytes)
    stored_path, stored_name = save_media_bytes(content, upload_dir, ext)
    return {
        "path": stored_path,
        "file_name": stored_name,
        "extension": ext,
        "public_path": f"{PUBLIC_MEDIA_PREFIX}{stored_name}",
        "size": len(content),
    }
