import os
import uuid
from typing import Iterable, Optional

from fastapi import UploadFile

from app.config import settings
from app.utils.errors import BadRequest, NotFound

URL_PREFIX = "/uploads"


def file_extension(filename: Optional[str]) -> str:
    name = filename or ""
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def store_file(content: bytes, filename: str, subfolder: str = "") -> str:
    """업로드 루트 아래에 저장하고 ``/uploads/...`` 형태의 locator를 반환한다."""
    folder = os.path.join(settings.UPLOAD_DIR, subfolder)
    os.makedirs(folder, exist_ok=True)

    ext = file_extension(filename)
    stored_name = f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex
    with open(os.path.join(folder, stored_name), "wb") as f:
        f.write(content)

    return f"{URL_PREFIX}/{subfolder}/{stored_name}".replace("\\", "/").replace("//", "/")


def _resolve_locator(locator: str) -> str:
    if not locator or not locator.startswith(URL_PREFIX + "/"):
        raise NotFound("File not found")
    root = os.path.realpath(settings.UPLOAD_DIR)
    relative = locator[len(URL_PREFIX) + 1:]
    path = os.path.realpath(os.path.join(root, relative))
    if os.path.commonpath([root, path]) != root:
        raise NotFound("File not found")
    return path


def retrieve_file(locator: str) -> bytes:
    path = _resolve_locator(locator)
    if not os.path.isfile(path):
        raise NotFound("File not found")
    with open(path, "rb") as f:
        return f.read()


async def save_upload(
    file: UploadFile,
    subfolder: str,
    allowed_extensions: Iterable[str],
    max_size: int,
) -> dict:
    ext = file_extension(file.filename)
    allowed = {e.lower() for e in allowed_extensions}
    if ext not in allowed:
        raise BadRequest(f"File type '{ext}' not allowed. Allowed: {', '.join(sorted(allowed))}")

    content = await file.read()
    if len(content) > max_size:
        raise BadRequest(f"File exceeds {max_size // (1024 * 1024)} MB limit")

    return {
        "filename": file.filename,
        "url": store_file(content, file.filename, subfolder=subfolder),
        "size": len(content),
    }
