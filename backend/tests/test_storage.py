"""Test Storage 동작과 회귀 시나리오를 검증하는 자동화 테스트입니다."""

import shutil
from pathlib import Path
from uuid import uuid4

import pytest

from app.config import settings
from app.utils.errors import NotFound
from app.utils.helpers import file_extension, retrieve_file, store_file


@pytest.fixture
def upload_dir(monkeypatch):
    test_upload_dir = Path("test_uploads_runtime") / uuid4().hex / "uploads"
    test_upload_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(test_upload_dir))
    yield test_upload_dir
    shutil.rmtree(test_upload_dir.parent.parent, ignore_errors=True)


def test_store_and_retrieve(upload_dir):
    locator = store_file(b"hello", "notes.TXT", subfolder="docs")
    assert locator.startswith("/uploads/docs/")
    assert locator.endswith(".txt")
    assert retrieve_file(locator) == b"hello"


def test_store_generates_unique_names(upload_dir):
    first = store_file(b"a", "same.png", subfolder="avatars")
    second = store_file(b"b", "same.png", subfolder="avatars")
    assert first != second
    assert retrieve_file(first) == b"a"
    assert retrieve_file(second) == b"b"


def test_retrieve_unknown_locator_not_found(upload_dir):
    with pytest.raises(NotFound):
        retrieve_file("/uploads/avatars/missing.png")
    with pytest.raises(NotFound):
        retrieve_file("/elsewhere/file.png")
    with pytest.raises(NotFound):
        retrieve_file("")


def test_retrieve_rejects_path_traversal(upload_dir):
    outside = upload_dir.parent / "secret.txt"
    outside.write_bytes(b"secret")
    with pytest.raises(NotFound):
        retrieve_file("/uploads/../secret.txt")


def test_file_extension():
    assert file_extension("photo.JPG") == "jpg"
    assert file_extension("archive.tar.gz") == "gz"
    assert file_extension("README") == ""
    assert file_extension(None) == ""
