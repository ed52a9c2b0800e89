"""
TaskBoard Backend — File Service Unit Tests
=============================================

What:  Tests for FileService validation, storage and cleanup.
How:   Each test gets a FileService rooted in a temporary directory.

Test Strategy:
    ✅ Allowed image extensions, case-insensitive
    ✅ Rejected extensions (.pdf, .exe, none)
    ✅ Size limits (empty, over settings.max_upload_size)
    ✅ Stored files get a UUID name and a /uploads public path
    ✅ Cleanup by absolute or public path, never outside the directory
"""

import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from app.config import settings
from app.exceptions import FileStorageError, ValidationError
from app.services.file_service import FileService


@pytest.fixture
def service(temp_storage):
    return FileService(upload_dir=temp_storage)


class TestFileValidation:

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize(
        "filename", ["photo.png", "photo.jpg", "photo.jpeg", "anim.gif", "pic.webp"]
    )
    def test_allowed_extensions(self, service, filename):
        assert service.validate_extension(filename) == Path(filename).suffix

    def test_extension_is_case_insensitive(self, service):
        assert service.validate_extension("photo.JPG") == ".jpg"
        assert service.validate_extension("photo.Jpeg") == ".jpeg"

    @pytest.mark.parametrize("filename", ["document.pdf", "malware.exe", "noextension"])
    def test_rejected_extensions(self, service, filename):
        with pytest.raises(ValidationError, match="not supported") as exc_info:
            service.validate_extension(filename)
        assert exc_info.value.field == "image"

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self, service):
        service.validate_size(None, 1000)

    def test_size_at_limit(self, service):
        service.validate_size(settings.max_upload_size, settings.max_upload_size)

    def test_size_over_limit(self, service):
        with pytest.raises(ValidationError, match="too large"):
            service.validate_size(None, settings.max_upload_size + 1)

    def test_reported_size_over_limit(self, service):
        with pytest.raises(ValidationError, match="too large"):
            service.validate_size(settings.max_upload_size + 1, 10)

    def test_empty_file(self, service):
        with pytest.raises(ValidationError, match="empty"):
            service.validate_size(0, 0)


class TestFileStorage:

    @pytest.mark.asyncio
    async def test_validate_and_store_writes_file(self, service, temp_storage, sample_image_bytes):
        absolute_path, public_path = await service.validate_and_store(
            filename="My Photo.PNG",
            content=sample_image_bytes,
            content_length=len(sample_image_bytes),
        )

        stored = Path(absolute_path)
        assert stored.parent == Path(temp_storage).resolve()
        assert stored.read_bytes() == sample_image_bytes
        # User-supplied name never reaches disk
        assert uuid.UUID(stored.stem)
        assert stored.suffix == ".png"
        assert public_path == f"/uploads/{stored.name}"

    @pytest.mark.asyncio
    async def test_rejected_file_is_not_written(self, service, temp_storage):
        with pytest.raises(ValidationError):
            await service.validate_and_store("notes.txt", b"hello")

        assert list(Path(temp_storage).iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_failure_raises_file_storage_error(self, service, sample_image_bytes):
        with patch("aiofiles.open", side_effect=OSError("disk full")):
            with pytest.raises(FileStorageError):
                await service.store_file(sample_image_bytes, ".png")

    def test_resolve_public_path(self, service):
        resolved = service.resolve_public_path("/uploads/abc.png")
        assert resolved == service.upload_dir / "abc.png"

    @pytest.mark.parametrize(
        "public_path", ["/static/abc.png", "/uploads/../secret.txt", "/uploads/a/b.png"]
    )
    def test_resolve_public_path_rejects_outside_paths(self, service, public_path):
        assert service.resolve_public_path(public_path) is None


class TestFileCleanup:

    @pytest.mark.asyncio
    async def test_cleanup_by_absolute_path(self, service, tmp_path):
        test_file = tmp_path / "test.jpg"
        test_file.write_bytes(b"test content")

        await service.cleanup_file(str(test_file))

        assert not test_file.exists()

    @pytest.mark.asyncio
    async def test_cleanup_by_public_path(self, service, sample_image_bytes):
        absolute_path, public_path = await service.store_file(sample_image_bytes, ".png")

        await service.cleanup_file(public_path)

        assert not Path(absolute_path).exists()

    @pytest.mark.asyncio
    async def test_cleanup_nonexistent_file(self, service, tmp_path):
        await service.cleanup_file(str(tmp_path / "nonexistent.jpg"))

    @pytest.mark.asyncio
    async def test_cleanup_refuses_traversal(self, service, tmp_path):
        outside = Path(service.upload_dir).parent / "keep.txt"
        outside.write_text("keep")

        await service.cleanup_file("/uploads/../keep.txt")

        assert outside.exists()
