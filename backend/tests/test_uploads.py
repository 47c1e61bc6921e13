"""Tests for upload validation and on-disk storage of visa documents."""
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from travel_portal.core.config import settings
from travel_portal.models.visa import VisaDocument
from travel_portal.services import uploads
from travel_portal.services.uploads import UploadRejected, build_file_name, validate_upload


class FakeUser:
    id = uuid.UUID("f96955d0-752f-4e0c-b1dc-d26d8dd1460e")
    email = "alice.tan@example.com"


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


# ─── Validation ───────────────────────────────────────────────────────────────

def test_accepts_pdf():
    validate_upload(b"%PDF-1.4 data", "application/pdf")


def test_rejects_empty_file():
    with pytest.raises(UploadRejected, match="Empty"):
        validate_upload(b"", "application/pdf")


def test_rejects_oversized_file():
    with pytest.raises(UploadRejected, match="5MB"):
        validate_upload(b"x" * (5 * 1024 * 1024 + 1), "application/pdf")


def test_file_at_limit_is_accepted():
    validate_upload(b"x" * (5 * 1024 * 1024), "image/png")


def test_rejects_disallowed_type():
    with pytest.raises(UploadRejected, match="Invalid file type"):
        validate_upload(b"MZ", "application/x-msdownload")


# ─── Naming ───────────────────────────────────────────────────────────────────

def test_file_name_uses_owner_type_and_timestamp():
    when = datetime(2025, 7, 2, 14, 23, tzinfo=timezone.utc)
    name = build_file_name("VIS-20250702-1423-JPN-AB12", "passport", "Scan.PDF", "application/pdf", when)
    assert name == f"VIS-20250702-1423-JPN-AB12_passport_{int(when.timestamp() * 1000)}.pdf"


def test_file_name_falls_back_to_content_type_extension():
    name = build_file_name("VIS-1", "photo", None, "image/jpeg")
    assert name.endswith(".jpg")


def test_file_name_strips_path_characters():
    name = build_file_name("VIS-1", "../../etc", "x.png", "image/png")
    assert "/" not in name


# ─── Storage ──────────────────────────────────────────────────────────────────

def test_ensure_upload_dirs_creates_visa_folder(upload_dir):
    uploads.ensure_upload_dirs()
    assert (upload_dir / "visa-documents").is_dir()


def test_remove_missing_file_is_not_an_error(upload_dir):
    uploads.remove_file(str(upload_dir / "gone.pdf"))


@pytest.mark.asyncio
async def test_store_visa_document_writes_file_and_row(upload_dir):
    db = MagicMock()
    db.commit = AsyncMock()

    document = await uploads.store_visa_document(
        db, "VIS-20250702-1423-JPN-AB12", b"%PDF-1.4", "passport.pdf", "application/pdf", "passport", FakeUser()
    )

    assert isinstance(document, VisaDocument)
    assert document.size_bytes == 8
    assert document.file_name == "passport.pdf"
    saved = list((upload_dir / "visa-documents").iterdir())
    assert len(saved) == 1
    assert saved[0].read_bytes() == b"%PDF-1.4"
    db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_commit_removes_stored_file(upload_dir):
    db = MagicMock()
    db.commit = AsyncMock(side_effect=RuntimeError("db down"))

    with pytest.raises(RuntimeError):
        await uploads.store_visa_document(
            db, "VIS-1", b"\x89PNG", "photo.png", "image/png", "photo", FakeUser()
        )
    assert list((upload_dir / "visa-documents").iterdir()) == []


@pytest.mark.asyncio
async def test_rejected_upload_touches_nothing(upload_dir):
    db = MagicMock()
    with pytest.raises(UploadRejected):
        await uploads.store_visa_document(db, "VIS-1", b"", "x.pdf", "application/pdf", "passport", FakeUser())
    db.add.assert_not_called()
    assert not (upload_dir / "visa-documents").exists()
